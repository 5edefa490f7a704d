"""
Exception handlers for converting domain exceptions to HTTP responses.

Every response body carries the machine-readable error ``code`` and a
human-readable ``detail``.
"""

from typing import TYPE_CHECKING

from fastapi import Request, status
from fastapi.responses import JSONResponse

from pipeline_registry.utils.logger import logger

if TYPE_CHECKING:
    from fastapi import FastAPI

    from pipeline_registry.exceptions.domain import PipelineRegistryError


def _error_response(
    status_code: int, exc: "PipelineRegistryError", default_detail: str
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"code": exc.code, "detail": str(exc) if str(exc) else default_detail},
    )


def setup_exception_handlers(app: "FastAPI") -> None:
    """Register exception handlers for domain exceptions.

    Args:
        app: FastAPI application instance
    """
    from pipeline_registry.exceptions.domain import (
        AuthenticationError,
        AuthorizationError,
        BusinessRuleViolationError,
        DatabaseError,
        EntityAlreadyExistsError,
        EntityNotFoundError,
        InvalidArgumentError,
        MalformedDefinitionError,
    )

    @app.exception_handler(EntityNotFoundError)
    async def handle_entity_not_found(_: Request, exc: EntityNotFoundError) -> JSONResponse:
        """Convert EntityNotFoundError to 404 response."""
        return _error_response(status.HTTP_404_NOT_FOUND, exc, "Resource not found")

    @app.exception_handler(EntityAlreadyExistsError)
    async def handle_entity_already_exists(
        _: Request, exc: EntityAlreadyExistsError
    ) -> JSONResponse:
        """Convert EntityAlreadyExistsError to 409 response."""
        return _error_response(status.HTTP_409_CONFLICT, exc, "Resource already exists")

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(_: Request, exc: AuthenticationError) -> JSONResponse:
        """Convert AuthenticationError to 401 response."""
        return _error_response(status.HTTP_401_UNAUTHORIZED, exc, "Authentication failed")

    @app.exception_handler(AuthorizationError)
    async def handle_authorization_error(_: Request, exc: AuthorizationError) -> JSONResponse:
        """Convert AuthorizationError to 403 response."""
        return _error_response(status.HTTP_403_FORBIDDEN, exc, "Insufficient permissions")

    @app.exception_handler(InvalidArgumentError)
    async def handle_invalid_argument(_: Request, exc: InvalidArgumentError) -> JSONResponse:
        """Convert InvalidArgumentError (including InvalidMarkerError) to 400 response."""
        return _error_response(status.HTTP_400_BAD_REQUEST, exc, "Invalid arguments")

    @app.exception_handler(MalformedDefinitionError)
    async def handle_malformed_definition(
        _: Request, exc: MalformedDefinitionError
    ) -> JSONResponse:
        """Convert MalformedDefinitionError to 400 response."""
        return _error_response(status.HTTP_400_BAD_REQUEST, exc, "Malformed pipeline yaml")

    @app.exception_handler(BusinessRuleViolationError)
    async def handle_business_rule_violation(
        _: Request, exc: BusinessRuleViolationError
    ) -> JSONResponse:
        """Convert BusinessRuleViolationError to 409 response."""
        return _error_response(status.HTTP_409_CONFLICT, exc, "Action not allowed")

    @app.exception_handler(DatabaseError)
    async def handle_database_error(_: Request, exc: DatabaseError) -> JSONResponse:
        """Convert DatabaseError to 500 response."""
        logger.error(f"Database error: {exc}")
        # Don't expose internal database errors to clients
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"code": exc.code, "detail": "Database operation failed"},
        )
