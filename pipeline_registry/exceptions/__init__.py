"""
Exceptions for the pipeline registry.

Domain exceptions live in :mod:`pipeline_registry.exceptions.domain` and are
re-exported here for convenience.
"""

from .domain import (
    AccessDeniedError,
    ActiveScheduleError,
    AuthenticationError,
    AuthorizationError,
    BusinessRuleViolationError,
    DatabaseError,
    EntityAlreadyExistsError,
    EntityNotFoundError,
    FilesystemNotFoundError,
    InvalidArgumentError,
    InvalidMarkerError,
    LastVersionError,
    MalformedDefinitionError,
    PipelineAlreadyExistsError,
    PipelineNameMismatchError,
    PipelineNotFoundError,
    PipelineRegistryError,
    PipelineVersionNotFoundError,
    SourceConflictError,
    SourceDecodeError,
    SourceReadError,
)

__all__ = [
    "AccessDeniedError",
    "ActiveScheduleError",
    "AuthenticationError",
    "AuthorizationError",
    "BusinessRuleViolationError",
    "DatabaseError",
    "EntityAlreadyExistsError",
    "EntityNotFoundError",
    "FilesystemNotFoundError",
    "InvalidArgumentError",
    "InvalidMarkerError",
    "LastVersionError",
    "MalformedDefinitionError",
    "PipelineAlreadyExistsError",
    "PipelineNameMismatchError",
    "PipelineNotFoundError",
    "PipelineRegistryError",
    "PipelineVersionNotFoundError",
    "SourceConflictError",
    "SourceDecodeError",
    "SourceReadError",
]
