"""
Domain exceptions for business logic layer.

These exceptions are used in repositories and services to represent
business logic errors without coupling to HTTP status codes. Every
exception carries a machine-readable ``code`` next to its message.
"""

from typing import ClassVar


class PipelineRegistryError(Exception):
    """Base exception for all pipeline registry errors."""

    code: ClassVar[str] = "InternalError"


# Base domain exceptions
class InvalidArgumentError(PipelineRegistryError):
    """Raised when request arguments are malformed, oversized or conflicting."""

    code = "InvalidArguments"


class MalformedDefinitionError(PipelineRegistryError):
    """Raised when a pipeline YAML fails parsing or semantic validation."""

    code = "MalformedYaml"


class EntityNotFoundError(PipelineRegistryError):
    """Raised when an entity is not found in the database."""

    code = "NotFound"


class EntityAlreadyExistsError(PipelineRegistryError):
    """Raised when trying to create an entity that already exists."""

    code = "DuplicatedName"


class AuthenticationError(PipelineRegistryError):
    """Raised when the caller cannot be identified."""

    code = "AuthenticationFailed"


class AuthorizationError(PipelineRegistryError):
    """Raised when the caller lacks required permissions."""

    code = "AccessDenied"


class BusinessRuleViolationError(PipelineRegistryError):
    """Raised when a business rule is violated."""

    code = "ActionNotAllowed"


class DatabaseError(PipelineRegistryError):
    """Raised when there's a database operation error."""

    code = "InternalError"


# Source exceptions
class SourceConflictError(InvalidArgumentError):
    """Raised when inline YAML is combined with a filesystem source."""


class SourceDecodeError(InvalidArgumentError):
    """Raised when inline YAML is not valid base64."""

    def __init__(self, reason: str):
        super().__init__(f"Decode raw yaml failed: {reason}")


class SourceReadError(InvalidArgumentError):
    """Raised when reading YAML from a filesystem fails."""

    def __init__(self, fs_id: str, path: str, reason: str):
        super().__init__(f"Read file [{path}] from fs [{fs_id}] failed: {reason}")


class InvalidMarkerError(InvalidArgumentError):
    """Raised when a pagination marker cannot be decoded."""

    code = "InvalidMarker"

    def __init__(self, marker: str):
        super().__init__(f"Invalid marker [{marker}]")


# Pipeline exceptions
class PipelineNotFoundError(EntityNotFoundError):
    """Raised when a pipeline is not found."""

    def __init__(self, pipeline_id: str):
        super().__init__(f"Pipeline [{pipeline_id}] not found")


class PipelineVersionNotFoundError(EntityNotFoundError):
    """Raised when a pipeline version is not found."""

    def __init__(self, pipeline_id: str, version_id: str):
        super().__init__(f"Pipeline [{pipeline_id}] version [{version_id}] not found")


class PipelineAlreadyExistsError(EntityAlreadyExistsError):
    """Raised when an owner already has a pipeline with the same name."""

    def __init__(self, name: str, owner: str):
        super().__init__(
            f"User [{owner}] already has pipeline [{name}], cannot create again, use update instead"
        )


class PipelineNameMismatchError(InvalidArgumentError):
    """Raised when an update tries to rename a pipeline through its YAML."""

    def __init__(self, yaml_name: str, stored_name: str, pipeline_id: str):
        super().__init__(
            f"Pipeline name [{yaml_name}] in yaml is not the same as [{stored_name}] "
            f"of pipeline [{pipeline_id}]"
        )


class AccessDeniedError(AuthorizationError):
    """Raised when a caller accesses a resource owned by someone else."""

    def __init__(self, user_name: str, resource: str):
        super().__init__(f"Access denied for user [{user_name}] on {resource}")


class ActiveScheduleError(BusinessRuleViolationError):
    """Raised when deleting something still referenced by a running schedule."""

    def __init__(self, resource: str):
        super().__init__(f"There are running schedules for {resource}, please stop them first")


class LastVersionError(BusinessRuleViolationError):
    """Raised when deleting the only remaining version of a pipeline."""

    def __init__(self, pipeline_id: str, version_id: str):
        super().__init__(
            f"Cannot delete version [{version_id}]: it is the only version of pipeline "
            f"[{pipeline_id}], delete the pipeline instead"
        )


# Filesystem exceptions
class FilesystemNotFoundError(EntityNotFoundError):
    """Raised when a filesystem is not found."""

    def __init__(self, fs_name: str, owner: str):
        super().__init__(f"Filesystem [{fs_name}] of user [{owner}] not found")
