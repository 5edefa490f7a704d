"""Service layer for pipeline business logic."""

import hashlib
from collections.abc import Awaitable, Callable, Sequence

from pipeline_registry.exceptions.domain import (
    InvalidArgumentError,
    InvalidMarkerError,
    PipelineAlreadyExistsError,
    PipelineNameMismatchError,
)
from pipeline_registry.models.auth import CallerIdentity
from pipeline_registry.models.pipeline import (
    CreatePipelineRequest,
    CreatePipelineResponse,
    GetPipelineResponse,
    GetPipelineVersionResponse,
    ListPipelineResponse,
    Pipeline,
    PipelineBrief,
    PipelineVersion,
    PipelineVersionBrief,
    PipelineVersions,
    UpdatePipelineRequest,
    UpdatePipelineResponse,
)
from pipeline_registry.repositories.pipeline_repository import (
    PipelineRepository,
    PipelineVersionRepository,
    row_key,
)
from pipeline_registry.services.permission import PermissionGate
from pipeline_registry.services.schedule_guard import ScheduleGuard
from pipeline_registry.services.source_resolver import ResolvedSource, SourceResolver
from pipeline_registry.services.workflow_validator import WorkflowValidator
from pipeline_registry.settings import settings
from pipeline_registry.utils.logger import logger
from pipeline_registry.utils.marker import MarkerCodec


class PipelineService:
    """Service for creating, versioning, listing and deleting pipelines."""

    def __init__(
        self,
        pipeline_repo: PipelineRepository,
        version_repo: PipelineVersionRepository,
        source_resolver: SourceResolver,
        validator: WorkflowValidator,
        permission_gate: PermissionGate,
        schedule_guard: ScheduleGuard,
        marker_codec: MarkerCodec,
        max_desc_length: int = settings.max_desc_length,
        default_max_keys: int = settings.default_max_keys,
        max_keys_limit: int = settings.max_keys_limit,
    ):
        self.pipeline_repo = pipeline_repo
        self.version_repo = version_repo
        self.source_resolver = source_resolver
        self.validator = validator
        self.permission_gate = permission_gate
        self.schedule_guard = schedule_guard
        self.marker_codec = marker_codec
        self.max_desc_length = max_desc_length
        self.default_max_keys = default_max_keys
        self.max_keys_limit = max_keys_limit

    async def create_pipeline(
        self, caller: CallerIdentity, request: CreatePipelineRequest
    ) -> CreatePipelineResponse:
        """Create a pipeline with its first version.

        Args:
            caller: Calling user, becomes the owner
            request: Description and YAML source

        Returns:
            Ids of the new pipeline and version, and the pipeline name

        Raises:
            InvalidArgumentError: If the description or source is invalid
            MalformedDefinitionError: If the YAML is not a valid workflow
            PipelineAlreadyExistsError: If the caller already has a pipeline with that name
            DatabaseError: On storage failure
        """
        self._check_desc(request.desc)
        source = await self.source_resolver.resolve(request, caller)
        name = await self.validator.validate(source.content, caller, request.username)

        if await self.pipeline_repo.get_by_name(name, caller.user_name) is not None:
            logger.error(f"User [{caller.user_name}] already has pipeline [{name}]")
            raise PipelineAlreadyExistsError(name, caller.user_name)

        pipeline = Pipeline(name=name, description=request.desc, owner=caller.user_name)
        version = self._new_version(caller, source)
        pipeline, version = await self.pipeline_repo.create_with_version(pipeline, version)

        logger.info(f"User [{caller.user_name}] created pipeline [{pipeline.id}] named [{name}]")
        return CreatePipelineResponse(
            pipeline_id=pipeline.id or "",
            pipeline_version_id=version.id or "",
            name=name,
        )

    async def update_pipeline(
        self, caller: CallerIdentity, pipeline_id: str, request: UpdatePipelineRequest
    ) -> UpdatePipelineResponse:
        """Store a new version of a pipeline and update its description.

        The YAML must keep the pipeline name; existing versions are never modified.

        Raises:
            InvalidArgumentError: If the description or source is invalid, or the name changed
            MalformedDefinitionError: If the YAML is not a valid workflow
            PipelineNotFoundError: If the pipeline doesn't exist
            AccessDeniedError: If the caller doesn't own the pipeline
            DatabaseError: On storage failure
        """
        self._check_desc(request.desc)
        source = await self.source_resolver.resolve(request, caller)
        name = await self.validator.validate(source.content, caller, request.username)

        pipeline = await self.permission_gate.check_pipeline(caller, pipeline_id)
        if pipeline.name != name:
            logger.error(f"Update of pipeline [{pipeline_id}] tried to rename it to [{name}]")
            raise PipelineNameMismatchError(name, pipeline.name, pipeline_id)

        pipeline.description = request.desc
        version = await self.pipeline_repo.add_version(pipeline, self._new_version(caller, source))

        logger.info(f"User [{caller.user_name}] added version [{version.id}] to [{pipeline_id}]")
        return UpdatePipelineResponse(pipeline_id=pipeline_id, pipeline_version_id=version.id or "")

    async def list_pipelines(
        self,
        caller: CallerIdentity,
        marker: str = "",
        max_keys: int | None = None,
        user_filter: Sequence[str] = (),
        name_filter: Sequence[str] = (),
    ) -> ListPipelineResponse:
        """List pipelines page by page in creation order.

        Non-root callers only see their own pipelines and may not filter by user.

        Raises:
            InvalidArgumentError: If a non-root caller filters by user or max_keys is out of range
            InvalidMarkerError: If the marker cannot be decoded
            DatabaseError: On storage failure
        """
        page_size = self._check_max_keys(max_keys)
        after_pk = self._decode_marker(marker)

        owners = list(user_filter)
        if not caller.is_root:
            if owners:
                logger.error(f"Non-root user [{caller.user_name}] set a user filter")
                raise InvalidArgumentError("Only root user can set user filter")
            owners = [caller.user_name]

        pipelines = await self.pipeline_repo.list_page(after_pk, page_size, owners, name_filter)
        next_marker = await self._next_marker(
            pipelines, lambda pk: self.pipeline_repo.is_last_pk(pk, owners, name_filter)
        )
        return ListPipelineResponse(
            marker=marker,
            next_marker=next_marker,
            truncated=bool(next_marker),
            max_keys=page_size,
            pipeline_list=[PipelineBrief.from_model(p) for p in pipelines],
        )

    async def get_pipeline(
        self,
        caller: CallerIdentity,
        pipeline_id: str,
        marker: str = "",
        max_keys: int | None = None,
        fs_filter: Sequence[str] = (),
    ) -> GetPipelineResponse:
        """Get a pipeline with one page of its versions.

        Raises:
            PipelineNotFoundError: If the pipeline doesn't exist
            AccessDeniedError: If the caller doesn't own the pipeline
            InvalidArgumentError: If max_keys is out of range
            InvalidMarkerError: If the marker cannot be decoded
            DatabaseError: On storage failure
        """
        pipeline = await self.permission_gate.check_pipeline(caller, pipeline_id)
        page_size = self._check_max_keys(max_keys)
        after_pk = self._decode_marker(marker)

        versions = await self.version_repo.list_page(pipeline_id, after_pk, page_size, fs_filter)
        next_marker = await self._next_marker(
            versions, lambda pk: self.version_repo.is_last_pk(pipeline_id, pk, fs_filter)
        )
        return GetPipelineResponse(
            pipeline=PipelineBrief.from_model(pipeline),
            pipeline_versions=PipelineVersions(
                marker=marker,
                next_marker=next_marker,
                truncated=bool(next_marker),
                max_keys=page_size,
                pipeline_version_list=[PipelineVersionBrief.from_model(v) for v in versions],
            ),
        )

    async def get_pipeline_version(
        self, caller: CallerIdentity, pipeline_id: str, version_id: str
    ) -> GetPipelineVersionResponse:
        """Get a pipeline together with one of its versions.

        Raises:
            PipelineNotFoundError: If the pipeline doesn't exist
            PipelineVersionNotFoundError: If the pipeline has no such version
            AccessDeniedError: If the caller doesn't own the pipeline
        """
        pipeline, version = await self.permission_gate.check_pipeline_version(
            caller, pipeline_id, version_id
        )
        return GetPipelineVersionResponse(
            pipeline=PipelineBrief.from_model(pipeline),
            pipeline_version=PipelineVersionBrief.from_model(version),
        )

    async def delete_pipeline(self, caller: CallerIdentity, pipeline_id: str) -> None:
        """Delete a pipeline and all of its versions.

        Raises:
            PipelineNotFoundError: If the pipeline doesn't exist
            AccessDeniedError: If the caller doesn't own the pipeline
            ActiveScheduleError: If a running schedule uses the pipeline
            DatabaseError: On storage failure
        """
        await self.permission_gate.check_pipeline(caller, pipeline_id)
        await self.schedule_guard.check_pipeline_deletable(pipeline_id)
        await self.pipeline_repo.delete_with_versions(pipeline_id)
        logger.info(f"User [{caller.user_name}] deleted pipeline [{pipeline_id}]")

    async def delete_pipeline_version(
        self, caller: CallerIdentity, pipeline_id: str, version_id: str
    ) -> None:
        """Delete a single version of a pipeline.

        Raises:
            PipelineNotFoundError: If the pipeline doesn't exist
            PipelineVersionNotFoundError: If the pipeline has no such version
            AccessDeniedError: If the caller doesn't own the pipeline
            LastVersionError: If it is the only version left
            ActiveScheduleError: If a running schedule uses the version
            DatabaseError: On storage failure
        """
        await self.permission_gate.check_pipeline_version(caller, pipeline_id, version_id)
        await self.schedule_guard.check_version_deletable(pipeline_id, version_id)
        await self.version_repo.delete_version(pipeline_id, version_id)
        logger.info(
            f"User [{caller.user_name}] deleted pipeline [{pipeline_id}] version [{version_id}]"
        )

    def _check_desc(self, desc: str) -> None:
        if len(desc) > self.max_desc_length:
            logger.error(f"Desc of length {len(desc)} exceeds {self.max_desc_length}")
            raise InvalidArgumentError(
                f"desc too long, should be less than {self.max_desc_length}"
            )

    def _check_max_keys(self, max_keys: int | None) -> int:
        if max_keys is None:
            return self.default_max_keys
        if not 1 <= max_keys <= self.max_keys_limit:
            logger.error(f"max_keys [{max_keys}] out of range")
            raise InvalidArgumentError(
                f"max_keys [{max_keys}] should be between 1 and {self.max_keys_limit}"
            )
        return max_keys

    def _decode_marker(self, marker: str) -> int | None:
        # An empty marker starts from the first page
        if not marker:
            return None
        try:
            return self.marker_codec.decode(marker)
        except InvalidMarkerError:
            logger.error(f"Decode marker [{marker}] failed")
            raise

    async def _next_marker(
        self,
        rows: Sequence[Pipeline] | Sequence[PipelineVersion],
        is_last_pk: Callable[[int], Awaitable[bool]],
    ) -> str:
        if not rows:
            return ""
        last_pk = row_key(rows[-1])
        if await is_last_pk(last_pk):
            return ""
        return self.marker_codec.encode(last_pk)

    @staticmethod
    def _new_version(caller: CallerIdentity, source: ResolvedSource) -> PipelineVersion:
        return PipelineVersion(
            fs_id=source.fs_id,
            fs_name=source.fs_name,
            yaml_path=source.yaml_path,
            pipeline_yaml=source.content.decode("utf-8"),
            pipeline_md5=hashlib.md5(source.content).hexdigest(),
            owner=caller.user_name,
        )
