"""
Validation of pipeline YAML.

The registry only needs a validator that parses the YAML, rejects
malformed workflows and returns the canonical pipeline name.
:class:`YamlWorkflowValidator` is the default implementation.
"""

from typing import Any, Protocol

import yaml
from jsonschema import Draft202012Validator

from pipeline_registry.exceptions.domain import MalformedDefinitionError, PipelineRegistryError
from pipeline_registry.models.auth import CallerIdentity
from pipeline_registry.services.filesystem_service import FilesystemService
from pipeline_registry.utils.logger import logger

PIPELINE_NAME_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]{1,49}$"

_STEPS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": {
        "type": "object",
        "properties": {
            "command": {"type": "string"},
            "deps": {"type": "string"},
            "docker_env": {"type": "string"},
            "parameters": {"type": "object"},
            "env": {"type": "object"},
            "artifacts": {"type": "object"},
        },
    },
}

WORKFLOW_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["name"],
    "properties": {
        "name": {"type": "string", "pattern": PIPELINE_NAME_PATTERN},
        "docker_env": {"type": "string"},
        "parallelism": {"type": "integer", "minimum": 1},
        "entry_points": _STEPS_SCHEMA,
        "post_process": {**_STEPS_SCHEMA, "maxProperties": 1},
        "cache": {"type": "object"},
        "failure_options": {
            "type": "object",
            "properties": {"strategy": {"enum": ["fail_fast", "continue"]}},
        },
        "fs_options": {
            "type": "object",
            "properties": {
                "main_fs": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "sub_path": {"type": "string"},
                    },
                },
                "extra_fs": {"type": "array"},
            },
        },
    },
}

_workflow_validator = Draft202012Validator(WORKFLOW_SCHEMA)


class WorkflowValidator(Protocol):
    """Parses and validates pipeline YAML."""

    async def validate(
        self, content: bytes, caller: CallerIdentity, requested_owner: str
    ) -> str:
        """Validate YAML content and return the pipeline name.

        Raises:
            MalformedDefinitionError: If the YAML is not a valid workflow
        """
        ...


def _check_deps(steps: dict[str, Any], section: str) -> None:
    for step_name, step in steps.items():
        deps = (step or {}).get("deps") or ""
        for dep in (d.strip() for d in deps.split(",")):
            if dep and dep not in steps:
                raise MalformedDefinitionError(
                    f"Step [{step_name}] in {section} depends on unknown step [{dep}]"
                )
            if dep == step_name:
                raise MalformedDefinitionError(f"Step [{step_name}] in {section} depends on itself")


class YamlWorkflowValidator:
    """Validates workflow YAML structure and the filesystem it declares."""

    def __init__(self, filesystem_service: FilesystemService):
        self.filesystem_service = filesystem_service

    async def validate(
        self, content: bytes, caller: CallerIdentity, requested_owner: str
    ) -> str:
        """Validate YAML content and return the pipeline name.

        Args:
            content: Raw YAML bytes
            caller: Calling user, used to resolve the declared main filesystem
            requested_owner: Filesystem owner named in the request

        Returns:
            Pipeline name declared in the YAML

        Raises:
            MalformedDefinitionError: If the YAML is not a valid workflow
        """
        try:
            workflow = yaml.safe_load(content.decode("utf-8"))
        except (UnicodeDecodeError, yaml.YAMLError) as e:
            raise MalformedDefinitionError(f"Parse pipeline yaml failed: {e}") from e

        if not isinstance(workflow, dict):
            raise MalformedDefinitionError("Pipeline yaml must be a mapping")

        errors = sorted(_workflow_validator.iter_errors(workflow), key=lambda e: list(e.path))
        if errors:
            location = "/".join(str(p) for p in errors[0].path) or "<root>"
            raise MalformedDefinitionError(
                f"Pipeline yaml is invalid at {location}: {errors[0].message}"
            )

        _check_deps(workflow.get("entry_points") or {}, "entry_points")
        _check_deps(workflow.get("post_process") or {}, "post_process")

        main_fs = (workflow.get("fs_options") or {}).get("main_fs") or {}
        if main_fs.get("name"):
            try:
                await self.filesystem_service.resolve_filesystem(
                    caller, requested_owner, main_fs["name"]
                )
            except PipelineRegistryError as e:
                logger.error(f"Check main fs in pipeline failed: {e}")
                raise MalformedDefinitionError(f"Check main fs in pipeline failed: {e}") from e

        name: str = workflow["name"]
        return name
