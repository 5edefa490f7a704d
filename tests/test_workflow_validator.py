"""Tests for YAML workflow validation."""

import pytest

from pipeline_registry.exceptions.domain import MalformedDefinitionError
from pipeline_registry.services.workflow_validator import YamlWorkflowValidator
from tests.helpers import workflow_yaml


@pytest.fixture
def validator(filesystem_service) -> YamlWorkflowValidator:
    return YamlWorkflowValidator(filesystem_service)


class TestYamlWorkflowValidator:
    """Tests for YamlWorkflowValidator.validate."""

    @pytest.mark.asyncio
    async def test_returns_name(self, validator, alice):
        assert await validator.validate(workflow_yaml("demo").encode(), alice, "") == "demo"

    @pytest.mark.asyncio
    async def test_minimal_workflow(self, validator, alice):
        assert await validator.validate(b"name: demo\n", alice, "") == "demo"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["1demo", "a", "bad-name", "x" * 51])
    async def test_rejects_bad_name(self, validator, alice, name):
        with pytest.raises(MalformedDefinitionError, match="name"):
            await validator.validate(f"name: '{name}'\n".encode(), alice, "")

    @pytest.mark.asyncio
    async def test_rejects_missing_name(self, validator, alice):
        with pytest.raises(MalformedDefinitionError):
            await validator.validate(b"docker_env: python:3.12\n", alice, "")

    @pytest.mark.asyncio
    async def test_rejects_non_mapping(self, validator, alice):
        with pytest.raises(MalformedDefinitionError, match="mapping"):
            await validator.validate(b"- a\n- b\n", alice, "")

    @pytest.mark.asyncio
    async def test_rejects_invalid_yaml(self, validator, alice):
        with pytest.raises(MalformedDefinitionError, match="Parse pipeline yaml failed"):
            await validator.validate(b"name: [demo\n", alice, "")

    @pytest.mark.asyncio
    async def test_rejects_non_utf8(self, validator, alice):
        with pytest.raises(MalformedDefinitionError):
            await validator.validate(b"name: \xff\xfe\n", alice, "")

    @pytest.mark.asyncio
    async def test_rejects_unknown_dep(self, validator, alice):
        content = workflow_yaml("demo").replace("deps: preprocess", "deps: missing")
        with pytest.raises(MalformedDefinitionError, match="unknown step"):
            await validator.validate(content.encode(), alice, "")

    @pytest.mark.asyncio
    async def test_rejects_self_dep(self, validator, alice):
        content = workflow_yaml("demo").replace("deps: preprocess", "deps: train")
        with pytest.raises(MalformedDefinitionError, match="itself"):
            await validator.validate(content.encode(), alice, "")

    @pytest.mark.asyncio
    async def test_rejects_two_post_process_steps(self, validator, alice):
        extra = (
            "post_process:\n"
            "  notify:\n"
            "    command: echo done\n"
            "  cleanup:\n"
            "    command: rm -rf tmp\n"
        )
        with pytest.raises(MalformedDefinitionError, match="post_process"):
            await validator.validate(workflow_yaml("demo", extra).encode(), alice, "")

    @pytest.mark.asyncio
    async def test_rejects_unknown_main_fs(self, validator, alice, fs_root):
        extra = "fs_options:\n  main_fs:\n    name: missing\n"
        with pytest.raises(MalformedDefinitionError, match="main fs"):
            await validator.validate(workflow_yaml("demo", extra).encode(), alice, "")

    @pytest.mark.asyncio
    async def test_accepts_known_main_fs(self, validator, alice, fs_root):
        extra = "fs_options:\n  main_fs:\n    name: data\n"
        assert await validator.validate(workflow_yaml("demo", extra).encode(), alice, "") == "demo"

    @pytest.mark.asyncio
    async def test_main_fs_of_other_owner_needs_root(self, validator, bob, root, fs_root):
        content = workflow_yaml("demo", "fs_options:\n  main_fs:\n    name: data\n").encode()
        with pytest.raises(MalformedDefinitionError):
            await validator.validate(content, bob, "alice")
        assert await validator.validate(content, root, "alice") == "demo"
