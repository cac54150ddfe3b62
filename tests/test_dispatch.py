"""Tests for the dispatcher: routing, validation and the error boundary."""

import pytest

from core.errors import ArgumentValidationError, UpstreamHTTPError
from core.models import InvocationResult, ToolDescriptor
from tools.dispatch import Dispatcher
from tools.registry import ToolRegistry

ECHO_SCHEMA = {
    "type": "object",
    "properties": {"message": {"type": "string"}, "times": {"type": "integer"}},
    "required": ["message"],
}


@pytest.fixture
def local_registry():
    registry = ToolRegistry()

    async def echo(args):
        return InvocationResult.text(args["message"] * args.get("times", 1))

    async def explode(args):
        raise RuntimeError("kaboom")

    async def upstream_down(args):
        raise UpstreamHTTPError("upload request failed: HTTP 502 Bad Gateway", status_code=502, stage="upload")

    async def wrong_type(args):
        return "not a result"

    async def no_args(args):
        return InvocationResult.text(f"got {len(args)} args")

    registry.register(ToolDescriptor("echo", "Echo", ECHO_SCHEMA), echo)
    registry.register(ToolDescriptor("explode", "Always fails"), explode)
    registry.register(ToolDescriptor("upstream-down", "Upstream fails"), upstream_down)
    registry.register(ToolDescriptor("wrong-type", "Bad handler"), wrong_type)
    registry.register(ToolDescriptor("no-args", "Takes nothing"), no_args)
    registry.freeze()
    return registry


@pytest.fixture
def local_dispatcher(local_registry):
    return Dispatcher(local_registry)


class TestDispatcher:
    """invoke() never raises and always returns an InvocationResult."""

    @pytest.mark.asyncio
    async def test_success_passes_result_through(self, local_dispatcher):
        result = await local_dispatcher.invoke("echo", {"message": "hi", "times": 3})

        assert not result.is_error
        assert result.first_text == "hihihi"

    @pytest.mark.asyncio
    async def test_unknown_tool(self, local_dispatcher):
        result = await local_dispatcher.invoke("__nonexistent__", {})

        assert result.is_error
        assert "__nonexistent__" in result.first_text

    @pytest.mark.asyncio
    async def test_handler_exception_becomes_error_result(self, local_dispatcher):
        result = await local_dispatcher.invoke("explode", {})

        assert result.is_error
        assert result.first_text == "Error executing tool explode: kaboom"

    @pytest.mark.asyncio
    async def test_tool_error_reports_stage(self, local_dispatcher):
        result = await local_dispatcher.invoke("upstream-down", {})

        assert result.is_error
        assert "(upload stage)" in result.first_text
        assert "502" in result.first_text

    @pytest.mark.asyncio
    async def test_non_result_return_is_an_error(self, local_dispatcher):
        result = await local_dispatcher.invoke("wrong-type", {})

        assert result.is_error
        assert "invalid result" in result.first_text

    @pytest.mark.asyncio
    async def test_missing_required_argument(self, local_dispatcher):
        result = await local_dispatcher.invoke("echo", {})

        assert result.is_error
        assert "Invalid arguments for echo" in result.first_text
        assert "message" in result.first_text

    @pytest.mark.asyncio
    async def test_wrong_argument_type(self, local_dispatcher):
        result = await local_dispatcher.invoke("echo", {"message": "hi", "times": "three"})

        assert result.is_error
        assert "times" in result.first_text

    @pytest.mark.asyncio
    async def test_none_arguments_mean_empty_bag(self, local_dispatcher):
        result = await local_dispatcher.invoke("no-args", None)

        assert not result.is_error
        assert result.first_text == "got 0 args"

    @pytest.mark.asyncio
    async def test_validation_can_be_disabled(self, local_registry):
        dispatcher = Dispatcher(local_registry, validate_arguments=False)

        result = await dispatcher.invoke("echo", {"message": "x", "times": 2, "extra": True})

        assert result.first_text == "xx"

    def test_validate_raises_argument_validation_error(self, local_dispatcher, local_registry):
        descriptor = local_registry.resolve("echo").descriptor

        with pytest.raises(ArgumentValidationError):
            local_dispatcher.validate(descriptor, {"message": 42})

    @pytest.mark.asyncio
    async def test_secret_arguments_are_not_logged(self, dispatcher, caplog):
        caplog.set_level("INFO", logger="tools.dispatch")

        await dispatcher.invoke("set-github-token", {"token": "ghp_supersecret"})

        assert "set-github-token" in caplog.text
        assert "ghp_supersecret" not in caplog.text


class TestDispatchCatalog:
    """Calls through the real catalog."""

    @pytest.mark.asyncio
    async def test_convert_unit_freezing_point(self, dispatcher):
        result = await dispatcher.invoke(
            "convertUnit", {"value": 0, "category": "temperature", "fromUnit": "C", "toUnit": "F"}
        )

        assert not result.is_error
        assert result.first_text == "32"

    @pytest.mark.asyncio
    async def test_convert_base_hex_to_binary(self, dispatcher):
        result = await dispatcher.invoke("convertBase", {"number": "ff", "fromBase": 16, "toBase": 2})

        assert not result.is_error
        assert result.first_text == "11111111"

    @pytest.mark.asyncio
    async def test_convert_base_out_of_range(self, dispatcher):
        result = await dispatcher.invoke("convertBase", {"number": "10", "fromBase": 10, "toBase": 37})

        assert result.is_error
        assert "Base must be between 2 and 36" in result.first_text

    @pytest.mark.asyncio
    async def test_unsupported_unit(self, dispatcher):
        result = await dispatcher.invoke(
            "convertUnit", {"value": 1, "category": "length", "fromUnit": "parsec", "toUnit": "m"}
        )

        assert result.is_error
        assert "Unsupported source unit: parsec" in result.first_text

    @pytest.mark.asyncio
    async def test_unknown_category_rejected_by_schema(self, dispatcher):
        result = await dispatcher.invoke(
            "convertUnit", {"value": 1, "category": "speed", "fromUnit": "a", "toUnit": "b"}
        )

        assert result.is_error
        assert "category" in result.first_text

    @pytest.mark.asyncio
    async def test_invalid_repo_rejected_by_schema(self, dispatcher, configured_store):
        result = await dispatcher.invoke("set-github-repo", {"repo": "not a repo"})

        assert result.is_error
        assert await configured_store.get("github-repo") == "octo/images"
