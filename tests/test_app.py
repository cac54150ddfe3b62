"""Tests for the HTTP app, docs page and MCP protocol binding."""

import httpx
import pytest
from mcp import types
from starlette.testclient import TestClient

from core.models import ImageBlock, InvocationResult, TextBlock, ToolDescriptor
from tools.app import create_app
from tools.dispatch import Dispatcher
from tools.docs_page import describe_parameters, render_docs_page
from tools.mcp_server import SERVER_NAME, create_server, to_mcp_content
from tools.registry import ToolRegistry


@pytest.fixture
def app(settings, configured_store, upstreams):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(upstreams.handle))
    return create_app(settings, store=configured_store, http_client=http_client)


@pytest.fixture
def client(app):
    return TestClient(app)


class TestRoutes:

    def test_docs_page_lists_every_tool(self, client, app):
        response = client.get("/", headers={"host": "tools.example.com"})

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        for descriptor in app.state.registry.list_descriptors():
            assert descriptor.name in response.text
        assert "https://tools.example.com/sse" in response.text

    def test_docs_page_honors_forwarded_proto(self, client):
        response = client.get("/", headers={"host": "localhost:3001", "x-forwarded-proto": "http"})

        assert "http://localhost:3001/message" in response.text

    def test_post_without_session_id(self, client):
        assert client.post("/message", content=b"{}").status_code == 400

    def test_post_with_malformed_session_id(self, client):
        assert client.post("/message?session_id=zzz", content=b"{}").status_code == 400

    def test_post_to_unknown_session(self, client):
        response = client.post(
            "/message?session_id=" + "b" * 32,
            json={"jsonrpc": "2.0", "id": 1, "method": "tools/list"},
        )

        assert response.status_code == 404

    def test_registry_is_frozen(self, app):
        assert app.state.registry.frozen
        assert len(app.state.sessions) == 0


class TestDocsPage:

    def test_describe_parameters_marks_optional(self):
        descriptor = ToolDescriptor(
            "t",
            "d",
            {
                "type": "object",
                "properties": {
                    "a": {"type": "string", "description": "first"},
                    "b": {"type": "integer", "description": "second"},
                },
                "required": ["a"],
            },
        )

        assert describe_parameters(descriptor) == "Parameters:\n- a: first\n- b (optional): second"

    def test_no_parameters(self):
        assert describe_parameters(ToolDescriptor("t", "d")) == ""

    def test_html_is_escaped(self):
        page = render_docs_page([ToolDescriptor("<script>", "a & b")], "https://h")

        assert "&lt;script&gt;" in page
        assert "a &amp; b" in page


class TestMcpServer:
    """Request handlers registered on the protocol server."""

    @pytest.fixture
    def server(self, registry, dispatcher):
        return create_server(registry, dispatcher)

    @pytest.mark.asyncio
    async def test_list_tools_in_registry_order(self, server, registry):
        handler = server.request_handlers[types.ListToolsRequest]

        result = await handler(types.ListToolsRequest(method="tools/list"))

        tools = result.root.tools
        assert [t.name for t in tools] == [d.name for d in registry.list_descriptors()]
        assert tools[4].inputSchema["required"] == ["number", "fromBase", "toBase"]

    @pytest.mark.asyncio
    async def test_call_tool_success(self, server):
        handler = server.request_handlers[types.CallToolRequest]
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(
                name="convertBase", arguments={"number": "ff", "fromBase": 16, "toBase": 2}
            ),
        )

        result = (await handler(request)).root

        assert not result.isError
        assert result.content[0].text == "11111111"

    @pytest.mark.asyncio
    async def test_call_tool_error_result(self, server):
        handler = server.request_handlers[types.CallToolRequest]
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="__nonexistent__", arguments={}),
        )

        result = (await handler(request)).root

        assert result.isError
        assert "__nonexistent__" in result.content[0].text

    @pytest.mark.asyncio
    async def test_error_result_keeps_every_text_block(self):
        registry = ToolRegistry()

        async def failing(args):
            return InvocationResult(
                content=(TextBlock("first"), ImageBlock("QUJD"), TextBlock("second")),
                is_error=True,
            )

        registry.register(ToolDescriptor("multi", "Fails with several blocks"), failing)
        server = create_server(registry, Dispatcher(registry))
        handler = server.request_handlers[types.CallToolRequest]
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="multi", arguments={}),
        )

        result = (await handler(request)).root

        assert result.isError
        assert result.content[0].text == "first\nsecond"

    def test_installed_sdk_has_lowlevel_decorators(self):
        """The declared mcp range must keep the decorator API this server uses."""
        from mcp.server.lowlevel import Server

        assert callable(getattr(Server, "list_tools", None))
        assert callable(getattr(Server, "call_tool", None))

    @pytest.mark.asyncio
    async def test_server_name(self, server):
        assert server.name == SERVER_NAME

    def test_content_conversion(self):
        assert to_mcp_content(TextBlock("hi")).text == "hi"
        image = to_mcp_content(ImageBlock("QUJD"))
        assert image.type == "image"
        assert image.mimeType == "image/png"
