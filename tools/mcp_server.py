# =============================================================================
# tools/mcp_server.py  -  MCP Protocol Binding
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Wires the registry and the dispatcher into an MCP protocol server:
#
#     tools/list  ──▶ registry.list_descriptors() ──▶ [types.Tool, ...]
#     tools/call  ──▶ dispatcher.invoke(name, args) ──▶ CallToolResult
#
# WHY THE LOW-LEVEL SERVER?
#   The decorator style of FastMCP derives each schema from a Python
#   signature.  This server's tools are described by hand-written JSON
#   Schemas held in ToolDescriptors, so the catalog is served as-is through
#   the SDK's lowlevel Server that FastMCP itself is built on.
#
# ERROR RESULTS:
#   The SDK turns an exception raised by the call handler into a
#   CallToolResult with isError=true and the exception text as its content.
#   Error results from the dispatcher are re-raised as ToolCallFailed to use
#   exactly that path; nothing else can raise here because the dispatcher
#   never does.  That path carries a single text block, so the text blocks of
#   an error result are joined with newlines and non-text blocks are dropped.
# =============================================================================

from typing import Any

from mcp import types
from mcp.server.lowlevel import Server

from core.models import ContentBlock, ImageBlock, InvocationResult, TextBlock, ToolDescriptor
from tools.dispatch import Dispatcher
from tools.registry import ToolRegistry

SERVER_NAME = "toolkit-server"
SERVER_VERSION = "1.0.0"
SERVER_INSTRUCTIONS = "Modular tool server offering formatting, conversion, publishing and image tools"


class ToolCallFailed(Exception):
    """Carries an error InvocationResult through the SDK's error path."""

    def __init__(self, result: InvocationResult) -> None:
        super().__init__("\n".join(b.text for b in result.content if isinstance(b, TextBlock)))
        self.result = result


def to_mcp_tool(descriptor: ToolDescriptor) -> types.Tool:
    return types.Tool(
        name=descriptor.name,
        description=descriptor.description,
        inputSchema=descriptor.input_schema,
    )


def to_mcp_content(block: ContentBlock) -> types.TextContent | types.ImageContent:
    if isinstance(block, ImageBlock):
        return types.ImageContent(type="image", data=block.data, mimeType=block.mime_type)
    if isinstance(block, TextBlock):
        return types.TextContent(type="text", text=block.text)
    raise TypeError(f"Unsupported content block: {type(block).__name__}")


def create_server(registry: ToolRegistry, dispatcher: Dispatcher) -> Server:
    """Create the MCP server exposing `registry` through `dispatcher`."""
    server = Server(SERVER_NAME, version=SERVER_VERSION, instructions=SERVER_INSTRUCTIONS)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [to_mcp_tool(descriptor) for descriptor in registry.list_descriptors()]

    # Arguments are validated by the dispatcher, so SDK-side validation is
    # turned off to keep a single source of validation messages.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[types.TextContent | types.ImageContent]:
        result = await dispatcher.invoke(name, arguments)
        if result.is_error:
            raise ToolCallFailed(result)
        return [to_mcp_content(block) for block in result.content]

    return server
