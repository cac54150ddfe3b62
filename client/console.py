# =============================================================================
# client/console.py  -  Interactive Console for a Running Tool Server
# =============================================================================
#
# HOW TO RUN:
#   uv run python -m client.console                      # http://localhost:$PORT/sse
#   uv run python -m client.console https://host/sse     # any reachable server
#
# WHAT HAPPENS:
#   1. Connects to the server's SSE endpoint with a FastMCP client
#   2. Prints the tool catalog
#   3. Reads lines of the form   <tool-name> <json-arguments>
#      e.g.   convertBase {"number": "ff", "fromBase": 16, "toBase": 2}
#   4. Prints each result, flagging errors
#
# Commands:  tools  reprints the catalog,  quit / exit / q  leaves.
# =============================================================================

import asyncio
import json
import os
import sys
from typing import Any, Optional

from dotenv import load_dotenv
from fastmcp import Client
from mcp import types

from core.settings import DEFAULT_PORT

QUIT_COMMANDS = ("quit", "exit", "q")


class CommandError(ValueError):
    """The line typed at the prompt could not be understood."""


def parse_command(line: str) -> tuple[str, dict[str, Any]]:
    """Split `<tool-name> <json-arguments>` into a name and an argument dict.

    The JSON part is optional and must be an object when present.
    """
    line = line.strip()
    if not line:
        raise CommandError("empty command")
    name, _, raw_args = line.partition(" ")
    raw_args = raw_args.strip()
    if not raw_args:
        return name, {}
    try:
        arguments = json.loads(raw_args)
    except json.JSONDecodeError as exc:
        raise CommandError(f"arguments are not valid JSON: {exc}") from None
    if not isinstance(arguments, dict):
        raise CommandError("arguments must be a JSON object")
    return name, arguments


def format_result(result: types.CallToolResult) -> str:
    parts = []
    for block in result.content:
        if isinstance(block, types.TextContent):
            parts.append(block.text)
        else:
            parts.append(f"<{block.type} content>")
    prefix = "⚠️  Error: " if result.isError else ""
    return prefix + "\n".join(parts)


def format_catalog(tools: list[types.Tool]) -> str:
    lines = []
    for tool in tools:
        required = set(tool.inputSchema.get("required", []))
        params = ", ".join(
            name if name in required else f"{name}?"
            for name in tool.inputSchema.get("properties", {})
        )
        lines.append(f"  🔧 {tool.name}({params})  -  {tool.description or ''}")
    return "\n".join(lines)


def default_server_url() -> str:
    return os.environ.get("TOOL_SERVER_URL") or f"http://localhost:{os.environ.get('PORT', DEFAULT_PORT)}/sse"


async def run_console(url: str) -> None:
    print("=" * 70)
    print(f"  TOOL SERVER CONSOLE  -  {url}")
    print("=" * 70)

    async with Client(url) as client:
        tools = await client.list_tools()
        print(f"\n✅ Connected. {len(tools)} tools available:\n")
        print(format_catalog(tools))
        print("\n💬 Type '<tool> <json-arguments>', 'tools', or 'quit'.")

        while True:
            try:
                line = input("\n> ").strip()
            except (EOFError, KeyboardInterrupt):
                print("\n\n👋 Goodbye!")
                break

            if line.lower() in QUIT_COMMANDS:
                print("\n👋 Goodbye!")
                break
            if not line:
                continue
            if line == "tools":
                print(format_catalog(await client.list_tools()))
                continue

            try:
                name, arguments = parse_command(line)
            except CommandError as exc:
                print(f"⚠️  {exc}")
                continue

            result = await client.call_tool_mcp(name, arguments)
            print(format_result(result))


def main(argv: Optional[list[str]] = None) -> None:
    load_dotenv()
    argv = sys.argv[1:] if argv is None else argv
    asyncio.run(run_console(argv[0] if argv else default_server_url()))


if __name__ == "__main__":
    main()
