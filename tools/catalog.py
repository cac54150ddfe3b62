# =============================================================================
# tools/catalog.py  -  The Tool Catalog (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Declares every tool the server exposes: its descriptor (name,
#   description, JSON Schema) and the coroutine that implements it.  Each
#   handler is a thin wrapper around a core/ function: it pulls arguments
#   out of the bag, calls core/, and wraps the answer in an InvocationResult.
#
# WHAT HANDLERS DO NOT DO:
#   - They do NOT catch errors.  core/ raises ToolError subclasses and the
#     dispatcher turns them into error results.
#   - They do NOT re-check argument types.  The dispatcher has already
#     validated the bag against the descriptor's schema.
#
# DEPENDENCIES ARE INJECTED:
#   build_catalog() receives the secret store, the shared HTTP client and
#   the settings.  Handlers close over them, so tests can swap in an
#   in-memory store and an httpx.MockTransport.
#
# ORDER:
#   The list returned by build_catalog() is the registration order, which
#   is the order callers see in the catalog and on the docs page.
# =============================================================================

import json
from typing import Any

import httpx

from core.conversions import CATEGORIES, convert_base, convert_unit, format_number
from core.formatting import format_datetime, format_json, text_stats
from core.imagegen import generate_and_upload
from core.models import InvocationResult, ToolDescriptor
from core.publishing import publish_note
from core.random_values import CHARSETS, random_number, random_string, random_uuid
from core.secret_store import SecretKey, SecretStore
from core.settings import Settings
from tools.registry import ToolHandler


def _schema(properties: dict[str, Any], required: list[str]) -> dict[str, Any]:
    return {"type": "object", "properties": properties, "required": required}


def build_catalog(store: SecretStore, http_client: httpx.AsyncClient, settings: Settings) -> list[ToolHandler]:
    """Build the full, ordered list of tools bound to their dependencies."""

    # =========================================================================
    # TOOL 1: deploy-to-tiny-server
    # =========================================================================
    async def deploy_to_tiny_server(args: dict[str, Any]) -> InvocationResult:
        url = await publish_note(http_client, settings, args["content"], args["suffix"])
        return InvocationResult.text(url)

    # =========================================================================
    # TOOL 2: formatDateTime
    # =========================================================================
    async def format_date_time(args: dict[str, Any]) -> InvocationResult:
        return InvocationResult.text(format_datetime(args["format"], args.get("timestamp")))

    # =========================================================================
    # TOOL 3: formatJSON
    # =========================================================================
    async def format_json_tool(args: dict[str, Any]) -> InvocationResult:
        return InvocationResult.text(format_json(args["json"], args.get("indent")))

    # =========================================================================
    # TOOL 4: textStats
    # =========================================================================
    async def text_stats_tool(args: dict[str, Any]) -> InvocationResult:
        return InvocationResult.text(json.dumps(text_stats(args["text"]), ensure_ascii=False, indent=2))

    # =========================================================================
    # TOOL 5: convertBase
    # =========================================================================
    async def convert_base_tool(args: dict[str, Any]) -> InvocationResult:
        return InvocationResult.text(convert_base(args["number"], args["fromBase"], args["toBase"]))

    # =========================================================================
    # TOOL 6: generateRandom
    # =========================================================================
    # One tool, three generators, picked by `type`.  Options that do not
    # apply to the chosen type are ignored.
    # =========================================================================
    async def generate_random(args: dict[str, Any]) -> InvocationResult:
        kind = args["type"]
        if kind == "number":
            value = random_number(args.get("min", 0), args.get("max", 100))
            return InvocationResult.text(str(value))
        if kind == "string":
            value = random_string(
                args.get("length", 10),
                args.get("charset", "alphanumeric"),
                args.get("customCharset"),
            )
            return InvocationResult.text(value)
        return InvocationResult.text(random_uuid())

    # =========================================================================
    # TOOL 7: convertUnit
    # =========================================================================
    async def convert_unit_tool(args: dict[str, Any]) -> InvocationResult:
        result = convert_unit(args["value"], args["category"], args["fromUnit"], args["toUnit"])
        return InvocationResult.text(format_number(result))

    # =========================================================================
    # TOOL 8: gemini-image-gen
    # =========================================================================
    # The only multi-stage tool: reads three secrets, calls Gemini, uploads
    # the image to GitHub.  See core/imagegen.py for the failure model.
    # =========================================================================
    async def gemini_image_gen(args: dict[str, Any]) -> InvocationResult:
        markdown = await generate_and_upload(http_client, store, settings, args["prompt"])
        return InvocationResult.text(markdown)

    # =========================================================================
    # TOOLS 9-11: admin setters
    # =========================================================================
    # Write-only from the caller's perspective: there is deliberately no
    # tool that reads a secret back.
    # =========================================================================
    def secret_setter(key: SecretKey, argument: str):
        async def handler(args: dict[str, Any]) -> InvocationResult:
            await store.set(key, args[argument])
            return InvocationResult.text(f"{key.label} has been set")
        return handler

    return [
        ToolHandler(
            ToolDescriptor(
                name="deploy-to-tiny-server",
                description="Publish content to the Tiny Server and return its public URL",
                input_schema=_schema(
                    {
                        "content": {"type": "string", "description": "Content to publish"},
                        "suffix": {
                            "type": "string",
                            "description": "URL suffix, e.g. '.md', '.gist', '.html' or empty",
                        },
                    },
                    ["content", "suffix"],
                ),
            ),
            deploy_to_tiny_server,
        ),
        ToolHandler(
            ToolDescriptor(
                name="formatDateTime",
                description="Format a date and time",
                input_schema=_schema(
                    {
                        "format": {
                            "type": "string",
                            "description": "Format string, e.g. 'YYYY-MM-DD HH:mm:ss'. Supported tokens: "
                                           "YYYY (year), MM (month), DD (day), HH (hour), mm (minute), ss (second)",
                        },
                        "timestamp": {
                            "type": "number",
                            "description": "Optional timestamp in milliseconds. Defaults to the current time",
                        },
                    },
                    ["format"],
                ),
            ),
            format_date_time,
        ),
        ToolHandler(
            ToolDescriptor(
                name="formatJSON",
                description="Format and validate a JSON string",
                input_schema=_schema(
                    {
                        "json": {"type": "string", "description": "JSON string to format"},
                        "indent": {
                            "type": "integer",
                            "description": "Number of spaces to indent with, defaults to 2 (0 for compact output)",
                        },
                    },
                    ["json"],
                ),
            ),
            format_json_tool,
        ),
        ToolHandler(
            ToolDescriptor(
                name="textStats",
                description="Analyze a text and return statistics about it",
                input_schema=_schema(
                    {"text": {"type": "string", "description": "Text to analyze"}},
                    ["text"],
                ),
            ),
            text_stats_tool,
        ),
        ToolHandler(
            ToolDescriptor(
                name="convertBase",
                description="Convert a number between bases",
                input_schema=_schema(
                    {
                        "number": {"type": "string", "description": "Number to convert, as a string"},
                        "fromBase": {"type": "integer", "description": "Source base (2-36)"},
                        "toBase": {"type": "integer", "description": "Target base (2-36)"},
                    },
                    ["number", "fromBase", "toBase"],
                ),
            ),
            convert_base_tool,
        ),
        ToolHandler(
            ToolDescriptor(
                name="generateRandom",
                description="Generate a random number, string or UUID",
                input_schema=_schema(
                    {
                        "type": {
                            "type": "string",
                            "enum": ["number", "string", "uuid"],
                            "description": "What to generate: 'number', 'string' or 'uuid'",
                        },
                        "min": {"type": "integer", "description": "Minimum value (inclusive) when type is number"},
                        "max": {"type": "integer", "description": "Maximum value (inclusive) when type is number"},
                        "length": {"type": "integer", "description": "String length when type is string"},
                        "charset": {
                            "type": "string",
                            "enum": [*CHARSETS, "custom"],
                            "description": "Character set when type is string: 'alphanumeric', 'alpha', "
                                           "'numeric', 'hex' or 'custom'",
                        },
                        "customCharset": {
                            "type": "string",
                            "description": "Characters to draw from when charset is custom",
                        },
                    },
                    ["type"],
                ),
            ),
            generate_random,
        ),
        ToolHandler(
            ToolDescriptor(
                name="convertUnit",
                description="Convert a value between units",
                input_schema=_schema(
                    {
                        "value": {"type": "number", "description": "Value to convert"},
                        "category": {
                            "type": "string",
                            "enum": list(CATEGORIES),
                            "description": "Conversion category: 'length', 'weight', 'temperature', "
                                           "'area', 'volume' or 'time'",
                        },
                        "fromUnit": {"type": "string", "description": "Source unit"},
                        "toUnit": {"type": "string", "description": "Target unit"},
                    },
                    ["value", "category", "fromUnit", "toUnit"],
                ),
            ),
            convert_unit_tool,
        ),
        ToolHandler(
            ToolDescriptor(
                name="gemini-image-gen",
                description=f"Generate an image with {settings.gemini_image_model} and upload it to GitHub",
                input_schema=_schema(
                    {"prompt": {"type": "string", "minLength": 1, "description": "Image generation prompt"}},
                    ["prompt"],
                ),
            ),
            gemini_image_gen,
        ),
        ToolHandler(
            ToolDescriptor(
                name="set-github-token",
                description="Set the GitHub token used for image uploads",
                input_schema=_schema(
                    {"token": {"type": "string", "minLength": 1, "description": "GitHub token"}},
                    ["token"],
                ),
            ),
            secret_setter(SecretKey.GITHUB_TOKEN, "token"),
        ),
        ToolHandler(
            ToolDescriptor(
                name="set-gemini-api-key",
                description=f"Set the API key for {settings.gemini_image_model}",
                input_schema=_schema(
                    {"apiKey": {"type": "string", "minLength": 1, "description": "API key"}},
                    ["apiKey"],
                ),
            ),
            secret_setter(SecretKey.GEMINI_API_KEY, "apiKey"),
        ),
        ToolHandler(
            ToolDescriptor(
                name="set-github-repo",
                description="Set the GitHub repository images are uploaded to",
                input_schema=_schema(
                    {
                        "repo": {
                            "type": "string",
                            "pattern": r"^[^/\s]+/[^/\s]+$",
                            "description": "GitHub repository as 'owner/name'",
                        }
                    },
                    ["repo"],
                ),
            ),
            secret_setter(SecretKey.GITHUB_REPO, "repo"),
        ),
    ]
