# =============================================================================
# core/models.py  -  Data Models (the "nouns" of the tool server)
# =============================================================================
#
# These dataclasses define the *shape* of everything that flows between the
# registry, the dispatcher and the tool handlers.  They carry almost no
# behavior: a descriptor says what a tool accepts, a result says what a tool
# produced.
#
# WHY FROZEN DATACLASSES?
#   A descriptor is registered once at startup and then shared by every
#   concurrent invocation.  Freezing it means no handler can quietly edit
#   the catalog another session is reading.
#
# NOTHING HERE KNOWS ABOUT MCP.
#   tools/mcp_server.py converts these into the SDK's wire types.  Keeping
#   the conversion out of core/ lets the handlers be tested without a server.
# =============================================================================

from dataclasses import dataclass, field
from typing import Any, Union


# -----------------------------------------------------------------------------
# ToolDescriptor  -  the public contract of one tool
# -----------------------------------------------------------------------------
# `input_schema` is a JSON Schema object.  The dispatcher validates argument
# bags against it, and the docs page renders its `properties`.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ToolDescriptor:
    """Name, human description and JSON Schema of one tool."""

    name: str                                   # Unique key in the registry
    description: str                            # Shown to callers and on the docs page
    input_schema: dict[str, Any] = field(default_factory=lambda: {"type": "object", "properties": {}})

    @property
    def properties(self) -> dict[str, Any]:
        return self.input_schema.get("properties", {})

    @property
    def required(self) -> list[str]:
        return list(self.input_schema.get("required", []))


# -----------------------------------------------------------------------------
# Content blocks  -  what a result is made of
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class TextBlock:
    """Plain text content."""

    text: str
    kind: str = "text"


@dataclass(frozen=True)
class ImageBlock:
    """Inline image content, base64 encoded."""

    data: str
    mime_type: str = "image/png"
    kind: str = "image"


ContentBlock = Union[TextBlock, ImageBlock]


# -----------------------------------------------------------------------------
# InvocationResult  -  the one envelope every tool call ends in
# -----------------------------------------------------------------------------
# `is_error` is the discriminant: consumers must check it before treating the
# text as a success payload.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class InvocationResult:
    """Normalized outcome of a tool invocation."""

    content: tuple[ContentBlock, ...] = ()
    is_error: bool = False

    @classmethod
    def text(cls, text: str, is_error: bool = False) -> "InvocationResult":
        return cls(content=(TextBlock(text=text),), is_error=is_error)

    @classmethod
    def error(cls, message: str) -> "InvocationResult":
        return cls.text(message, is_error=True)

    @property
    def first_text(self) -> str:
        """Text of the first text block, or "" when there is none."""
        for block in self.content:
            if isinstance(block, TextBlock):
                return block.text
        return ""
