# =============================================================================
# tools/registry.py  -  Tool Registry
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Maps a tool name to its (descriptor, handler) pair.
#
# LIFECYCLE:
#   1. main builds the catalog (tools/catalog.py) and calls register_all()
#   2. create_app() calls freeze()
#   3. from then on the registry is read-only and shared by every session,
#      so no locking is needed
#
# ORDER IS PART OF THE CONTRACT:
#   list_descriptors() returns tools in registration order.  The catalog
#   response and the docs page both render from it, so callers see the same
#   listing on every request.
#
# DUPLICATE NAMES:
#   Registering a name twice (before freeze) replaces the earlier entry in
#   place: the schema and handler change, the position does not.  It is
#   logged as a warning because it almost always means a copy-paste slip in
#   the catalog.
# =============================================================================

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable

from core.errors import RegistryFrozenError, UnknownToolError
from core.models import InvocationResult, ToolDescriptor

logger = logging.getLogger(__name__)

Handler = Callable[[dict[str, Any]], Awaitable[InvocationResult]]


@dataclass(frozen=True)
class ToolHandler:
    """A tool's descriptor bound to the coroutine that implements it."""

    descriptor: ToolDescriptor
    handler: Handler

    @property
    def name(self) -> str:
        return self.descriptor.name


class ToolRegistry:
    """In-memory, insertion-ordered registry of tools."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolHandler] = {}
        self._frozen = False

    def register(self, descriptor: ToolDescriptor, handler: Handler) -> None:
        if self._frozen:
            raise RegistryFrozenError(f"Cannot register '{descriptor.name}': registry is frozen")
        if descriptor.name in self._tools:
            logger.warning("Tool '%s' registered twice; replacing the earlier entry", descriptor.name)
        # Assigning to an existing dict key keeps its original position.
        self._tools[descriptor.name] = ToolHandler(descriptor=descriptor, handler=handler)

    def register_all(self, tool_handlers: Iterable[ToolHandler]) -> None:
        for tool in tool_handlers:
            self.register(tool.descriptor, tool.handler)

    def freeze(self) -> None:
        self._frozen = True
        logger.info("Tool registry frozen with %d tools", len(self._tools))

    @property
    def frozen(self) -> bool:
        return self._frozen

    def list_descriptors(self) -> list[ToolDescriptor]:
        return [tool.descriptor for tool in self._tools.values()]

    def resolve(self, name: str) -> ToolHandler:
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
