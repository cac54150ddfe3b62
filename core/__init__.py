# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains the logic behind every tool: conversions, formatting,
# random values, the secret store, and the upstream calls (note publishing,
# image generation and upload).
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports the MCP SDK, Starlette or uvicorn.
#   Functions take plain arguments and raise core.errors exceptions; the
#   tools/ layer wraps them into MCP tools.  httpx is the only network
#   dependency, and the client is always passed in so tests can mock it.
# =============================================================================
