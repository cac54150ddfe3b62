# =============================================================================
# tools/__init__.py
# =============================================================================
# This package turns core/ functions into a served MCP tool set.
#
# ARCHITECTURAL ROLE:
#   catalog.py     descriptors + thin handlers around core/
#   registry.py    name -> (descriptor, handler), frozen after startup
#   dispatch.py    the error boundary every call goes through
#   mcp_server.py  tools/list + tools/call on the MCP SDK's lowlevel Server
#   sessions.py    keyed table of open client sessions
#   transport.py   SSE stream + POST endpoint per session
#   docs_page.py   HTML usage page served at GET /
#   app.py         Starlette app wiring it all together
#
# WHAT TOOLS DO NOT DO:
#   - They do NOT contain conversion or upstream logic (that's in core/)
#   - They do NOT catch errors inside handlers (the dispatcher does)
# =============================================================================
