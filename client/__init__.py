# =============================================================================
# client/__init__.py
# =============================================================================
# Operator-side tooling that talks to a running server over MCP.  Nothing in
# the server imports this package.
# =============================================================================
