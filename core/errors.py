# =============================================================================
# core/errors.py  -  Error Taxonomy
# =============================================================================
#
# Handlers RAISE these; only the dispatcher turns them into error results.
# Each class carries a machine-friendly `code` so logs can be filtered by
# failure kind without parsing messages.
#
#   ToolError
#     ├── UnknownToolError          invocation names an unregistered tool
#     ├── MissingConfigurationError a required secret is absent
#     ├── UpstreamHTTPError         an external call failed (status or network)
#     ├── ExtractionError           an expected field is missing upstream
#     └── ArgumentValidationError   caller argument outside the accepted domain
#
# RegistryFrozenError is NOT a ToolError: it signals a startup bug, not a bad
# invocation, and is allowed to crash the process.
# =============================================================================

from typing import Optional


class ToolError(Exception):
    """Base class for failures a tool invocation can report to its caller."""

    code = "tool_error"

    def __init__(self, message: str, *, stage: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage


class UnknownToolError(ToolError, LookupError):
    code = "unknown_tool"

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class MissingConfigurationError(ToolError):
    code = "missing_configuration"

    def __init__(self, key: str, label: Optional[str] = None) -> None:
        super().__init__(f"{label or key} is not configured", stage="configuration")
        self.key = key


class UpstreamHTTPError(ToolError):
    """An external service answered with a non-success status or not at all.

    `status_code` is None when the request never got a response (DNS,
    connection refused, timeout).
    """

    code = "upstream_http_error"

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: str = "",
        stage: Optional[str] = None,
    ) -> None:
        super().__init__(message, stage=stage)
        self.status_code = status_code
        self.body = body


class ExtractionError(ToolError):
    code = "extraction_error"


class ArgumentValidationError(ToolError, ValueError):
    code = "validation_error"


class RegistryFrozenError(RuntimeError):
    """Raised when registering a tool after the registry was frozen."""
