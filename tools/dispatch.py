# =============================================================================
# tools/dispatch.py  -  Dispatch Engine
# =============================================================================
#
# WHAT THIS FILE DOES:
#   invoke(name, arguments) is the single door every tool call goes through:
#
#     1. resolve the name          (unknown  -> error result)
#     2. validate the argument bag (mismatch -> error result)
#     3. await the handler         (raises   -> error result)
#     4. hand back whatever the handler returned, unchanged
#
# THE DISPATCH BOUNDARY:
#   Nothing raised by a handler gets past invoke().  The protocol layer
#   above only ever sees an InvocationResult, so one bad call can never
#   tear down a session or the process.
#
# LOGGING:
#   Logs go to STDERR.  Colors make it easy to scan requests vs responses:
#     - CYAN for incoming requests (tool name + arguments)
#     - YELLOW for status lines
#     - GREEN for successful responses, RED for error responses
#   Argument values of admin tools are masked so secrets never hit the log.
# =============================================================================

import json
import logging
from typing import Any, Optional

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

from core.errors import ArgumentValidationError, ToolError, UnknownToolError
from core.models import InvocationResult, ToolDescriptor
from tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

# ANSI color codes for terminal output
_CYAN = "\033[36m"     # Requests (tool calls with params)
_GREEN = "\033[32m"    # Successful responses
_YELLOW = "\033[33m"   # Status/progress messages
_RED = "\033[31m"      # Error responses
_RESET = "\033[0m"     # Reset to default terminal color

# Arguments whose values must not be logged.
_SENSITIVE_ARGUMENTS = {"token", "apiKey"}

_MAX_LOGGED_TEXT = 300


def _log_request(tool_name: str, arguments: dict[str, Any]) -> None:
    """Log an incoming tool call with its arguments in CYAN."""
    shown = {k: ("***" if k in _SENSITIVE_ARGUMENTS else v) for k, v in arguments.items()}
    param_str = ", ".join(f"{k}={v!r}" for k, v in shown.items())
    logger.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logger.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: InvocationResult) -> InvocationResult:
    """Log the result text, then return the result unchanged."""
    text = result.first_text
    if len(text) > _MAX_LOGGED_TEXT:
        text = text[:_MAX_LOGGED_TEXT] + "..."
    color = _RED if result.is_error else _GREEN
    logger.info(f"{color}  ← {tool_name} {'error' if result.is_error else 'response'}: {json.dumps(text)}{_RESET}")
    return result


class Dispatcher:
    """Resolves tool calls against a registry and normalizes their outcome."""

    def __init__(self, registry: ToolRegistry, validate_arguments: bool = True) -> None:
        self.registry = registry
        self.validate_arguments = validate_arguments
        self._validators: dict[str, Draft202012Validator] = {}

    def _validator_for(self, descriptor: ToolDescriptor) -> Draft202012Validator:
        validator = self._validators.get(descriptor.name)
        if validator is None or validator.schema is not descriptor.input_schema:
            validator = Draft202012Validator(descriptor.input_schema)
            self._validators[descriptor.name] = validator
        return validator

    def validate(self, descriptor: ToolDescriptor, arguments: dict[str, Any]) -> None:
        """Raise ArgumentValidationError if `arguments` violate the tool's schema."""
        error = best_match(self._validator_for(descriptor).iter_errors(arguments))
        if error is not None:
            location = ".".join(str(part) for part in error.absolute_path)
            prefix = f"{location}: " if location else ""
            raise ArgumentValidationError(f"Invalid arguments for {descriptor.name}: {prefix}{error.message}")

    async def invoke(self, name: str, arguments: Optional[dict[str, Any]] = None) -> InvocationResult:
        arguments = arguments or {}
        _log_request(name, arguments)

        try:
            tool = self.registry.resolve(name)
        except UnknownToolError as exc:
            _log_status("no such tool")
            return _log_response(name, InvocationResult.error(str(exc)))

        try:
            if self.validate_arguments:
                self.validate(tool.descriptor, arguments)
            result = await tool.handler(arguments)
        except ToolError as exc:
            logger.warning("Tool %s failed (%s): %s", name, exc.code, exc)
            return _log_response(name, InvocationResult.error(_describe_failure(name, exc)))
        except Exception as exc:
            logger.exception("Tool %s crashed", name)
            return _log_response(name, InvocationResult.error(f"Error executing tool {name}: {exc}"))

        if not isinstance(result, InvocationResult):
            logger.error("Tool %s returned %s instead of an InvocationResult", name, type(result).__name__)
            return _log_response(name, InvocationResult.error(f"Error executing tool {name}: invalid result"))
        return _log_response(name, result)


def _describe_failure(name: str, exc: ToolError) -> str:
    if exc.stage:
        return f"Error executing tool {name} ({exc.stage} stage): {exc}"
    return f"Error executing tool {name}: {exc}"
