"""Shared utilities for all tool modules."""

import logging
from typing import Any, Optional

from mcp.types import TextContent

from ..errors import TemplateRenderError

logger = logging.getLogger("monad-migration-mcp")

_MISSING = object()


def text_report(text: str) -> list[TextContent]:
    """Wrap rendered markdown as a single text content item."""
    return [TextContent(type="text", text=text)]


# =============================================================================
# Argument accessors
# =============================================================================
# The MCP host validates arguments against each tool's inputSchema before the
# call reaches us. These accessors only guard the template: a value of the
# wrong shape becomes a TemplateRenderError naming the operation and field.

def _get(arguments: dict, operation: str, key: str, default: Any) -> Any:
    if key in arguments and arguments[key] is not None:
        return arguments[key]
    if default is _MISSING:
        raise TemplateRenderError(operation, key, "is required")
    return default


def text_arg(arguments: dict, operation: str, key: str, default: Any = _MISSING) -> str:
    value = _get(arguments, operation, key, default)
    if not isinstance(value, str):
        raise TemplateRenderError(operation, key, f"must be a string, got {type(value).__name__}")
    return value


def choice_arg(arguments: dict, operation: str, key: str, choices: tuple[str, ...],
               default: Any = _MISSING) -> str:
    value = text_arg(arguments, operation, key, default)
    if value not in choices:
        raise TemplateRenderError(operation, key, f"must be one of {', '.join(choices)}, got {value!r}")
    return value


def list_arg(arguments: dict, operation: str, key: str, default: Any = _MISSING) -> list[str]:
    value = _get(arguments, operation, key, default)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise TemplateRenderError(operation, key, "must be an array of strings")
    return value


def number_arg(arguments: dict, operation: str, key: str, default: Any = _MISSING) -> float:
    value = _get(arguments, operation, key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TemplateRenderError(operation, key, f"must be a number, got {type(value).__name__}")
    return value


def flag_arg(arguments: dict, operation: str, key: str, default: Any = _MISSING) -> bool:
    value = _get(arguments, operation, key, default)
    if not isinstance(value, bool):
        raise TemplateRenderError(operation, key, f"must be a boolean, got {type(value).__name__}")
    return value


# =============================================================================
# Template fragments
# =============================================================================

def format_number(value: float) -> str:
    """Render a JSON number the way it was written: 5.0 becomes 5."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def comment_out(code: str, prefix: str = "// ") -> str:
    """Prefix every line of user code so it stays visible but inert."""
    return "\n".join(f"{prefix}{line}" for line in code.split("\n"))


def event_name(signature: str) -> str:
    """'Transfer(address,address,uint256)' -> 'Transfer'."""
    return signature.split("(", 1)[0]


def code_block(code: str, language: Optional[str] = "typescript") -> str:
    return f"```{language or ''}\n{code}\n```"


def bullets(items: list[str], marker: str = "- ") -> str:
    return "\n".join(f"{marker}{item}" for item in items)
