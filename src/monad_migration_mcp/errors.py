"""Exceptions raised by the Monad Migration MCP server."""

from typing import Optional


class MigrationServerError(Exception):
    """Base class for all server errors."""


class ConfigurationError(MigrationServerError):
    """Environment settings could not be turned into a usable configuration."""


class OperationNotFound(MigrationServerError, LookupError):
    """No registered tool module owns the requested operation name."""

    def __init__(self, name: str):
        super().__init__(f"Tool {name} not found")
        self.name = name


class DuplicateOperation(MigrationServerError):
    """Two tool modules declared the same operation name."""

    def __init__(self, name: str, owner: str, newcomer: str):
        super().__init__(f"Tool {name} already registered by '{owner}' (again declared by '{newcomer}')")
        self.name = name
        self.owner = owner
        self.newcomer = newcomer


class TemplateRenderError(MigrationServerError, ValueError):
    """An argument had a shape the report template cannot render."""

    def __init__(self, operation: str, field: str, reason: Optional[str] = None):
        message = f"Cannot render {operation}: field '{field}'"
        if reason:
            message += f" {reason}"
        super().__init__(message)
        self.operation = operation
        self.field = field
        self.reason = reason
