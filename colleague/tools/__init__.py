"""Tools for the conversational AI assistant."""

from colleague.tools.base import ToolDefinition, ToolResult, requires_approval
from colleague.tools.registry import ToolAlreadyRegisteredError, ToolsRegistry, get_tools_registry

__all__ = [
    "ToolAlreadyRegisteredError",
    "ToolDefinition",
    "ToolResult",
    "ToolsRegistry",
    "get_tools_registry",
    "requires_approval",
]
