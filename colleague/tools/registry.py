"""Tools registry for managing AI assistant tools."""

from typing import Any

from colleague.models.llm import LLMToolDefinition
from colleague.tools.base import ToolDefinition, ToolResult
from colleague.utils.logging import get_logger

logger = get_logger(__name__)


class ToolAlreadyRegisteredError(ValueError):
    """Raised when a tool name is registered twice."""


class ToolsRegistry:
    """Registry for managing AI assistant tools."""

    def __init__(self, tools: list[ToolDefinition] | None = None):
        """Initialize tools registry, optionally with an initial tool set."""
        self._tools: dict[str, ToolDefinition] = {}
        for tool in tools or []:
            self.register_tool(tool)

    def register_tool(self, tool: ToolDefinition) -> None:
        """Register a new tool in the registry."""
        if tool.name in self._tools:
            raise ToolAlreadyRegisteredError(f'Tool "{tool.name}" is already registered')
        self._tools[tool.name] = tool
        logger.debug(f"Registered tool {tool.name} (risk level {tool.risk_level})")

    def get_tool(self, name: str) -> ToolDefinition | None:
        """Look up a tool by name."""
        return self._tools.get(name)

    def has_tool(self, name: str) -> bool:
        """Check if a tool is registered."""
        return name in self._tools

    def get_tool_names(self) -> list[str]:
        """Get list of all registered tool names."""
        return list(self._tools.keys())

    def get_all(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    def get_tools_by_risk_level(self, max_risk_level: int) -> list[ToolDefinition]:
        """Get tools whose risk level does not exceed max_risk_level."""
        return [tool for tool in self._tools.values() if tool.risk_level <= max_risk_level]

    def get_llm_tools(self) -> list[LLMToolDefinition]:
        """Get tool declarations for the completion provider (no risk level or handler)."""
        return [tool.to_llm_tool() for tool in self._tools.values()]

    async def execute(self, name: str, tool_input: dict[str, Any]) -> ToolResult:
        """Execute a tool by name.

        Never raises: unknown tools, invalid input and handler crashes all come
        back as a failed ToolResult so the conversation loop can continue.
        """
        tool = self._tools.get(name)
        if tool is None:
            return ToolResult.failure(f'Tool "{name}" not found')

        try:
            result = await tool.execute(tool_input)
        except Exception as e:
            logger.error(f"Tool {name} failed: {e}", exc_info=True)
            return ToolResult.failure(str(e) or e.__class__.__name__)

        logger.debug(f"Tool {name} finished, success={result.success}")
        return result

    def clear(self) -> None:
        self._tools.clear()


_tools_registry: ToolsRegistry | None = None


def get_tools_registry() -> ToolsRegistry:
    """Get or create tools registry instance with the builtin tools."""
    global _tools_registry

    if _tools_registry is None:
        from colleague.tools.builtin import register_builtin_tools

        _tools_registry = ToolsRegistry()
        register_builtin_tools(_tools_registry)

    return _tools_registry
