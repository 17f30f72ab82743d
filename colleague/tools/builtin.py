"""Builtin tool set."""

from colleague.tools.base import ToolDefinition
from colleague.tools.file_list import create_file_list_tool
from colleague.tools.file_read import create_file_read_tool
from colleague.tools.file_write import create_file_write_tool
from colleague.tools.registry import ToolsRegistry
from colleague.tools.shell_exec import create_shell_exec_tool
from colleague.tools.web_search import create_web_search_tool


def create_builtin_tools() -> list[ToolDefinition]:
    return [
        create_file_read_tool(),
        create_file_list_tool(),
        create_file_write_tool(),
        create_web_search_tool(),
        create_shell_exec_tool(),
    ]


def register_builtin_tools(registry: ToolsRegistry) -> None:
    """Register the default set of tools."""
    for tool in create_builtin_tools():
        registry.register_tool(tool)
