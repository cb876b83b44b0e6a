# prompto/tools/__init__.py
"""
Prompt Tools
============
Declarative operation registry shared by every transport.
"""

from prompto.tools.base_tool import BaseTool, ParameterType, ToolParameter, ToolResult
from prompto.tools.prompt_tools import (
    ListPromptsTool,
    ShowPromptTool,
    CreatePromptTool,
    UpdatePromptTool,
    DeletePromptTool,
)
from prompto.tools.tool_registry import ToolRegistry, tool_registry


def register_all_tools(registry: ToolRegistry = tool_registry) -> ToolRegistry:
    """Register the five prompt operations (idempotent)."""
    for tool in (
        ListPromptsTool(),
        ShowPromptTool(),
        CreatePromptTool(),
        UpdatePromptTool(),
        DeletePromptTool(),
    ):
        if tool.name not in registry:
            registry.register(tool)
    return registry


register_all_tools()


__all__ = [
    'BaseTool',
    'ParameterType',
    'ToolParameter',
    'ToolResult',
    'ListPromptsTool',
    'ShowPromptTool',
    'CreatePromptTool',
    'UpdatePromptTool',
    'DeletePromptTool',
    'ToolRegistry',
    'tool_registry',
    'register_all_tools',
]
