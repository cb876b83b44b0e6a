# prompto/tools/tool_registry.py
"""
Tool Registry
=============
Central registry cho năm prompt operations.
Mọi transport (CLI, MCP, JSON-RPC) đều đi qua đây, nên schema, validation
và credential resolution chỉ được định nghĩa một lần.

Features:
- Lookup theo tên riêng của từng transport
- Export MCP/JSON schema theo transport
- Validate -> resolve credential -> build Manager -> execute
"""

from typing import Any, Callable, Dict, List, Optional

from prompto.core.auth import resolve_api_key
from prompto.core.constants import API_KEY_PARAMETER, REMOTE_TRANSPORTS
from prompto.core.errors import InvalidInputFormatError
from prompto.core.logging import logger
from prompto.prompts.manager import PromptManager, create_manager
from prompto.tools.base_tool import BaseTool, ParameterType, ToolParameter, ToolResult


ManagerFactory = Callable[[str], PromptManager]

API_KEY = ToolParameter(
    name=API_KEY_PARAMETER,
    type=ParameterType.STRING,
    description="LangSmith API key for this call (overrides the bearer token and LANGSMITH_API_KEY)."
)


class ToolRegistry:
    """
    Central registry cho prompt tools.

    Usage:
        tool_registry.register(ListPromptsTool())

        # Resolve by transport-specific name
        tool = tool_registry.resolve("mcp", "prompts_list")

        # Execute with credential resolution
        result = await tool_registry.execute("rpc", "get_prompt", {"promptId": "org/p"})
    """

    def __init__(self):
        self._tools: Dict[str, BaseTool] = {}

    def register(self, tool: BaseTool) -> None:
        """Register a tool instance under its logical name."""
        if tool.name in self._tools:
            logger.warning(f"Tool '{tool.name}' is being re-registered")
        self._tools[tool.name] = tool
        logger.debug(f"Registered tool: {tool.name}")

    def get_all(self) -> List[BaseTool]:
        return list(self._tools.values())

    def resolve(self, transport: str, tool_name: str) -> BaseTool:
        """
        Find a tool by the name it carries on one transport.

        Raises:
            InvalidInputFormatError: no tool has that name on the transport
        """
        for tool in self._tools.values():
            if tool.name_for(transport) == tool_name:
                return tool
        raise InvalidInputFormatError(f"Unknown tool: {tool_name}")

    def extra_parameters(self, transport: str) -> List[ToolParameter]:
        """Parameters every tool accepts on a transport"""
        return [API_KEY] if transport in REMOTE_TRANSPORTS else []

    def to_mcp_tools(self, transport: str) -> List[Dict[str, Any]]:
        """
        Export all tools in MCP schema format for one transport.

        Returns:
            List of {name, description, inputSchema}
        """
        extra = self.extra_parameters(transport)
        return [tool.to_mcp_schema(transport, extra) for tool in self._tools.values()]

    async def execute(
        self,
        transport: str,
        tool_name: str,
        arguments: Optional[Dict[str, Any]] = None,
        *,
        api_key: Optional[str] = None,
        bearer_token: Optional[str] = None,
        manager_factory: ManagerFactory = create_manager
    ) -> ToolResult:
        """
        Execute a tool by its transport-specific name.

        Args:
            transport: cli / mcp / rpc
            tool_name: Name of the tool on that transport
            arguments: Raw arguments; the apiKey override is accepted on remote transports
            api_key: Explicit credential (CLI --api-key)
            bearer_token: Token from an Authorization header
            manager_factory: Builds a Manager for the resolved key

        Raises:
            PromptoError: validation, credential or operation failure
        """
        tool = self.resolve(transport, tool_name)
        params = dict(arguments or {})

        if transport in REMOTE_TRANSPORTS:
            override = params.pop(API_KEY_PARAMETER, None)
            if override is not None and not isinstance(override, str):
                raise InvalidInputFormatError(f"Invalid value for {API_KEY_PARAMETER}: expected string")
            api_key = override or api_key

        tool.validate_params(transport, params)
        key = resolve_api_key(api_key, bearer_token)

        logger.debug(f"Executing {transport} tool {tool_name} with params: {sorted(params)}")
        async with manager_factory(key) as manager:
            return await tool.execute(manager, **params)

    def __contains__(self, tool_name: str) -> bool:
        return tool_name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __repr__(self) -> str:
        return f"<ToolRegistry: {len(self)} tools>"


# Global singleton instance
tool_registry = ToolRegistry()
