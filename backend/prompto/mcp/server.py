# prompto/mcp/server.py
"""
MCP Server
==========
Expose năm prompt tools qua Model Context Protocol (official `mcp` SDK).

Hỗ trợ:
- stdio transport (desktop MCP clients)
- streamable HTTP transport, mounted at settings.MCP_PATH

Tool list và dispatch đều được sinh từ tool registry.
"""

import contextlib
import json
from typing import Any, Dict, List, Optional

import aiohttp
import uvicorn
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from starlette.applications import Starlette
from starlette.routing import Mount

from prompto.core.auth import parse_bearer_token
from prompto.core.constants import MCP
from prompto.core.errors import PromptoError
from prompto.core.logging import logger
from prompto.core.settings import settings
from prompto.prompts.manager import create_manager
from prompto.tools import tool_registry
from prompto.tools.tool_registry import ManagerFactory, ToolRegistry


def _text_result(text: str, is_error: bool = False) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        isError=is_error,
    )


class PromptToolBinding:
    """
    Bridges the tool registry onto MCP types.

    Kept separate from the SDK server so it can be exercised without a
    live MCP session.
    """

    def __init__(
        self,
        registry: ToolRegistry = tool_registry,
        manager_factory: ManagerFactory = create_manager
    ):
        self.registry = registry
        self.manager_factory = manager_factory

    def list_tools(self) -> List[types.Tool]:
        return [
            types.Tool(
                name=schema["name"],
                description=schema["description"],
                inputSchema=schema["inputSchema"],
            )
            for schema in self.registry.to_mcp_tools(MCP)
        ]

    async def call_tool(
        self,
        name: str,
        arguments: Optional[Dict[str, Any]] = None,
        bearer_token: Optional[str] = None
    ) -> types.CallToolResult:
        """
        Execute one tool call.

        Operation errors come back as an isError result carrying the
        message, so the client model can read and react to them.
        """
        arguments = dict(arguments or {})
        try:
            tool = self.registry.resolve(MCP, name)
            result = await self.registry.execute(
                MCP,
                name,
                arguments,
                bearer_token=bearer_token,
                manager_factory=self.manager_factory
            )
        except PromptoError as e:
            logger.warning(f"MCP tool {name} failed [{e.kind}]: {e}")
            return _text_result(e.message, is_error=True)

        as_json = arguments.get("asJson")
        if as_json is None:
            as_json = tool.json_by_default
        if as_json:
            return _text_result(json.dumps(result.data, indent=2, ensure_ascii=False))
        return _text_result(result.text)


def _bearer_from_context(server: Server) -> Optional[str]:
    """Bearer token of the HTTP request behind the current MCP request, if any."""
    try:
        ctx = server.request_context
    except LookupError:
        return None
    request = getattr(ctx, "request", None)
    if request is None:
        return None
    return parse_bearer_token(request.headers.get("authorization"))


def build_server(binding: Optional[PromptToolBinding] = None) -> Server:
    """Create the SDK server with list_tools/call_tool wired to the binding."""
    binding = binding or PromptToolBinding()
    server = Server(settings.SERVER_NAME)

    @server.list_tools()
    async def handle_list_tools() -> List[types.Tool]:
        return binding.list_tools()

    @server.call_tool()
    async def handle_call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> types.CallToolResult:
        return await binding.call_tool(name, arguments, bearer_token=_bearer_from_context(server))

    server.binding = binding
    return server


def create_http_app(server: Optional[Server] = None) -> Starlette:
    """
    Starlette app serving streamable HTTP at settings.MCP_PATH.
    One aiohttp session is shared by every call for the app lifetime.
    """
    server = server or build_server()
    binding: PromptToolBinding = server.binding
    session_manager = StreamableHTTPSessionManager(app=server, stateless=True, json_response=True)

    async def handle_streamable_http(scope, receive, send):
        await session_manager.handle_request(scope, receive, send)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        original_factory = binding.manager_factory
        async with aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=settings.HUB_TIMEOUT_SECONDS)
        ) as http_session:
            if original_factory is create_manager:
                binding.manager_factory = lambda api_key: create_manager(api_key, http_session=http_session)
            async with session_manager.run():
                logger.info(f"MCP server ready at {settings.MCP_PATH}")
                try:
                    yield
                finally:
                    binding.manager_factory = original_factory

    return Starlette(
        routes=[Mount(settings.MCP_PATH, app=handle_streamable_http)],
        lifespan=lifespan,
    )


async def run_stdio(server: Optional[Server] = None) -> None:
    """Serve MCP over stdin/stdout until the client disconnects."""
    server = server or build_server()
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run_http(host: Optional[str] = None, port: Optional[int] = None) -> None:
    host = host or settings.HOST
    port = port or settings.PORT
    logger.warning(f"MCP server listening on http://{host}:{port}{settings.MCP_PATH}")
    uvicorn.run(create_http_app(), host=host, port=port, log_level=settings.LOG_LEVEL.lower())
