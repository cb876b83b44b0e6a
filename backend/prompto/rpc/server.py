# prompto/rpc/server.py
"""
JSON-RPC Server
===============
Expose prompt tools qua JSON-RPC 2.0 (subset của MCP protocol) cho
HTTP binding trong main_api.

Hỗ trợ:
- initialize / ping
- tools/list: list available tools
- tools/call: execute a tool
"""

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from prompto.core.constants import RPC
from prompto.core.errors import PromptoError
from prompto.core.logging import logger
from prompto.core.settings import settings
from prompto.prompts.manager import create_manager
from prompto.tools import tool_registry
from prompto.tools.tool_registry import ManagerFactory, ToolRegistry

PROTOCOL_VERSION = "2024-11-05"
SERVER_VERSION = "1.0.0"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INTERNAL_ERROR = -32603


@dataclass
class RPCRequest:
    """Incoming JSON-RPC request"""
    method: str
    params: Dict[str, Any] = field(default_factory=dict)
    id: Optional[Union[str, int]] = None
    is_notification: bool = False


@dataclass
class RPCResponse:
    """Response to a JSON-RPC client"""
    result: Any = None
    error: Optional[Dict[str, Any]] = None
    id: Optional[Union[str, int]] = None

    def to_dict(self) -> Dict[str, Any]:
        response = {"jsonrpc": "2.0", "id": self.id}
        if self.error:
            response["error"] = self.error
        else:
            response["result"] = self.result
        return response


class RPCError(Exception):
    """Protocol-level failure carrying a JSON-RPC error code"""

    def __init__(self, code: int, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.data = data

    def to_error(self) -> Dict[str, Any]:
        error = {"code": self.code, "message": str(self)}
        if self.data:
            error["data"] = self.data
        return error


class RPCServer:
    """
    JSON-RPC server over the tool registry.

    Usage:
        server = RPCServer()
        response = await server.handle_message(body, bearer_token=token)
    """

    def __init__(
        self,
        registry: ToolRegistry = tool_registry,
        manager_factory: ManagerFactory = create_manager,
        name: Optional[str] = None
    ):
        self.name = name or settings.SERVER_NAME
        self.version = SERVER_VERSION
        self.manager_factory = manager_factory
        self._registry = registry
        self._handlers: Dict[str, Callable] = {}
        self._setup_handlers()

    def _setup_handlers(self):
        """Setup method handlers"""
        self._handlers = {
            "initialize": self._handle_initialize,
            "ping": self._handle_ping,
            "tools/list": self._handle_tools_list,
            "tools/call": self._handle_tools_call,
        }

    async def handle_message(
        self,
        raw: Union[str, bytes, Dict[str, Any]],
        bearer_token: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Handle one raw JSON-RPC message.

        Returns:
            Response envelope, or None for notifications
        """
        try:
            request = self.parse_request(raw)
        except RPCError as e:
            logger.warning(f"Rejected JSON-RPC message: {e}")
            return RPCResponse(error=e.to_error()).to_dict()

        response = await self.handle_request(request, bearer_token)
        if request.is_notification:
            return None
        return response.to_dict()

    def parse_request(self, raw: Union[str, bytes, Dict[str, Any]]) -> RPCRequest:
        if isinstance(raw, (str, bytes)):
            try:
                raw = json.loads(raw)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise RPCError(PARSE_ERROR, f"Parse error: {e}") from e

        if not isinstance(raw, dict):
            raise RPCError(INVALID_REQUEST, "Invalid Request: expected a JSON object")

        method = raw.get("method")
        if not isinstance(method, str) or not method:
            raise RPCError(INVALID_REQUEST, "Invalid Request: missing method")

        params = raw.get("params")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise RPCError(INVALID_REQUEST, "Invalid Request: params must be an object")

        return RPCRequest(
            method=method,
            params=params,
            id=raw.get("id"),
            is_notification="id" not in raw
        )

    async def handle_request(self, request: RPCRequest, bearer_token: Optional[str] = None) -> RPCResponse:
        """
        Handle a parsed request.

        Returns:
            RPCResponse with result or error
        """
        handler = self._handlers.get(request.method)
        if not handler:
            if request.method.startswith("notifications/"):
                return RPCResponse(id=request.id, result={})
            return RPCResponse(
                id=request.id,
                error={
                    "code": METHOD_NOT_FOUND,
                    "message": f"Method not found: {request.method}"
                }
            )

        try:
            result = await handler(request.params, bearer_token)
            return RPCResponse(id=request.id, result=result)
        except RPCError as e:
            return RPCResponse(id=request.id, error=e.to_error())
        except PromptoError as e:
            logger.warning(f"{request.method} failed [{e.kind}]: {e}")
            return RPCResponse(
                id=request.id,
                error={
                    "code": INTERNAL_ERROR,
                    "message": e.message,
                    "data": {"kind": e.kind}
                }
            )
        except Exception as e:
            logger.error(f"Error handling request {request.method}: {e}", exc_info=True)
            return RPCResponse(
                id=request.id,
                error={
                    "code": INTERNAL_ERROR,
                    "message": str(e) or type(e).__name__
                }
            )

    async def _handle_initialize(self, params: Dict, bearer_token: Optional[str]) -> Dict:
        """Handle initialize request"""
        return {
            "protocolVersion": params.get("protocolVersion") or PROTOCOL_VERSION,
            "serverInfo": {
                "name": self.name,
                "version": self.version
            },
            "capabilities": {
                "tools": {"listChanged": False}
            }
        }

    async def _handle_ping(self, params: Dict, bearer_token: Optional[str]) -> Dict:
        return {}

    async def _handle_tools_list(self, params: Dict, bearer_token: Optional[str]) -> Dict:
        """Handle tools/list request"""
        return {"tools": self.list_tools()}

    def list_tools(self) -> List[Dict[str, Any]]:
        """All tool schemas as exposed on this transport"""
        return self._registry.to_mcp_tools(RPC)

    async def _handle_tools_call(self, params: Dict, bearer_token: Optional[str]) -> Dict:
        """Handle tools/call request"""
        tool_name = params.get("name")
        arguments = params.get("arguments") or {}

        if not tool_name:
            raise RPCError(INVALID_REQUEST, "Tool name is required")
        if not isinstance(arguments, dict):
            raise RPCError(INVALID_REQUEST, "Tool arguments must be an object")

        result = await self._registry.execute(
            RPC,
            tool_name,
            arguments,
            bearer_token=bearer_token,
            manager_factory=self.manager_factory
        )

        return {
            "content": [
                {
                    "type": "text",
                    "text": json.dumps(result.data, ensure_ascii=False)
                }
            ],
            "isError": False
        }
