"""Tests for the JSON-RPC server."""

import json

import pytest

from prompto.rpc.server import RPCServer


@pytest.fixture
def server(factory) -> RPCServer:
    return RPCServer(manager_factory=factory, name="prompto-test")


def _call(name, arguments=None, request_id=1):
    return json.dumps({
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "tools/call",
        "params": {"name": name, "arguments": arguments or {}},
    })


class TestProtocol:
    @pytest.mark.asyncio
    async def test_parse_error(self, server):
        response = await server.handle_message("{not json")
        assert response["jsonrpc"] == "2.0"
        assert response["id"] is None
        assert response["error"]["code"] == -32700

    @pytest.mark.asyncio
    async def test_non_object_envelope(self, server):
        response = await server.handle_message("[1, 2]")
        assert response["error"]["code"] == -32600

    @pytest.mark.asyncio
    async def test_unknown_method(self, server):
        response = await server.handle_message({"jsonrpc": "2.0", "id": 7, "method": "resources/list"})
        assert response == {
            "jsonrpc": "2.0",
            "id": 7,
            "error": {"code": -32601, "message": "Method not found: resources/list"},
        }

    @pytest.mark.asyncio
    async def test_initialize(self, server):
        response = await server.handle_message({"jsonrpc": "2.0", "id": "a", "method": "initialize"})
        result = response["result"]
        assert result["serverInfo"]["name"] == "prompto-test"
        assert "tools" in result["capabilities"]

    @pytest.mark.asyncio
    async def test_ping(self, server):
        response = await server.handle_message({"jsonrpc": "2.0", "id": 2, "method": "ping"})
        assert response == {"jsonrpc": "2.0", "id": 2, "result": {}}

    @pytest.mark.asyncio
    async def test_notification_has_no_response(self, server):
        assert await server.handle_message({"jsonrpc": "2.0", "method": "notifications/initialized"}) is None

    @pytest.mark.asyncio
    async def test_tools_list_uses_rpc_names(self, server):
        response = await server.handle_message({"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
        names = [tool["name"] for tool in response["result"]["tools"]]
        assert names == ["list_prompts", "get_prompt", "create_prompt", "update_prompt", "delete_prompt"]

    @pytest.mark.asyncio
    async def test_tools_call_without_name(self, server):
        response = await server.handle_message(
            {"jsonrpc": "2.0", "id": 1, "method": "tools/call", "params": {}}
        )
        assert response["error"]["code"] == -32600


class TestToolCalls:
    @pytest.mark.asyncio
    async def test_get_prompt(self, server, hub):
        hub.seed("org/p", template="Hello {{name}}", variables=["name"])

        response = await server.handle_message(
            _call("get_prompt", {"promptId": "org/p", "variables": {"name": "Ava"}}),
            bearer_token="bearer-key",
        )

        result = response["result"]
        assert result["isError"] is False
        assert result["content"][0]["type"] == "text"
        payload = json.loads(result["content"][0]["text"])
        assert payload == {"id": "org/p", "variables": {"name": "Ava"}, "prompt": "Hello Ava"}

    @pytest.mark.asyncio
    async def test_bearer_token_is_forwarded(self, server, factory):
        await server.handle_message(_call("list_prompts"), bearer_token="bearer-key")
        assert factory.keys == ["bearer-key"]

    @pytest.mark.asyncio
    async def test_operation_error_envelope(self, server):
        response = await server.handle_message(
            _call("delete_prompt", {"promptId": "org/missing"}), bearer_token="k"
        )
        assert response["error"] == {
            "code": -32603,
            "message": 'Prompt "org/missing" was not found.',
            "data": {"kind": "NotFound"},
        }

    @pytest.mark.asyncio
    async def test_missing_credential(self, server, factory):
        response = await server.handle_message(_call("list_prompts"))
        assert response["error"]["code"] == -32603
        assert response["error"]["data"] == {"kind": "MissingCredential"}
        assert factory.keys == []

    @pytest.mark.asyncio
    async def test_unknown_tool(self, server):
        response = await server.handle_message(_call("prompts_list"), bearer_token="k")
        assert response["error"]["data"] == {"kind": "InvalidInputFormat"}

    @pytest.mark.asyncio
    async def test_create_then_list(self, server):
        await server.handle_message(
            _call("create_prompt", {"promptId": "org/p", "template": "Hi", "tags": ["t"]}),
            bearer_token="k",
        )
        response = await server.handle_message(_call("list_prompts", request_id=2), bearer_token="k")

        prompts = json.loads(response["result"]["content"][0]["text"])
        assert [p["promptId"] for p in prompts] == ["org/p"]
        assert prompts[0]["tags"] == ["t"]
