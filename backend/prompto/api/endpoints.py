# prompto/api/endpoints.py
from quart import Blueprint, current_app, jsonify, request

from prompto.core.auth import parse_bearer_token
from prompto.core.constants import RPC
from prompto.core.logging import logger
from prompto.hub.base import ProviderStatus
from prompto.hub.langsmith_provider import LangSmithHubProvider

api_bp = Blueprint('api', __name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


@api_bp.after_app_request
async def add_cors_headers(response):
    for header, value in CORS_HEADERS.items():
        response.headers[header] = value
    return response


@api_bp.app_errorhandler(404)
async def not_found(error):
    return jsonify({"error": "Not found"}), 404


@api_bp.route('/health', methods=['GET'])
async def health_check():
    """
    Health check endpoint.
    With ?deep=1 the prompt hub itself is pinged as well.
    """
    rpc_server = current_app.rpc_server
    body = {
        "status": "healthy",
        "server": {"name": rpc_server.name, "version": rpc_server.version},
        "tools": [tool["name"] for tool in rpc_server.list_tools()],
    }

    if request.args.get("deep") not in (None, "", "0", "false"):
        hub = LangSmithHubProvider(api_key="")
        session = getattr(current_app, "aiohttp_session", None)
        if session is not None:
            hub.set_http_session(session)
        try:
            hub_status = await hub.health_check()
        finally:
            await hub.shutdown()
        body["hub"] = hub_status.value
        if hub_status != ProviderStatus.HEALTHY:
            body["status"] = "degraded"
            return jsonify(body), 503

    return jsonify(body), 200


@api_bp.route('/mcp', methods=['POST', 'OPTIONS'])
async def handle_rpc_request():
    """JSON-RPC endpoint: tools/list and tools/call over HTTP."""
    if request.method == 'OPTIONS':
        return "", 204

    raw = await request.get_data(as_text=True)
    bearer_token = parse_bearer_token(request.headers.get("Authorization"))

    logger.debug(f"{RPC} request received ({len(raw)} bytes, bearer={'yes' if bearer_token else 'no'})")
    response = await current_app.rpc_server.handle_message(raw, bearer_token=bearer_token)
    if response is None:
        return "", 202
    return jsonify(response), 200
