# main_api.py
from typing import Optional

import aiohttp
from quart import Quart

from prompto.api.endpoints import api_bp
from prompto.core.logging import logger
from prompto.core.settings import settings
from prompto.prompts.manager import create_manager
from prompto.rpc.server import RPCServer
from prompto.tools.tool_registry import ManagerFactory


def create_app(manager_factory: Optional[ManagerFactory] = None) -> Quart:
    """
    Build the HTTP binding.

    Without an explicit factory every call gets a fresh manager on the
    app-wide aiohttp session.
    """
    app = Quart(__name__)
    app.register_blueprint(api_bp)
    app.rpc_server = RPCServer(manager_factory=manager_factory or create_manager)

    @app.before_serving
    async def startup():
        """Initialize resources."""
        app.aiohttp_session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=settings.HUB_TIMEOUT_SECONDS)
        )
        logger.info("AIOHTTP ClientSession created.")

        if manager_factory is None:
            session = app.aiohttp_session
            app.rpc_server.manager_factory = lambda api_key: create_manager(api_key, http_session=session)

    @app.after_serving
    async def shutdown():
        """Cleanup resources."""
        if hasattr(app, 'aiohttp_session') and not app.aiohttp_session.closed:
            await app.aiohttp_session.close()
            logger.info("AIOHTTP ClientSession closed.")

    return app


app = create_app()


def run(host: Optional[str] = None, port: Optional[int] = None) -> None:
    host = host or settings.HOST
    port = port or settings.PORT
    logger.warning(f"Prompt server listening on http://{host}:{port}/mcp")
    app.run(host=host, port=port, debug=False)


if __name__ == '__main__':
    run()
