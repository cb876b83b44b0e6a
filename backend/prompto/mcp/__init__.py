"""MCP binding of the prompt tools"""

from prompto.mcp.server import PromptToolBinding, build_server, create_http_app, run_http, run_stdio

__all__ = ['PromptToolBinding', 'build_server', 'create_http_app', 'run_http', 'run_stdio']
