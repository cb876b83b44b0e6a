"""
Prompto
=======
Lifecycle management for LangSmith prompts: list, show, create, update and
delete, exposed over a CLI, an MCP server and a JSON-RPC endpoint.
"""

__version__ = "1.0.0"
