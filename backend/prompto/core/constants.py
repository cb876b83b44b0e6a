# prompto/core/constants.py

TEMPLATE_FORMATS = ["mustache", "f-string"]
DEFAULT_TEMPLATE_FORMAT = "mustache"

# Transport identifiers used by the operation registry
CLI = "cli"
MCP = "mcp"
RPC = "rpc"
TRANSPORTS = frozenset({CLI, MCP, RPC})
REMOTE_TRANSPORTS = frozenset({MCP, RPC})

# Listing policy: only private, non-archived prompts
LIST_IS_PUBLIC = False
LIST_IS_ARCHIVED = False
LIST_PAGE_SIZE = 100

API_KEY_PARAMETER = "apiKey"
