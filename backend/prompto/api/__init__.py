"""HTTP endpoints for the JSON-RPC binding"""
