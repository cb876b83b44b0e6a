"""JSON-RPC binding of the prompt tools"""

from prompto.rpc.server import RPCRequest, RPCResponse, RPCServer

__all__ = ['RPCRequest', 'RPCResponse', 'RPCServer']
