# seismic_shield/block/transport/__init__.py
"""
Seismic Shield Transport

    SeismicRPCClient: JSON-RPC client for the shielded tx flow
    HTTPTransport:    pluggable HTTP layer (HttpxTransport, MockHTTPTransport)
"""

from .rpc import (
    JSONRPC_VERSION,
    SUPPORTED_METHODS,
    RPCRequest,
    RPCResponse,
    BlockInfo,
    HTTPTransport,
    HttpxTransport,
    MockHTTPTransport,
    SeismicRPCClient,
)

__all__ = [
    "JSONRPC_VERSION",
    "SUPPORTED_METHODS",
    "RPCRequest",
    "RPCResponse",
    "BlockInfo",
    "HTTPTransport",
    "HttpxTransport",
    "MockHTTPTransport",
    "SeismicRPCClient",
]
