# seismic_shield/block/transport/rpc.py
"""
Seismic Shield Transport: JSON-RPC Client

Thin async JSON-RPC client covering exactly the node methods the shielded
transaction flow needs. It is not a general Ethereum client.

Architecture:
    ShieldedTxBuilder → SeismicRPCClient → HTTPTransport → Node

    HTTPTransport is pluggable:
      - HttpxTransport:     httpx.AsyncClient, for real endpoints
      - MockHTTPTransport:  records requests, replays canned responses

Usage:
    rpc = SeismicRPCClient("http://127.0.0.1:8545")
    chain_id = await rpc.get_chain_id()
    block = await rpc.get_block("latest")
    tx_hash = await rpc.send_raw_transaction(raw_tx)

Errors:
    JSON-RPC error objects raise ResponseError (code/message/data kept).
    Transport failures (httpx.HTTPError, timeouts) propagate unchanged.
"""

from __future__ import annotations

import json
import logging
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import httpx

from ..wire.transaction import Signature
from ...crypto.common import BytesLike, as_bytes, to_hex
from ...errors import ResponseError


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

JSONRPC_VERSION = "2.0"

METHOD_CHAIN_ID = "eth_chainId"
METHOD_BLOCK_NUMBER = "eth_blockNumber"
METHOD_GET_BLOCK_BY_NUMBER = "eth_getBlockByNumber"
METHOD_GET_BLOCK_BY_HASH = "eth_getBlockByHash"
METHOD_GET_TRANSACTION_COUNT = "eth_getTransactionCount"
METHOD_GAS_PRICE = "eth_gasPrice"
METHOD_SEND_RAW_TRANSACTION = "eth_sendRawTransaction"
METHOD_CALL = "eth_call"
METHOD_SIGN_TYPED_DATA = "eth_signTypedData_v4"
METHOD_GET_TEE_PUBLIC_KEY = "seismic_getTeePublicKey"

# Every method this client may send. Anything else is rejected locally.
SUPPORTED_METHODS = frozenset({
    METHOD_CHAIN_ID,
    METHOD_BLOCK_NUMBER,
    METHOD_GET_BLOCK_BY_NUMBER,
    METHOD_GET_BLOCK_BY_HASH,
    METHOD_GET_TRANSACTION_COUNT,
    METHOD_GAS_PRICE,
    METHOD_SEND_RAW_TRANSACTION,
    METHOD_CALL,
    METHOD_SIGN_TYPED_DATA,
    METHOD_GET_TEE_PUBLIC_KEY,
})

BlockTag = Union[str, int]


# =============================================================================
# Request/Response Types
# =============================================================================

@dataclass
class RPCRequest:
    """JSON-RPC request."""
    method: str
    params: List[Any] = field(default_factory=list)
    id: Union[int, str] = field(default_factory=lambda: secrets.randbelow(2**32))
    jsonrpc: str = JSONRPC_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jsonrpc": self.jsonrpc,
            "method": self.method,
            "params": self.params,
            "id": self.id,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


@dataclass
class RPCResponse:
    """JSON-RPC response."""
    id: Union[int, str, None]
    result: Any = None
    error: Optional[Dict[str, Any]] = None
    jsonrpc: str = JSONRPC_VERSION

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RPCResponse":
        return cls(
            id=data.get("id"),
            result=data.get("result"),
            error=data.get("error"),
            jsonrpc=data.get("jsonrpc", JSONRPC_VERSION),
        )

    @classmethod
    def from_json(cls, json_str: str) -> "RPCResponse":
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ResponseError(f"Malformed JSON-RPC response: {e}") from e
        if not isinstance(data, dict):
            raise ResponseError("JSON-RPC response must be an object")
        return cls.from_dict(data)


@dataclass(frozen=True)
class BlockInfo:
    """The two block fields the validity window needs."""
    number: int
    hash: bytes

    @classmethod
    def from_rpc(cls, block: Dict[str, Any]) -> "BlockInfo":
        return cls(number=_hex_to_int(block["number"]), hash=as_bytes(block["hash"]))


def _hex_to_int(value: Union[str, int]) -> int:
    if isinstance(value, int):
        return value
    return int(value, 16)


def _block_param(block: BlockTag) -> str:
    return hex(block) if isinstance(block, int) else block


# =============================================================================
# HTTP Transport
# =============================================================================

class HTTPTransport(ABC):
    """Abstract HTTP transport for RPC calls."""

    @abstractmethod
    async def post(self, url: str, data: bytes, headers: Dict[str, str]) -> bytes:
        """Send POST request and return response body."""
        pass

    async def aclose(self) -> None:
        """Release any pooled connections."""
        return None


class HttpxTransport(HTTPTransport):
    """httpx-backed transport. Non-2xx responses raise httpx.HTTPStatusError."""

    def __init__(self, timeout: float = 30.0, client: Optional[httpx.AsyncClient] = None):
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    async def post(self, url: str, data: bytes, headers: Dict[str, str]) -> bytes:
        response = await self._client.post(url, content=data, headers=headers)
        response.raise_for_status()
        return response.content

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class MockHTTPTransport(HTTPTransport):
    """
    Mock HTTP transport for testing.

    Resolution order for each request:
        1. queued raw responses (FIFO)
        2. per-method results/errors registered with set_result/set_error
        3. a default ``0x00..00`` result
    """

    def __init__(self):
        self.requests: List[Dict] = []
        self._response_queue: List[bytes] = []
        self._by_method: Dict[str, Dict[str, Any]] = {}

    def queue_response(self, response: bytes) -> None:
        """Queue a raw response body to return."""
        self._response_queue.append(response)

    def set_result(self, method: str, result: Any) -> None:
        """Answer every ``method`` request with ``result``."""
        self._by_method[method] = {"result": result}

    def set_error(self, method: str, code: int, message: str, data: Any = None) -> None:
        """Answer every ``method`` request with a JSON-RPC error object."""
        error = {"code": code, "message": message}
        if data is not None:
            error["data"] = data
        self._by_method[method] = {"error": error}

    def calls(self, method: str) -> List[Dict[str, Any]]:
        """Decoded request bodies sent for ``method``."""
        return [r["body"] for r in self.requests if r["body"].get("method") == method]

    async def post(self, url: str, data: bytes, headers: Dict[str, str]) -> bytes:
        body = json.loads(data.decode())
        self.requests.append({
            "url": url,
            "data": data,
            "headers": headers,
            "body": body,
        })
        if self._response_queue:
            return self._response_queue.pop(0)
        payload = {"jsonrpc": JSONRPC_VERSION, "id": body.get("id")}
        canned = self._by_method.get(body.get("method"))
        if canned is not None:
            payload.update(canned)
        else:
            payload["result"] = "0x" + "0" * 64
        return json.dumps(payload).encode()


# =============================================================================
# SeismicRPCClient
# =============================================================================

class SeismicRPCClient:
    """
    JSON-RPC client for a Seismic node.

    Stateless apart from the request counter; concurrent calls from one
    event loop are safe.
    """

    def __init__(
        self,
        endpoint: str,
        transport: Optional[HTTPTransport] = None,
        timeout: float = 30.0,
    ):
        """
        Args:
            endpoint: RPC endpoint URL
            transport: HTTP transport (httpx if None)
            timeout: Request timeout in seconds for the default transport
        """
        self._endpoint = endpoint
        self._transport = transport or HttpxTransport(timeout=timeout)
        self._request_id = 0

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def transport(self) -> HTTPTransport:
        return self._transport

    def _next_id(self) -> int:
        self._request_id += 1
        return self._request_id

    async def _call(self, method: str, params: List[Any]) -> Any:
        """
        Make RPC call.

        Raises:
            ValueError: method is not in SUPPORTED_METHODS
            ResponseError: node returned an error object
        """
        if method not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported RPC method: {method}")

        request = RPCRequest(method=method, params=params, id=self._next_id())
        headers = {"Content-Type": "application/json"}

        logger.debug("rpc -> %s id=%s", method, request.id)
        response_bytes = await self._transport.post(
            self._endpoint,
            request.to_json().encode(),
            headers,
        )
        response = RPCResponse.from_json(response_bytes.decode())

        if response.is_error:
            error = response.error
            logger.debug("rpc <- %s id=%s error=%s", method, request.id, error)
            raise ResponseError(
                message=error.get("message", "Unknown error"),
                code=error.get("code", -32000),
                data=error.get("data"),
            )
        return response.result

    async def aclose(self) -> None:
        await self._transport.aclose()

    # =========================================================================
    # Chain state
    # =========================================================================

    async def get_chain_id(self) -> int:
        return _hex_to_int(await self._call(METHOD_CHAIN_ID, []))

    async def get_block_number(self) -> int:
        return _hex_to_int(await self._call(METHOD_BLOCK_NUMBER, []))

    async def get_block(self, block: BlockTag = "latest") -> BlockInfo:
        """Block by number or tag ("latest", "pending", ...)."""
        result = await self._call(METHOD_GET_BLOCK_BY_NUMBER, [_block_param(block), False])
        if result is None:
            raise ResponseError(f"Block not found: {block}")
        return BlockInfo.from_rpc(result)

    async def get_block_by_hash(self, block_hash: BytesLike) -> BlockInfo:
        block_hex = to_hex(as_bytes(block_hash))
        result = await self._call(METHOD_GET_BLOCK_BY_HASH, [block_hex, False])
        if result is None:
            raise ResponseError(f"Block not found: {block_hex}")
        return BlockInfo.from_rpc(result)

    async def get_transaction_count(self, address: str, block: BlockTag = "latest") -> int:
        return _hex_to_int(
            await self._call(METHOD_GET_TRANSACTION_COUNT, [address, _block_param(block)])
        )

    async def get_gas_price(self) -> int:
        return _hex_to_int(await self._call(METHOD_GAS_PRICE, []))

    async def get_tee_public_key(self) -> bytes:
        """The enclave's compressed secp256k1 public key."""
        return as_bytes(await self._call(METHOD_GET_TEE_PUBLIC_KEY, []))

    # =========================================================================
    # Submission
    # =========================================================================

    async def send_raw_transaction(self, raw_tx: bytes) -> str:
        """Broadcast a signed 0x4a transaction. Returns the tx hash."""
        return await self._call(METHOD_SEND_RAW_TRANSACTION, [to_hex(raw_tx)])

    async def send_typed_data_transaction(
        self,
        typed_data: Dict[str, Any],
        signature: Signature,
    ) -> str:
        """Broadcast a typed-data-signed transaction."""
        return await self._call(
            METHOD_SEND_RAW_TRANSACTION,
            [{"data": typed_data, "signature": signature.to_rpc()}],
        )

    async def call(self, raw_tx: bytes, block: BlockTag = "latest") -> str:
        """Signed read with a raw-signed transaction. Returns hex output."""
        return await self._call(METHOD_CALL, [to_hex(raw_tx), _block_param(block)])

    async def call_typed_data(
        self,
        typed_data: Dict[str, Any],
        signature: Signature,
    ) -> str:
        """Signed read with a typed-data-signed transaction."""
        return await self._call(
            METHOD_CALL,
            [{"data": typed_data, "signature": signature.to_rpc()}],
        )

    async def sign_typed_data(self, address: str, typed_data: Dict[str, Any]) -> bytes:
        """Ask the node-managed account ``address`` to sign typed data."""
        result = await self._call(METHOD_SIGN_TYPED_DATA, [address, json.dumps(typed_data)])
        return as_bytes(result)


__all__ = [
    "JSONRPC_VERSION",
    "SUPPORTED_METHODS",
    "BlockTag",
    "RPCRequest",
    "RPCResponse",
    "BlockInfo",
    "HTTPTransport",
    "HttpxTransport",
    "MockHTTPTransport",
    "SeismicRPCClient",
]
