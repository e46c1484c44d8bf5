# tests/test_rpc.py
"""
JSON-RPC client tests against MockHTTPTransport.

Categories:
  1. Request shape
  2. Result parsing
  3. Error propagation
  4. httpx transport
"""

import asyncio
import json

import httpx
import pytest

from seismic_shield.block.transport.rpc import (
    HttpxTransport,
    RPCRequest,
    RPCResponse,
    SeismicRPCClient,
)
from seismic_shield.block.wire.transaction import Signature
from seismic_shield.crypto.common import as_bytes
from seismic_shield.errors import ResponseError, RPCError

from vectors import (
    ACCOUNT_ADDRESS,
    ACCOUNT_NONCE,
    GAS_PRICE,
    LATEST_BLOCK_HASH,
    LATEST_BLOCK_NUMBER,
    NETWORK_PUBLIC_KEY,
    OLDER_BLOCK_HASH,
    OLDER_BLOCK_NUMBER,
    RPC_URL,
    TX_HASH,
)


def run(coro):
    return asyncio.run(coro)


# =============================================================================
# 1. Request shape
# =============================================================================

def test_request_envelope(rpc, transport):
    run(rpc.get_chain_id())
    (request,) = transport.requests
    assert request["url"] == RPC_URL
    assert request["headers"]["Content-Type"] == "application/json"
    body = request["body"]
    assert body["jsonrpc"] == "2.0"
    assert body["method"] == "eth_chainId"
    assert body["params"] == []


def test_request_ids_increase(rpc, transport):
    run(rpc.get_chain_id())
    run(rpc.get_gas_price())
    ids = [r["body"]["id"] for r in transport.requests]
    assert ids == [1, 2]


def test_get_block_params(rpc, transport):
    run(rpc.get_block())
    run(rpc.get_block(42))
    params = [c["params"] for c in transport.calls("eth_getBlockByNumber")]
    assert params == [["latest", False], ["0x2a", False]]


def test_transaction_count_params(rpc, transport):
    run(rpc.get_transaction_count(ACCOUNT_ADDRESS))
    (call,) = transport.calls("eth_getTransactionCount")
    assert call["params"] == [ACCOUNT_ADDRESS, "latest"]


def test_send_raw_transaction_params(rpc, transport):
    assert run(rpc.send_raw_transaction(b"\x4a\x01\x02")) == TX_HASH
    (call,) = transport.calls("eth_sendRawTransaction")
    assert call["params"] == ["0x4a0102"]


def test_typed_data_submission_params(rpc, transport):
    sig = Signature(r=1, s=2, y_parity=1)
    run(rpc.send_typed_data_transaction({"message": {}}, sig))
    run(rpc.call_typed_data({"message": {}}, sig))
    (send,) = transport.calls("eth_sendRawTransaction")
    (call,) = transport.calls("eth_call")
    for body in (send, call):
        assert body["params"] == [{"data": {"message": {}}, "signature": sig.to_rpc()}]


def test_call_params(rpc, transport):
    run(rpc.call(b"\x4a", block=7))
    (call,) = transport.calls("eth_call")
    assert call["params"] == ["0x4a", "0x7"]


# =============================================================================
# 2. Result parsing
# =============================================================================

def test_hex_results(rpc):
    assert run(rpc.get_chain_id()) == 31337
    assert run(rpc.get_block_number()) == LATEST_BLOCK_NUMBER
    assert run(rpc.get_transaction_count(ACCOUNT_ADDRESS)) == ACCOUNT_NONCE
    assert run(rpc.get_gas_price()) == GAS_PRICE


def test_blocks(rpc):
    latest = run(rpc.get_block("latest"))
    assert latest.number == LATEST_BLOCK_NUMBER
    assert latest.hash == as_bytes(LATEST_BLOCK_HASH)
    older = run(rpc.get_block_by_hash(OLDER_BLOCK_HASH))
    assert older.number == OLDER_BLOCK_NUMBER
    assert older.hash == as_bytes(OLDER_BLOCK_HASH)


def test_tee_public_key(rpc):
    assert run(rpc.get_tee_public_key()) == as_bytes(NETWORK_PUBLIC_KEY)


def test_queued_response_wins(rpc, transport):
    transport.queue_response(json.dumps({"jsonrpc": "2.0", "id": 1, "result": "0x1"}).encode())
    assert run(rpc.get_chain_id()) == 1
    assert run(rpc.get_chain_id()) == 31337


def test_request_response_dataclasses():
    request = RPCRequest(method="eth_chainId", id=9)
    assert json.loads(request.to_json()) == {
        "jsonrpc": "2.0", "method": "eth_chainId", "params": [], "id": 9,
    }
    response = RPCResponse.from_json('{"jsonrpc": "2.0", "id": 9, "result": "0x1"}')
    assert not response.is_error
    assert response.result == "0x1"


# =============================================================================
# 3. Error propagation
# =============================================================================

def test_error_object_raises_response_error(rpc, transport):
    transport.set_error("eth_sendRawTransaction", -32003, "insufficient funds", data="0xdead")
    with pytest.raises(ResponseError) as exc_info:
        run(rpc.send_raw_transaction(b"\x4a"))
    err = exc_info.value
    assert isinstance(err, RPCError)
    assert err.code == -32003
    assert err.data == "0xdead"
    assert "insufficient funds" in str(err)


def test_unsupported_method_is_rejected_locally(rpc, transport):
    with pytest.raises(ValueError):
        run(rpc._call("eth_accounts", []))
    assert transport.requests == []


@pytest.mark.parametrize("method", ["eth_getBlockByNumber", "eth_getBlockByHash"])
def test_block_not_found(rpc, transport, method):
    transport.set_result(method, None)
    with pytest.raises(ResponseError):
        if method == "eth_getBlockByNumber":
            run(rpc.get_block("latest"))
        else:
            run(rpc.get_block_by_hash(OLDER_BLOCK_HASH))


@pytest.mark.parametrize("body", [b"not json", b"[1, 2]"])
def test_malformed_response(rpc, transport, body):
    transport.queue_response(body)
    with pytest.raises(ResponseError):
        run(rpc.get_chain_id())


def test_default_transport_is_httpx():
    client = SeismicRPCClient(RPC_URL)
    assert isinstance(client.transport, HttpxTransport)
    run(client.aclose())


# =============================================================================
# 4. httpx transport
# =============================================================================

def _httpx_rpc(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SeismicRPCClient(RPC_URL, transport=HttpxTransport(client=client)), client


def test_httpx_transport_posts_json():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        seen["content_type"] = request.headers["content-type"]
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": seen["body"]["id"], "result": "0x1404"})

    rpc, client = _httpx_rpc(handler)

    async def scenario():
        try:
            return await rpc.get_chain_id()
        finally:
            await client.aclose()

    assert run(scenario()) == 5124
    assert seen["body"]["method"] == "eth_chainId"
    assert seen["content_type"] == "application/json"


def test_httpx_transport_http_errors_are_not_wrapped():
    rpc, client = _httpx_rpc(lambda request: httpx.Response(503, text="unavailable"))

    async def scenario():
        try:
            return await rpc.get_chain_id()
        finally:
            await client.aclose()

    with pytest.raises(httpx.HTTPStatusError):
        run(scenario())
