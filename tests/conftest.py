# tests/conftest.py
"""Shared fixtures: a scripted node, a local account and an encryptor."""

import pytest

from seismic_shield.block.adapters.base import LocalAccountAdapter
from seismic_shield.block.mempool.builder import ShieldedTxBuilder
from seismic_shield.block.mempool.encrypt import ShieldedEncryptor
from seismic_shield.block.transport.rpc import MockHTTPTransport, SeismicRPCClient

from vectors import (
    ACCOUNT_NONCE,
    ACCOUNT_PRIVATE_KEY,
    CLIENT_PRIVATE_KEY,
    GAS_PRICE,
    LATEST_BLOCK_HASH,
    LATEST_BLOCK_NUMBER,
    NETWORK_PUBLIC_KEY,
    OLDER_BLOCK_HASH,
    OLDER_BLOCK_NUMBER,
    RPC_URL,
    TX_HASH,
)


@pytest.fixture
def make_transport():
    """Factory for mock nodes answering every method the builder needs."""
    def _make(cls=MockHTTPTransport):
        t = cls()
        t.set_result("eth_chainId", hex(31337))
        t.set_result("eth_blockNumber", hex(LATEST_BLOCK_NUMBER))
        t.set_result(
            "eth_getBlockByNumber",
            {"number": hex(LATEST_BLOCK_NUMBER), "hash": LATEST_BLOCK_HASH},
        )
        t.set_result(
            "eth_getBlockByHash",
            {"number": hex(OLDER_BLOCK_NUMBER), "hash": OLDER_BLOCK_HASH},
        )
        t.set_result("eth_getTransactionCount", hex(ACCOUNT_NONCE))
        t.set_result("eth_gasPrice", hex(GAS_PRICE))
        t.set_result("seismic_getTeePublicKey", NETWORK_PUBLIC_KEY)
        t.set_result("eth_sendRawTransaction", TX_HASH)
        return t
    return _make


@pytest.fixture
def transport(make_transport):
    return make_transport()


@pytest.fixture
def rpc(transport):
    return SeismicRPCClient(RPC_URL, transport=transport)


@pytest.fixture
def account():
    return LocalAccountAdapter(ACCOUNT_PRIVATE_KEY)


@pytest.fixture
def encryptor():
    return ShieldedEncryptor.from_key_agreement(CLIENT_PRIVATE_KEY, NETWORK_PUBLIC_KEY)


@pytest.fixture
def builder(rpc, encryptor, account):
    return ShieldedTxBuilder(rpc, encryptor, account, chain_id=31337)
