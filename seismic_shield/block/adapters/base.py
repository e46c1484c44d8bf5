# seismic_shield/block/adapters/base.py
"""
Seismic Shield Adapters: Account Interface

The builder never touches signing keys directly. It asks an account adapter
either to sign a serialized transaction or to sign an EIP-712 rendering of
it, depending on what the account can do.

Account Implementations:
    - LocalAccountAdapter:   in-process secp256k1 key (raw tx + typed data)
    - JsonRpcAccountAdapter: node/wallet-managed account (typed data only,
                             via eth_signTypedData_v4)

Usage:
    account = LocalAccountAdapter(private_key)
    raw = await account.sign_transaction(tx)

    remote = JsonRpcAccountAdapter(address, rpc)
    if not remote.has_capability(AccountCapability.SIGN_TRANSACTION):
        sig = await remote.sign_typed_data(seismic_tx_typed_data(tx))
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, Callable, Dict

from eth_account import Account
from eth_account.messages import encode_defunct, encode_typed_data
from eth_keys import keys
from eth_utils import ValidationError, keccak, to_checksum_address

from ..transport.rpc import SeismicRPCClient
from ..wire.transaction import (
    SeismicTransaction,
    Signature,
    serialize_seismic_transaction,
)
from ...crypto.common import BytesLike, as_bytes
from ...errors import InvalidPrivateKeyError, UnsupportedSigningError


TxSerializer = Callable[..., bytes]


# =============================================================================
# Enums
# =============================================================================

class AccountCapability(IntEnum):
    """Account capability flags."""
    SIGN_MESSAGE = 0x01          # personal_sign
    SIGN_TYPED_DATA = 0x02       # EIP-712
    SIGN_TRANSACTION = 0x04      # raw transaction hash


# =============================================================================
# AccountAdapter
# =============================================================================

class AccountAdapter(ABC):
    """Abstract base class for account adapters."""

    kind: str = "abstract"

    @property
    @abstractmethod
    def address(self) -> str:
        """Checksummed account address."""
        pass

    @property
    @abstractmethod
    def capabilities(self) -> int:
        """Bitmask of AccountCapability."""
        pass

    def has_capability(self, cap: AccountCapability) -> bool:
        return bool(self.capabilities & cap)

    @property
    def signs_raw_transactions(self) -> bool:
        return self.has_capability(AccountCapability.SIGN_TRANSACTION)

    async def sign_transaction(
        self,
        tx: SeismicTransaction,
        serializer: TxSerializer = serialize_seismic_transaction,
    ) -> bytes:
        """
        Sign ``tx`` and return its signed serialization.

        ``serializer(tx)`` gives the unsigned bytes whose keccak256 is
        signed; ``serializer(tx, signature)`` gives the result.
        """
        raise UnsupportedSigningError(
            f"{self.kind} account {self.address} cannot sign raw transactions"
        )

    @abstractmethod
    async def sign_typed_data(self, typed_data: Dict[str, Any]) -> Signature:
        """Sign an EIP-712 full message."""
        pass

    async def sign_message(self, message: bytes) -> Signature:
        raise UnsupportedSigningError(
            f"{self.kind} account {self.address} cannot sign messages"
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(address={self.address})"


# =============================================================================
# LocalAccountAdapter
# =============================================================================

class LocalAccountAdapter(AccountAdapter):
    """In-process account backed by a 32-byte private key."""

    kind = "local"

    def __init__(self, private_key: BytesLike):
        raw = as_bytes(private_key)
        try:
            self._key = keys.PrivateKey(raw)
        except ValidationError as e:
            raise InvalidPrivateKeyError(
                f"Invalid account private key: {e}",
                field="privateKey",
            ) from e
        self._address = self._key.public_key.to_checksum_address()

    @property
    def address(self) -> str:
        return self._address

    @property
    def capabilities(self) -> int:
        return (
            AccountCapability.SIGN_MESSAGE
            | AccountCapability.SIGN_TYPED_DATA
            | AccountCapability.SIGN_TRANSACTION
        )

    async def sign_transaction(
        self,
        tx: SeismicTransaction,
        serializer: TxSerializer = serialize_seismic_transaction,
    ) -> bytes:
        digest = keccak(serializer(tx))
        sig = self._key.sign_msg_hash(digest)
        return serializer(tx, Signature(r=sig.r, s=sig.s, y_parity=sig.v))

    async def sign_typed_data(self, typed_data: Dict[str, Any]) -> Signature:
        signed = Account.sign_message(
            encode_typed_data(full_message=typed_data),
            private_key=self._key.to_bytes(),
        )
        return Signature(r=signed.r, s=signed.s, v=signed.v)

    async def sign_message(self, message: bytes) -> Signature:
        signed = Account.sign_message(encode_defunct(primitive=message), private_key=self._key.to_bytes())
        return Signature(r=signed.r, s=signed.s, v=signed.v)


# =============================================================================
# JsonRpcAccountAdapter
# =============================================================================

class JsonRpcAccountAdapter(AccountAdapter):
    """
    Account managed by the node or a wallet behind JSON-RPC.

    Only typed data can be signed; the builder switches to the typed-data
    path and message version 2 for such accounts.
    """

    kind = "json-rpc"

    def __init__(self, address: str, rpc: SeismicRPCClient):
        self._address = to_checksum_address(address)
        self._rpc = rpc

    @property
    def address(self) -> str:
        return self._address

    @property
    def capabilities(self) -> int:
        return AccountCapability.SIGN_TYPED_DATA

    async def sign_typed_data(self, typed_data: Dict[str, Any]) -> Signature:
        return Signature.from_bytes(await self._rpc.sign_typed_data(self._address, typed_data))


# =============================================================================
# Recovery helpers
# =============================================================================

def recover_typed_data_signer(typed_data: Dict[str, Any], signature: Signature) -> str:
    """Checksummed address that produced ``signature`` over ``typed_data``."""
    return Account.recover_message(
        encode_typed_data(full_message=typed_data),
        signature=signature.to_bytes(),
    )


def recover_message_signer(message: bytes, signature: Signature) -> str:
    return Account.recover_message(
        encode_defunct(primitive=message),
        signature=signature.to_bytes(),
    )


__all__ = [
    "TxSerializer",
    "AccountCapability",
    "AccountAdapter",
    "LocalAccountAdapter",
    "JsonRpcAccountAdapter",
    "recover_typed_data_signer",
    "recover_message_signer",
]
