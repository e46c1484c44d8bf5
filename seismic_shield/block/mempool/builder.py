# seismic_shield/block/mempool/builder.py
"""
Seismic Shield Mempool: Shielded Transaction Builder

Orchestrates one shielded transaction or signed read end to end:

    1. resolve nonce, chain id and validity window concurrently
    2. assemble TxSeismicMetadata
    3. encrypt calldata with the metadata as AAD
    4. serialize and sign (raw tx or EIP-712, by account capability)
    5. broadcast (eth_sendRawTransaction) or read (eth_call)

Validity window policy (blocks_window defaults to 100):

    recent_block_hash  expires_at_block   behaviour
    -----------------  ----------------   ------------------------------------
    given              given              used as is
    given              -                  fetch that block, expiry = number + window
    -                  -                  latest block, expiry = number + window
    -                  given              latest block; expiry must be > its number

Usage:
    builder = ShieldedTxBuilder(rpc, encryptor, account, chain_id=31337)
    tx_hash = await builder.send_shielded_transaction(data=calldata, to=contract)
    output = await builder.signed_call(data=calldata, to=contract)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..adapters.base import AccountAdapter
from ..chains import DEFAULT_BLOCKS_WINDOW, DEFAULT_GAS
from ..transport.rpc import BlockTag, SeismicRPCClient
from ..wire.metadata import AadFormat, TxSeismicMetadata, build_metadata
from ..wire.transaction import (
    SeismicTransaction,
    Signature,
    serialize_seismic_transaction,
)
from ..wire.typed_data import TYPED_DATA_MESSAGE_VERSION, seismic_tx_typed_data
from .encrypt import ShieldedEncryptor
from ...crypto.common import BytesLike, as_bytes, is_empty, to_hex
from ...crypto.nonce import normalize_nonce
from ...errors import (
    ChainIdMismatchError,
    ExpiredBlockError,
    SignedCallError,
    SigningError,
)


logger = logging.getLogger(__name__)

RAW_MESSAGE_VERSION: int = 0


# =============================================================================
# Parameters
# =============================================================================

@dataclass
class SecurityParams:
    """
    Per-transaction overrides for the replay/expiry binding.

    Attributes:
        blocks_window: Blocks until expiry when expiry is derived
        encryption_nonce: Fixed 12-byte nonce (tests only; random otherwise)
        recent_block_hash: Block hash to bind to
        expires_at_block: Explicit expiry block
    """
    blocks_window: int = DEFAULT_BLOCKS_WINDOW
    encryption_nonce: Optional[BytesLike] = None
    recent_block_hash: Optional[BytesLike] = None
    expires_at_block: Optional[int] = None


@dataclass(frozen=True)
class ValidityWindow:
    recent_block_hash: bytes
    expires_at_block: int


async def resolve_validity_window(
    rpc: SeismicRPCClient,
    params: SecurityParams,
) -> ValidityWindow:
    """
    Apply the validity window policy.

    Raises:
        ExpiredBlockError: explicit expiry is not ahead of the latest block
    """
    block_hash = None if is_empty(params.recent_block_hash) else as_bytes(params.recent_block_hash)
    expiry = params.expires_at_block

    if block_hash is not None and expiry is not None:
        return ValidityWindow(block_hash, expiry)

    if block_hash is not None:
        block = await rpc.get_block_by_hash(block_hash)
        return ValidityWindow(block.hash, block.number + params.blocks_window)

    latest = await rpc.get_block("latest")
    if expiry is None:
        return ValidityWindow(latest.hash, latest.number + params.blocks_window)

    if expiry <= latest.number:
        raise ExpiredBlockError(expiry, latest.number)
    return ValidityWindow(latest.hash, expiry)


# =============================================================================
# Results
# =============================================================================

@dataclass(frozen=True)
class PreparedTransaction:
    """Encrypted, unsigned transaction plus what produced it."""
    metadata: TxSeismicMetadata
    plaintext: bytes
    tx: SeismicTransaction

    @property
    def plaintext_tx(self) -> SeismicTransaction:
        """Same transaction carrying the unencrypted calldata."""
        return SeismicTransaction.from_metadata(
            self.metadata, self.plaintext, self.tx.gas_price, self.tx.gas
        )


@dataclass(frozen=True)
class SignedPayload:
    """
    What gets sent to the node.

    Raw-signing accounts produce ``raw``; typed-data accounts produce
    ``typed_data`` and ``signature``.
    """
    raw: Optional[bytes] = None
    typed_data: Optional[Dict[str, Any]] = None
    signature: Optional[Signature] = None

    @property
    def is_typed_data(self) -> bool:
        return self.raw is None


@dataclass(frozen=True)
class DebugResult:
    plaintext_tx: SeismicTransaction
    shielded_tx: SeismicTransaction
    payload: SignedPayload

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "plaintextTx": self.plaintext_tx.to_dict(),
            "shieldedTx": self.shielded_tx.to_dict(),
        }
        if self.payload.is_typed_data:
            out["typedData"] = self.payload.typed_data
            out["signature"] = self.payload.signature.to_rpc()
        else:
            out["signedTx"] = to_hex(self.payload.raw)
        return out


# =============================================================================
# ShieldedTxBuilder
# =============================================================================

class ShieldedTxBuilder:
    """
    Builds, signs and submits shielded transactions for one account.

    Network errors from the RPC client propagate untouched; nothing is
    retried.
    """

    def __init__(
        self,
        rpc: SeismicRPCClient,
        encryptor: ShieldedEncryptor,
        account: Optional[AccountAdapter],
        chain_id: Optional[int] = None,
        default_gas: int = DEFAULT_GAS,
        aad_format: AadFormat = AadFormat.METADATA,
    ):
        """
        Args:
            rpc: JSON-RPC client
            encryptor: Calldata encryptor holding the AES key
            account: Signing account and metadata sender
            chain_id: Expected chain id; checked against eth_chainId
            default_gas: Gas limit when the caller gives none
            aad_format: AAD layout bound to the calldata
        """
        self._rpc = rpc
        self._encryptor = encryptor
        self._account = account
        self._chain_id = chain_id
        self._default_gas = default_gas
        self._aad_format = aad_format

    @property
    def account(self) -> Optional[AccountAdapter]:
        return self._account

    @property
    def encryptor(self) -> ShieldedEncryptor:
        return self._encryptor

    def _require_account(self) -> AccountAdapter:
        if self._account is None:
            raise SigningError("No account configured for this builder")
        return self._account

    # =========================================================================
    # Metadata
    # =========================================================================

    async def _fill_nonce(self, nonce: Optional[int]) -> int:
        if nonce is not None:
            return nonce
        return await self._rpc.get_transaction_count(self._require_account().address, "latest")

    async def build_metadata(
        self,
        to: Optional[BytesLike],
        value: int = 0,
        nonce: Optional[int] = None,
        signed_read: bool = False,
        security: Optional[SecurityParams] = None,
    ) -> TxSeismicMetadata:
        """
        Assemble metadata for one encryption.

        Raises:
            ChainIdMismatchError: node reports a different chain id
            ExpiredBlockError: explicit expiry already passed
        """
        account = self._require_account()
        security = security or SecurityParams()

        nonce_, reported_chain_id, window = await asyncio.gather(
            self._fill_nonce(nonce),
            self._rpc.get_chain_id(),
            resolve_validity_window(self._rpc, security),
        )
        if self._chain_id is not None and self._chain_id != reported_chain_id:
            raise ChainIdMismatchError(self._chain_id, reported_chain_id)

        if security.encryption_nonce is not None:
            encryption_nonce = normalize_nonce(security.encryption_nonce)
        else:
            encryption_nonce = self._encryptor.next_nonce()

        message_version = (
            RAW_MESSAGE_VERSION if account.signs_raw_transactions
            else TYPED_DATA_MESSAGE_VERSION
        )
        logger.debug(
            "metadata: chain=%d nonce=%d expires_at_block=%d message_version=%d",
            reported_chain_id, nonce_, window.expires_at_block, message_version,
        )
        return build_metadata(
            sender=account.address,
            chain_id=reported_chain_id,
            nonce=nonce_,
            to=to,
            value=value,
            encryption_pubkey=self._encryptor.encryption_pubkey,
            encryption_nonce=encryption_nonce,
            message_version=message_version,
            recent_block_hash=window.recent_block_hash,
            expires_at_block=window.expires_at_block,
            signed_read=signed_read,
        )

    # =========================================================================
    # Prepare / sign
    # =========================================================================

    async def prepare_transaction(
        self,
        data: BytesLike,
        to: Optional[BytesLike],
        value: int = 0,
        nonce: Optional[int] = None,
        gas: Optional[int] = None,
        gas_price: Optional[int] = None,
        signed_read: bool = False,
        security: Optional[SecurityParams] = None,
    ) -> PreparedTransaction:
        """Metadata, encrypted calldata and filled gas fields."""
        if gas_price is None:
            metadata, gas_price = await asyncio.gather(
                self.build_metadata(to, value, nonce, signed_read, security),
                self._rpc.get_gas_price(),
            )
        else:
            metadata = await self.build_metadata(to, value, nonce, signed_read, security)
        gas = self._default_gas if gas is None else gas

        plaintext = as_bytes(data)
        ciphertext = self._encryptor.encrypt(
            plaintext, metadata, self._aad_format, gas_price=gas_price, gas=gas
        )
        tx = SeismicTransaction.from_metadata(metadata, ciphertext, gas_price, gas)
        return PreparedTransaction(metadata=metadata, plaintext=plaintext, tx=tx)

    async def sign(self, prepared: PreparedTransaction) -> SignedPayload:
        """Sign by the account's strongest capability."""
        account = self._require_account()
        if account.signs_raw_transactions:
            raw = await account.sign_transaction(
                prepared.tx, serializer=serialize_seismic_transaction
            )
            return SignedPayload(raw=raw)
        typed_data = seismic_tx_typed_data(prepared.tx)
        signature = await account.sign_typed_data(typed_data)
        return SignedPayload(typed_data=typed_data, signature=signature)

    # =========================================================================
    # Public API
    # =========================================================================

    async def send_shielded_transaction(
        self,
        data: BytesLike,
        to: Optional[BytesLike],
        value: int = 0,
        nonce: Optional[int] = None,
        gas: Optional[int] = None,
        gas_price: Optional[int] = None,
        security: Optional[SecurityParams] = None,
    ) -> str:
        """
        Encrypt, sign and broadcast.

        Returns:
            Transaction hash (hex string)
        """
        prepared = await self.prepare_transaction(
            data, to, value, nonce, gas, gas_price, False, security
        )
        payload = await self.sign(prepared)
        if payload.is_typed_data:
            tx_hash = await self._rpc.send_typed_data_transaction(
                payload.typed_data, payload.signature
            )
        else:
            tx_hash = await self._rpc.send_raw_transaction(payload.raw)
        logger.info(
            "sent shielded tx %s (chain=%d nonce=%d)",
            tx_hash, prepared.tx.chain_id, prepared.tx.nonce,
        )
        return tx_hash

    async def signed_call(
        self,
        data: BytesLike,
        to: BytesLike,
        value: int = 0,
        gas: Optional[int] = None,
        gas_price: Optional[int] = None,
        from_address: Optional[str] = None,
        block: BlockTag = "latest",
        security: Optional[SecurityParams] = None,
    ) -> Optional[bytes]:
        """
        Signed read: an eth_call whose calldata and output are encrypted.

        Returns:
            Decrypted output, or None when the node returns "0x"

        Raises:
            SignedCallError: no account, or from_address is not the account
        """
        if self._account is None:
            raise SignedCallError("Invoked signedCall without an address")
        account = self._account
        if from_address is not None and from_address.lower() != account.address.lower():
            raise SignedCallError(f"Client cannot sign for address {from_address}")

        prepared = await self.prepare_transaction(
            data, to, value, None, gas, gas_price, True, security
        )
        payload = await self.sign(prepared)
        if payload.is_typed_data:
            response = await self._rpc.call_typed_data(payload.typed_data, payload.signature)
        else:
            response = await self._rpc.call(payload.raw, block)

        if is_empty(response):
            return None
        return self._encryptor.decrypt(
            response,
            prepared.metadata,
            self._aad_format,
            gas_price=prepared.tx.gas_price,
            gas=prepared.tx.gas,
        )

    async def debug_transaction(
        self,
        data: BytesLike,
        to: Optional[BytesLike],
        value: int = 0,
        nonce: Optional[int] = None,
        gas: Optional[int] = None,
        gas_price: Optional[int] = None,
        security: Optional[SecurityParams] = None,
    ) -> DebugResult:
        """Everything send_shielded_transaction would produce, without sending."""
        prepared = await self.prepare_transaction(
            data, to, value, nonce, gas, gas_price, False, security
        )
        payload = await self.sign(prepared)
        return DebugResult(
            plaintext_tx=prepared.plaintext_tx,
            shielded_tx=prepared.tx,
            payload=payload,
        )


__all__ = [
    "RAW_MESSAGE_VERSION",
    "SecurityParams",
    "ValidityWindow",
    "resolve_validity_window",
    "PreparedTransaction",
    "SignedPayload",
    "DebugResult",
    "ShieldedTxBuilder",
]
