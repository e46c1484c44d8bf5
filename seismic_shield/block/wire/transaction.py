# seismic_shield/block/wire/transaction.py
"""
Seismic Shield Wire Format: Seismic Transaction (type 0x4a)

Byte-exact serialization of shielded transactions.

Layout:
    0x4a || RLP([
        chainId, nonce, gasPrice, gas, to, value,
        encryptionPubkey, encryptionNonce, messageVersion,
        recentBlockHash, expiresAtBlock, signedRead,
        input,
        yParity, r, s,          # signed form only
    ])

Signature rules:
    yParity 0 (or v in {0, 27})  -> empty
    yParity 1 (or v in {1, 28})  -> 0x01
    r, s                         -> minimal big-endian, zero is empty

The unsigned form (used for the signing hash) omits all three signature
items. ``input`` is the already-encrypted calldata.

Usage:
    tx = SeismicTransaction.from_metadata(metadata, data=ciphertext,
                                          gas_price=gas_price, gas=gas)
    digest = signing_hash(tx)
    raw = serialize_seismic_transaction(tx, signature)
    tx2, sig2 = decode_seismic_transaction(raw)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import rlp
from rlp.exceptions import DecodingError
from eth_keys import keys
from eth_utils import keccak, to_checksum_address

from ..chains import SEISMIC_TX_TYPE
from .metadata import (
    LegacyFields,
    SeismicElements,
    TxSeismicMetadata,
    tx_header_items,
)
from ...crypto.common import (
    ADDRESS_SIZE,
    HASH_SIZE,
    NONCE_SIZE,
    BytesLike,
    as_bytes,
    int_to_minimal_bytes,
    minimal_bytes_to_int,
    to_hex,
)
from ...errors import InvalidFieldError


UNSIGNED_FIELD_COUNT: int = 13
SIGNED_FIELD_COUNT: int = 16


# =============================================================================
# Signature
# =============================================================================

@dataclass(frozen=True)
class Signature:
    """
    secp256k1 signature over a transaction signing hash.

    Either ``y_parity`` (0/1) or ``v`` (0/1/27/28) identifies the recovery
    bit; ``y_parity`` wins when both are set.
    """
    r: int
    s: int
    v: Optional[int] = None
    y_parity: Optional[int] = None

    @property
    def parity(self) -> int:
        """Recovery bit, 0 or 1."""
        if self.y_parity is not None:
            if self.y_parity not in (0, 1):
                raise InvalidFieldError(
                    f"yParity must be 0 or 1, got {self.y_parity}",
                    field="yParity",
                    received=self.y_parity,
                )
            return self.y_parity
        if self.v in (0, 27):
            return 0
        if self.v in (1, 28):
            return 1
        raise InvalidFieldError(
            f"Signature needs yParity or v in {{0, 1, 27, 28}}, got v={self.v}",
            field="v",
            received=self.v,
        )

    @classmethod
    def from_bytes(cls, data: BytesLike) -> "Signature":
        """Parse a 65-byte ``r || s || v`` signature."""
        raw = as_bytes(data)
        if len(raw) != 65:
            raise InvalidFieldError(
                f"Signature must be 65 bytes, got {len(raw)}",
                field="signature",
                expected=65,
                received=len(raw),
            )
        return cls(
            r=int.from_bytes(raw[:32], "big"),
            s=int.from_bytes(raw[32:64], "big"),
            v=raw[64],
        )

    def to_bytes(self) -> bytes:
        """65-byte ``r || s || v`` with v in {27, 28}."""
        return (
            self.r.to_bytes(32, "big")
            + self.s.to_bytes(32, "big")
            + bytes([27 + self.parity])
        )

    def to_rpc(self) -> Dict[str, str]:
        """``{r, s, yParity}`` object sent alongside typed data."""
        return {
            "r": "0x" + self.r.to_bytes(32, "big").hex(),
            "s": "0x" + self.s.to_bytes(32, "big").hex(),
            "yParity": hex(self.parity),
        }


def to_y_parity_signature_array(signature: Signature) -> List[bytes]:
    """``[yParity, r, s]`` RLP items for the signed wire form."""
    return [
        b"\x01" if signature.parity == 1 else b"",
        int_to_minimal_bytes(signature.r),
        int_to_minimal_bytes(signature.s),
    ]


# =============================================================================
# Transaction
# =============================================================================

@dataclass(frozen=True)
class SeismicTransaction:
    """
    A seismic transaction with encrypted calldata in ``data``.

    Integer fields left as None serialize as the empty string, except
    ``chain_id`` which is mandatory at serialization time.
    """
    chain_id: Optional[int]
    nonce: Optional[int] = None
    gas_price: Optional[int] = None
    gas: Optional[int] = None
    to: Optional[bytes] = None
    value: Optional[int] = None
    data: bytes = b""
    encryption_pubkey: bytes = b""
    encryption_nonce: bytes = b""
    message_version: int = 0
    recent_block_hash: bytes = b""
    expires_at_block: int = 0
    signed_read: bool = False

    @property
    def seismic_elements(self) -> SeismicElements:
        return SeismicElements(
            encryption_pubkey=self.encryption_pubkey,
            encryption_nonce=self.encryption_nonce,
            message_version=self.message_version,
            recent_block_hash=self.recent_block_hash,
            expires_at_block=self.expires_at_block,
            signed_read=self.signed_read,
        )

    @classmethod
    def from_metadata(
        cls,
        metadata: TxSeismicMetadata,
        data: BytesLike,
        gas_price: Optional[int],
        gas: Optional[int],
    ) -> "SeismicTransaction":
        """Combine metadata with encrypted calldata and gas fields."""
        legacy = metadata.legacy_fields
        seismic = metadata.seismic_elements
        return cls(
            chain_id=legacy.chain_id,
            nonce=legacy.nonce,
            gas_price=gas_price,
            gas=gas,
            to=legacy.to,
            value=legacy.value,
            data=as_bytes(data),
            encryption_pubkey=seismic.encryption_pubkey,
            encryption_nonce=seismic.encryption_nonce,
            message_version=seismic.message_version,
            recent_block_hash=seismic.recent_block_hash,
            expires_at_block=seismic.expires_at_block,
            signed_read=seismic.signed_read,
        )

    def to_metadata(self, sender: BytesLike) -> TxSeismicMetadata:
        """Metadata view of this transaction for ``sender``."""
        return TxSeismicMetadata(
            sender=as_bytes(sender),
            legacy_fields=LegacyFields(
                chain_id=self.chain_id or 0,
                nonce=self.nonce or 0,
                to=self.to,
                value=self.value or 0,
            ),
            seismic_elements=self.seismic_elements,
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view with hex-encoded byte fields."""
        return {
            "type": hex(SEISMIC_TX_TYPE),
            "chainId": self.chain_id,
            "nonce": self.nonce,
            "gasPrice": self.gas_price,
            "gas": self.gas,
            "to": to_checksum_address(self.to) if self.to else None,
            "value": self.value,
            "data": to_hex(self.data),
            "encryptionPubkey": to_hex(self.encryption_pubkey),
            "encryptionNonce": to_hex(self.encryption_nonce),
            "messageVersion": self.message_version,
            "recentBlockHash": to_hex(self.recent_block_hash),
            "expiresAtBlock": self.expires_at_block,
            "signedRead": self.signed_read,
        }


# =============================================================================
# Serialization
# =============================================================================

def serialize_seismic_transaction(
    tx: SeismicTransaction,
    signature: Optional[Signature] = None,
) -> bytes:
    """
    Encode ``tx`` in the 0x4a wire format.

    Raises:
        MissingChainIdError: tx.chain_id is None or 0
    """
    items = tx_header_items(
        chain_id=tx.chain_id,
        nonce=tx.nonce,
        gas_price=tx.gas_price,
        gas=tx.gas,
        to=tx.to,
        value=tx.value,
        elements=tx.seismic_elements,
    )
    items.append(as_bytes(tx.data))
    if signature is not None:
        items.extend(to_y_parity_signature_array(signature))
    return bytes([SEISMIC_TX_TYPE]) + rlp.encode(items)


def signing_hash(tx: SeismicTransaction) -> bytes:
    """keccak256 of the unsigned serialization."""
    return keccak(serialize_seismic_transaction(tx))


# =============================================================================
# Deserialization
# =============================================================================

def _decode_optional_address(item: bytes) -> Optional[bytes]:
    if not item:
        return None
    if len(item) != ADDRESS_SIZE:
        raise InvalidFieldError(
            f"to must be {ADDRESS_SIZE} bytes, got {len(item)}",
            field="to",
            expected=ADDRESS_SIZE,
            received=len(item),
        )
    return item


def _decode_encryption_nonce(item: bytes) -> bytes:
    if len(item) > NONCE_SIZE:
        raise InvalidFieldError(
            f"encryptionNonce longer than {NONCE_SIZE} bytes",
            field="encryptionNonce",
            expected=NONCE_SIZE,
            received=len(item),
        )
    return item.rjust(NONCE_SIZE, b"\x00")


def decode_seismic_transaction(
    raw: BytesLike,
) -> Tuple[SeismicTransaction, Optional[Signature]]:
    """
    Parse a 0x4a transaction.

    Returns:
        (transaction, signature) with signature None for the unsigned form

    Raises:
        InvalidFieldError: wrong type byte, malformed RLP or field shapes
    """
    data = as_bytes(raw)
    if not data or data[0] != SEISMIC_TX_TYPE:
        raise InvalidFieldError(
            "Not a seismic transaction (type byte must be 0x4a)",
            field="type",
            expected=hex(SEISMIC_TX_TYPE),
            received=hex(data[0]) if data else None,
        )
    try:
        items = rlp.decode(data[1:])
    except DecodingError as e:
        raise InvalidFieldError(f"Malformed RLP payload: {e}", field="payload") from e

    if not isinstance(items, list) or len(items) not in (UNSIGNED_FIELD_COUNT, SIGNED_FIELD_COUNT):
        raise InvalidFieldError(
            "Seismic transaction must have 13 (unsigned) or 16 (signed) fields",
            field="payload",
            received=len(items) if isinstance(items, list) else None,
        )
    if any(not isinstance(item, bytes) for item in items):
        raise InvalidFieldError("Nested lists are not allowed", field="payload")

    recent_block_hash = items[9]
    if recent_block_hash and len(recent_block_hash) != HASH_SIZE:
        raise InvalidFieldError(
            f"recentBlockHash must be {HASH_SIZE} bytes",
            field="recentBlockHash",
            expected=HASH_SIZE,
            received=len(recent_block_hash),
        )

    tx = SeismicTransaction(
        chain_id=minimal_bytes_to_int(items[0]),
        nonce=minimal_bytes_to_int(items[1]),
        gas_price=minimal_bytes_to_int(items[2]),
        gas=minimal_bytes_to_int(items[3]),
        to=_decode_optional_address(items[4]),
        value=minimal_bytes_to_int(items[5]),
        encryption_pubkey=items[6],
        encryption_nonce=_decode_encryption_nonce(items[7]),
        message_version=minimal_bytes_to_int(items[8]),
        recent_block_hash=recent_block_hash,
        expires_at_block=minimal_bytes_to_int(items[10]),
        signed_read=items[11] == b"\x01",
        data=items[12],
    )

    signature = None
    if len(items) == SIGNED_FIELD_COUNT:
        signature = Signature(
            r=minimal_bytes_to_int(items[14]),
            s=minimal_bytes_to_int(items[15]),
            y_parity=minimal_bytes_to_int(items[13]),
        )
    return tx, signature


def recover_transaction_sender(raw: BytesLike) -> str:
    """Checksummed address that signed the serialized transaction ``raw``."""
    tx, signature = decode_seismic_transaction(raw)
    if signature is None:
        raise InvalidFieldError("Transaction is unsigned", field="signature")
    eth_signature = keys.Signature(vrs=(signature.parity, signature.r, signature.s))
    public_key = eth_signature.recover_public_key_from_msg_hash(signing_hash(tx))
    return public_key.to_checksum_address()


__all__ = [
    "UNSIGNED_FIELD_COUNT",
    "SIGNED_FIELD_COUNT",
    "Signature",
    "to_y_parity_signature_array",
    "SeismicTransaction",
    "serialize_seismic_transaction",
    "signing_hash",
    "decode_seismic_transaction",
    "recover_transaction_sender",
]
