# seismic_shield/block/wire/metadata.py
"""
Seismic Shield Wire Format: Transaction Metadata and AAD

Everything the network binds to the encrypted calldata. The encoded form is
used as AEAD additional authenticated data, so any change to these fields
after encryption makes decryption fail.

AAD formats:
    METADATA   RLP list of 11 fields:
               [sender, chainId, nonce, to, value, encryptionPubkey,
                encryptionNonce, messageVersion, recentBlockHash,
                expiresAtBlock, signedRead]

    TX_FIELDS  The 12 transaction header fields, each RLP-encoded and
               concatenated without a list header:
               chainId, nonce, gasPrice, gas, to, value, encryptionPubkey,
               encryptionNonce, messageVersion, recentBlockHash,
               expiresAtBlock, signedRead

Scalar rules (both formats):
    - integers are minimal big-endian, zero is the empty string
    - to=None (contract creation) is the empty string
    - signedRead is 0x01 or the empty string
    - encryptionNonce is treated as an integer, so leading zero bytes are
      dropped and an all-zero nonce is the empty string

Usage:
    metadata = build_metadata(
        sender="0xf39F...2266",
        chain_id=31337,
        nonce=0,
        to="0x...04",
        value=0,
        encryption_pubkey=pair.public_key,
        encryption_nonce=random_encryption_nonce(),
        message_version=0,
        recent_block_hash=block.hash,
        expires_at_block=block.number + 100,
        signed_read=False,
    )
    aad = encode_metadata_as_aad(metadata)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional

import rlp

from ...crypto.common import (
    ADDRESS_SIZE,
    COMPRESSED_PUBKEY_SIZE,
    HASH_SIZE,
    NONCE_SIZE,
    U64_MAX,
    BytesLike,
    as_bytes,
    int_to_minimal_bytes,
    strip_leading_zeros,
    to_hex,
)
from ...errors import InvalidFieldError, MissingChainIdError


# =============================================================================
# Enums
# =============================================================================

class AadFormat(Enum):
    """Which byte layout is fed to the AEAD as associated data."""
    METADATA = "metadata"
    TX_FIELDS = "tx_fields"


# =============================================================================
# Metadata Types
# =============================================================================

@dataclass(frozen=True)
class LegacyFields:
    """Ordinary transaction fields that participate in the AAD."""
    chain_id: int
    nonce: int
    to: Optional[bytes]
    value: int


@dataclass(frozen=True)
class SeismicElements:
    """
    Seismic-specific fields carried on the wire.

    Attributes:
        encryption_pubkey: Client's 33-byte compressed public key
        encryption_nonce: 12-byte AEAD nonce
        message_version: 0 for raw-signed, 2 for typed-data-signed
        recent_block_hash: Hash of a recent block (replay binding)
        expires_at_block: Last block at which the tx is valid
        signed_read: True for signed eth_call requests
    """
    encryption_pubkey: bytes
    encryption_nonce: bytes
    message_version: int
    recent_block_hash: bytes
    expires_at_block: int
    signed_read: bool = False


@dataclass(frozen=True)
class TxSeismicMetadata:
    """Sender plus the legacy and seismic fields bound to one encryption."""
    sender: bytes
    legacy_fields: LegacyFields
    seismic_elements: SeismicElements

    @property
    def chain_id(self) -> int:
        return self.legacy_fields.chain_id

    @property
    def encryption_nonce(self) -> bytes:
        return self.seismic_elements.encryption_nonce

    def with_signed_read(self, signed_read: bool) -> "TxSeismicMetadata":
        """Copy with ``signed_read`` replaced."""
        return replace(
            self,
            seismic_elements=replace(self.seismic_elements, signed_read=signed_read),
        )

    def to_dict(self) -> dict:
        """JSON-friendly view, used for logging and debug output."""
        legacy = self.legacy_fields
        seismic = self.seismic_elements
        return {
            "sender": to_hex(self.sender),
            "chainId": legacy.chain_id,
            "nonce": legacy.nonce,
            "to": to_hex(legacy.to) if legacy.to is not None else None,
            "value": legacy.value,
            "encryptionPubkey": to_hex(seismic.encryption_pubkey),
            "encryptionNonce": to_hex(seismic.encryption_nonce),
            "messageVersion": seismic.message_version,
            "recentBlockHash": to_hex(seismic.recent_block_hash),
            "expiresAtBlock": seismic.expires_at_block,
            "signedRead": seismic.signed_read,
        }


# =============================================================================
# Field Validation
# =============================================================================

def _exact_bytes(value: Optional[BytesLike], size: int, field: str) -> bytes:
    raw = as_bytes(value)
    if len(raw) != size:
        raise InvalidFieldError(
            f"{field} must be {size} bytes, got {len(raw)}",
            field=field,
            expected=size,
            received=len(raw),
        )
    return raw


def _address(value: Optional[BytesLike], field: str) -> Optional[bytes]:
    if value is None:
        return None
    return _exact_bytes(value, ADDRESS_SIZE, field)


def _uint(value: Optional[int], field: str, limit: Optional[int] = None) -> int:
    if value is None:
        return 0
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise InvalidFieldError(
            f"{field} must be a non-negative integer, got {value!r}",
            field=field,
            received=value,
        )
    if limit is not None and value > limit:
        raise InvalidFieldError(
            f"{field} exceeds {limit}",
            field=field,
            expected=f"<= {limit}",
            received=value,
        )
    return value


def build_metadata(
    sender: BytesLike,
    chain_id: Optional[int],
    nonce: int,
    to: Optional[BytesLike],
    value: int,
    encryption_pubkey: BytesLike,
    encryption_nonce: BytesLike,
    message_version: int,
    recent_block_hash: BytesLike,
    expires_at_block: int,
    signed_read: bool = False,
) -> TxSeismicMetadata:
    """
    Validate and normalize metadata fields into a :class:`TxSeismicMetadata`.

    Accepts bytes or hex strings for byte fields.

    Raises:
        MissingChainIdError: chain_id is None or 0
        InvalidFieldError: a field has the wrong length or range
    """
    if not chain_id:
        raise MissingChainIdError()

    legacy = LegacyFields(
        chain_id=_uint(chain_id, "chainId", U64_MAX),
        nonce=_uint(nonce, "nonce", U64_MAX),
        to=_address(to, "to"),
        value=_uint(value, "value"),
    )
    seismic = SeismicElements(
        encryption_pubkey=_exact_bytes(
            encryption_pubkey, COMPRESSED_PUBKEY_SIZE, "encryptionPubkey"
        ),
        encryption_nonce=_exact_bytes(encryption_nonce, NONCE_SIZE, "encryptionNonce"),
        message_version=_uint(message_version, "messageVersion", 0xFF),
        recent_block_hash=_exact_bytes(recent_block_hash, HASH_SIZE, "recentBlockHash"),
        expires_at_block=_uint(expires_at_block, "expiresAtBlock", U64_MAX),
        signed_read=bool(signed_read),
    )
    return TxSeismicMetadata(
        sender=_exact_bytes(sender, ADDRESS_SIZE, "sender"),
        legacy_fields=legacy,
        seismic_elements=seismic,
    )


# =============================================================================
# Field Encoding
# =============================================================================

def encode_bool(flag: bool) -> bytes:
    """0x01 for True, empty for False."""
    return b"\x01" if flag else b""


def encode_encryption_nonce(nonce: BytesLike) -> bytes:
    """The nonce as a minimal integer: leading zero bytes dropped."""
    return strip_leading_zeros(as_bytes(nonce))


def seismic_element_items(elements: SeismicElements) -> List[bytes]:
    """The six seismic fields in wire order, as RLP string items."""
    return [
        as_bytes(elements.encryption_pubkey),
        encode_encryption_nonce(elements.encryption_nonce),
        int_to_minimal_bytes(elements.message_version),
        as_bytes(elements.recent_block_hash),
        int_to_minimal_bytes(elements.expires_at_block),
        encode_bool(elements.signed_read),
    ]


def tx_header_items(
    chain_id: Optional[int],
    nonce: Optional[int],
    gas_price: Optional[int],
    gas: Optional[int],
    to: Optional[BytesLike],
    value: Optional[int],
    elements: SeismicElements,
) -> List[bytes]:
    """
    The 12 header fields shared by the wire format and the TX_FIELDS AAD.

    Raises:
        MissingChainIdError: chain_id is None or 0
    """
    if not chain_id:
        raise MissingChainIdError()
    return [
        int_to_minimal_bytes(chain_id),
        int_to_minimal_bytes(nonce),
        int_to_minimal_bytes(gas_price),
        int_to_minimal_bytes(gas),
        as_bytes(to),
        int_to_minimal_bytes(value),
    ] + seismic_element_items(elements)


# =============================================================================
# AAD Encoders
# =============================================================================

def encode_metadata_as_aad(metadata: TxSeismicMetadata) -> bytes:
    """RLP list of the 11 metadata fields."""
    legacy = metadata.legacy_fields
    items = [
        as_bytes(metadata.sender),
        int_to_minimal_bytes(legacy.chain_id),
        int_to_minimal_bytes(legacy.nonce),
        as_bytes(legacy.to),
        int_to_minimal_bytes(legacy.value),
    ] + seismic_element_items(metadata.seismic_elements)
    return rlp.encode(items)


def encode_tx_fields_as_aad(
    metadata: TxSeismicMetadata,
    gas_price: Optional[int],
    gas: Optional[int],
) -> bytes:
    """Concatenated RLP items of the 12 transaction header fields."""
    legacy = metadata.legacy_fields
    items = tx_header_items(
        chain_id=legacy.chain_id,
        nonce=legacy.nonce,
        gas_price=gas_price,
        gas=gas,
        to=legacy.to,
        value=legacy.value,
        elements=metadata.seismic_elements,
    )
    return b"".join(rlp.encode(item) for item in items)


def encode_aad(
    metadata: TxSeismicMetadata,
    aad_format: AadFormat = AadFormat.METADATA,
    gas_price: Optional[int] = None,
    gas: Optional[int] = None,
) -> bytes:
    """Dispatch on ``aad_format``."""
    if aad_format is AadFormat.METADATA:
        return encode_metadata_as_aad(metadata)
    if aad_format is AadFormat.TX_FIELDS:
        return encode_tx_fields_as_aad(metadata, gas_price, gas)
    raise ValueError(f"Unknown AAD format: {aad_format!r}")


__all__ = [
    "AadFormat",
    "LegacyFields",
    "SeismicElements",
    "TxSeismicMetadata",
    "build_metadata",
    "encode_bool",
    "encode_encryption_nonce",
    "seismic_element_items",
    "tx_header_items",
    "encode_metadata_as_aad",
    "encode_tx_fields_as_aad",
    "encode_aad",
]
