# seismic_shield/crypto/common.py
"""
Seismic Shield Common Components

Shared constants and byte helpers for the shielded-transaction core.

Byte conventions:
  - Every public function accepts either raw ``bytes`` or a ``0x``-prefixed
    hex string for byte-valued inputs, and always returns ``bytes``.
  - Integers on the wire are big-endian and minimal (no leading zero bytes).
    Zero is the empty byte string, matching RLP's scalar encoding.
"""

from __future__ import annotations

import hashlib
from typing import Optional, Union

from eth_utils import to_bytes


# =============================================================================
# Constants
# =============================================================================

KEY_SIZE: int = 32               # AES-256 key
NONCE_SIZE: int = 12             # 96-bit AEAD nonce
TAG_SIZE: int = 16               # GCM / Poly1305 tag
U64_SIZE: int = 8                # integer nonces occupy the first 8 bytes

PRIVATE_KEY_SIZE: int = 32
COMPRESSED_PUBKEY_SIZE: int = 33
UNCOMPRESSED_PUBKEY_SIZE: int = 65
POINT_SIZE: int = 64             # X || Y without the 0x04 prefix

ADDRESS_SIZE: int = 20
HASH_SIZE: int = 32

U64_MAX: int = 2**64 - 1

EMPTY_HEX: str = "0x"

BytesLike = Union[bytes, bytearray, str]


# =============================================================================
# Utility Functions
# =============================================================================

def _sha256(*chunks: bytes) -> bytes:
    """Compute SHA-256 hash of concatenated inputs."""
    h = hashlib.sha256()
    for c in chunks:
        h.update(c)
    return h.digest()


def as_bytes(value: Optional[BytesLike]) -> bytes:
    """
    Coerce bytes or a hex string to bytes.

    ``None``, ``""`` and ``"0x"`` all map to ``b""``. Hex strings may omit
    the ``0x`` prefix.
    """
    if value is None:
        return b""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        if value in ("", EMPTY_HEX):
            return b""
        return to_bytes(hexstr=value)
    raise TypeError(f"Expected bytes or hex string, got {type(value).__name__}")


def to_hex(value: bytes) -> str:
    """Render bytes as a 0x-prefixed lowercase hex string."""
    return "0x" + bytes(value).hex()


def is_empty(value: Optional[BytesLike]) -> bool:
    """True for None, b'' and the '0x' sentinel."""
    return len(as_bytes(value)) == 0


def strip_leading_zeros(value: bytes) -> bytes:
    """Drop leading zero bytes. ``b"\\x00"`` becomes ``b""``."""
    return bytes(value).lstrip(b"\x00")


def int_to_minimal_bytes(value: Optional[int]) -> bytes:
    """
    Minimal big-endian encoding of a non-negative integer.

    ``None`` and ``0`` encode as ``b""`` (RLP empty string).
    """
    if not value:
        return b""
    if value < 0:
        raise ValueError(f"Cannot encode negative integer {value}")
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def minimal_bytes_to_int(value: bytes) -> int:
    """Inverse of :func:`int_to_minimal_bytes`."""
    return int.from_bytes(value, "big") if value else 0


__all__ = [
    "KEY_SIZE",
    "NONCE_SIZE",
    "TAG_SIZE",
    "U64_SIZE",
    "PRIVATE_KEY_SIZE",
    "COMPRESSED_PUBKEY_SIZE",
    "UNCOMPRESSED_PUBKEY_SIZE",
    "POINT_SIZE",
    "ADDRESS_SIZE",
    "HASH_SIZE",
    "U64_MAX",
    "EMPTY_HEX",
    "BytesLike",
    "_sha256",
    "as_bytes",
    "to_hex",
    "is_empty",
    "strip_leading_zeros",
    "int_to_minimal_bytes",
    "minimal_bytes_to_int",
]
