# seismic_shield/crypto/nonce.py
"""
Seismic Shield Encryption Nonces

96-bit AEAD nonces. Never derived from the account's transaction nonce.
"""

from __future__ import annotations

import secrets
from typing import Union

from .common import NONCE_SIZE, U64_MAX, U64_SIZE, BytesLike, as_bytes
from ..errors import InvalidNonceLengthError


def random_encryption_nonce() -> bytes:
    """Fresh 12-byte nonce from the OS CSPRNG."""
    return secrets.token_bytes(NONCE_SIZE)


def nonce_from_int(num: int) -> bytes:
    """
    Render a u64 as a 12-byte nonce.

    The value is written big-endian into the first 8 bytes; the last
    4 bytes are zero.
    """
    if num < 0 or num > U64_MAX:
        raise ValueError(f"Integer nonce must fit in u64, got {num}")
    return num.to_bytes(U64_SIZE, "big") + b"\x00" * (NONCE_SIZE - U64_SIZE)


def normalize_nonce(nonce: Union[int, BytesLike]) -> bytes:
    """
    Accept an int, bytes or hex nonce and return 12 bytes.

    Raises:
        InvalidNonceLengthError: byte/hex nonce is not 12 bytes
    """
    if isinstance(nonce, int):
        return nonce_from_int(nonce)
    raw = as_bytes(nonce)
    if len(raw) != NONCE_SIZE:
        raise InvalidNonceLengthError(len(raw))
    return raw


class NonceSource:
    """
    Produces encryption nonces.

    With ``fixed`` set, every call returns that nonce; this exists for
    deterministic tests only. Callers encrypting real data must keep the
    default random source.
    """

    def __init__(self, fixed: BytesLike | None = None):
        self._fixed = normalize_nonce(fixed) if fixed is not None else None

    @property
    def is_deterministic(self) -> bool:
        return self._fixed is not None

    def next(self) -> bytes:
        if self._fixed is not None:
            return self._fixed
        return random_encryption_nonce()


__all__ = [
    "random_encryption_nonce",
    "nonce_from_int",
    "normalize_nonce",
    "NonceSource",
]
