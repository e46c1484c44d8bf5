# seismic_shield/crypto/aead.py
"""
Seismic Shield AEAD

AES-256-GCM over calldata with explicit 12-byte nonces and optional AAD.
The authentication tag (16 bytes) is appended to the ciphertext.

Empty payload convention:
    An empty plaintext (b"" or the "0x" sentinel) encrypts to an empty
    ciphertext without touching the cipher, and an empty ciphertext
    decrypts to an empty plaintext. Nothing is authenticated in that case.
    The network relies on this, so it is preserved as is.

Usage:
    cipher = AesGcmCipher(aes_key)
    ct = cipher.encrypt(calldata, nonce, aad)
    pt = cipher.decrypt(ct, nonce, aad)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .common import KEY_SIZE, BytesLike, as_bytes
from .nonce import normalize_nonce
from ..errors import DecryptionError, InvalidKeyLengthError


NonceLike = Union[int, BytesLike]


class AeadCipher(ABC):
    """
    Authenticated cipher bound to one 32-byte key.

    Pure: the same (key, nonce, aad, input) always yields the same output.
    Key length is checked once at construction; nonce length on every call.
    """

    algorithm: str = "abstract"

    def __init__(self, key: BytesLike):
        raw = as_bytes(key)
        if len(raw) != KEY_SIZE:
            raise InvalidKeyLengthError(len(raw))
        self._key = raw

    def __repr__(self) -> str:
        return f"{type(self).__name__}(algorithm={self.algorithm!r})"

    @abstractmethod
    def _seal(self, nonce: bytes, plaintext: bytes, aad: Optional[bytes]) -> bytes:
        pass

    @abstractmethod
    def _open(self, nonce: bytes, ciphertext: bytes, aad: Optional[bytes]) -> bytes:
        pass

    def encrypt(
        self,
        plaintext: BytesLike,
        nonce: NonceLike,
        aad: Optional[BytesLike] = None,
    ) -> bytes:
        """
        Encrypt ``plaintext``.

        Args:
            plaintext: Calldata bytes or hex
            nonce: 12-byte nonce, or an int rendered via ``nonce_from_int``
            aad: Additional authenticated data

        Returns:
            ciphertext || tag, or b"" for an empty plaintext
        """
        nonce_bytes = normalize_nonce(nonce)
        data = as_bytes(plaintext)
        if not data:
            return b""
        return self._seal(nonce_bytes, data, as_bytes(aad) if aad is not None else None)

    def decrypt(
        self,
        ciphertext: BytesLike,
        nonce: NonceLike,
        aad: Optional[BytesLike] = None,
    ) -> bytes:
        """
        Decrypt and authenticate ``ciphertext``.

        Raises:
            DecryptionError: tag verification failed
        """
        nonce_bytes = normalize_nonce(nonce)
        data = as_bytes(ciphertext)
        if not data:
            return b""
        try:
            return self._open(nonce_bytes, data, as_bytes(aad) if aad is not None else None)
        except InvalidTag as e:
            raise DecryptionError() from e


class AesGcmCipher(AeadCipher):
    """AES-256-GCM, the calldata cipher of seismic transactions."""

    algorithm = "aes-256-gcm"

    def __init__(self, key: BytesLike):
        super().__init__(key)
        self._aead = AESGCM(self._key)

    def _seal(self, nonce: bytes, plaintext: bytes, aad: Optional[bytes]) -> bytes:
        return self._aead.encrypt(nonce, plaintext, aad)

    def _open(self, nonce: bytes, ciphertext: bytes, aad: Optional[bytes]) -> bytes:
        return self._aead.decrypt(nonce, ciphertext, aad)


__all__ = [
    "NonceLike",
    "AeadCipher",
    "AesGcmCipher",
]
