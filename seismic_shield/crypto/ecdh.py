# seismic_shield/crypto/ecdh.py
"""
Seismic Shield Key Agreement

secp256k1 ECDH between the client's encryption key pair and the network
enclave's public key, followed by key derivation.

Derivation (network convention):
    P      = sk * PK_network                  (uncompressed, X || Y)
    tag    = (Y[31] & 0x01) | 0x02
    secret = SHA-256(tag || X)
    key    = HKDF-SHA256(secret, salt="", info="aes-gcm key", L=32)

The tag byte looks like point compression but is not: it is a fixed
convention of the enclave and must be reproduced bit for bit. It lives in
:func:`shared_key_from_point` so it can be tested and replaced on its own.

Usage:
    from seismic_shield.crypto import KeyAgreement, EncryptionKeyPair

    pair = EncryptionKeyPair.generate()
    agreement = KeyAgreement(pair.private_key)
    aes_key = agreement.derive_shared_key(network_public_key)
"""

from __future__ import annotations

import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from ecdsa import SECP256k1, SigningKey, VerifyingKey
from ecdsa.keys import MalformedPointError

from .common import (
    COMPRESSED_PUBKEY_SIZE,
    KEY_SIZE,
    POINT_SIZE,
    PRIVATE_KEY_SIZE,
    UNCOMPRESSED_PUBKEY_SIZE,
    BytesLike,
    _sha256,
    as_bytes,
    to_hex,
)
from ..errors import InvalidPrivateKeyError, InvalidPublicKeyError


# =============================================================================
# Constants
# =============================================================================

AES_KEY_INFO: bytes = b"aes-gcm key"

CURVE_ORDER: int = SECP256k1.order


# =============================================================================
# Key parsing
# =============================================================================

def _parse_private_key(private_key: BytesLike) -> int:
    raw = as_bytes(private_key)
    if len(raw) != PRIVATE_KEY_SIZE:
        raise InvalidPrivateKeyError(
            f"Private key must be {PRIVATE_KEY_SIZE} bytes, got {len(raw)}",
            field="privateKey",
            expected=PRIVATE_KEY_SIZE,
            received=len(raw),
        )
    scalar = int.from_bytes(raw, "big")
    if not 1 <= scalar < CURVE_ORDER:
        raise InvalidPrivateKeyError(
            "Private key scalar out of range [1, n-1]",
            field="privateKey",
        )
    return scalar


def _parse_public_key(public_key: BytesLike) -> VerifyingKey:
    raw = as_bytes(public_key)
    if len(raw) not in (COMPRESSED_PUBKEY_SIZE, UNCOMPRESSED_PUBKEY_SIZE):
        raise InvalidPublicKeyError(
            f"Public key must be {COMPRESSED_PUBKEY_SIZE} (compressed) or "
            f"{UNCOMPRESSED_PUBKEY_SIZE} (uncompressed) bytes, got {len(raw)}",
            field="networkPublicKey",
            expected=COMPRESSED_PUBKEY_SIZE,
            received=len(raw),
        )
    try:
        return VerifyingKey.from_string(raw, curve=SECP256k1)
    except (MalformedPointError, ValueError) as e:
        raise InvalidPublicKeyError(
            f"Public key is not a valid secp256k1 point: {e}",
            field="networkPublicKey",
        ) from e


def compress_public_key(uncompressed_key: BytesLike) -> bytes:
    """
    Convert a 65-byte uncompressed public key to its 33-byte form.

    Raises:
        InvalidPublicKeyError: wrong length or not on the curve
    """
    raw = as_bytes(uncompressed_key)
    if len(raw) != UNCOMPRESSED_PUBKEY_SIZE:
        raise InvalidPublicKeyError(
            "Invalid uncompressed public key length",
            field="publicKey",
            expected=UNCOMPRESSED_PUBKEY_SIZE,
            received=len(raw),
        )
    return _parse_public_key(raw).to_string("compressed")


def public_key_from_private(private_key: BytesLike, compressed: bool = True) -> bytes:
    """Derive the public point for a private scalar."""
    scalar = _parse_private_key(private_key)
    sk = SigningKey.from_secret_exponent(scalar, curve=SECP256k1)
    vk = sk.get_verifying_key()
    return vk.to_string("compressed" if compressed else "uncompressed")


# =============================================================================
# ECDH primitives
# =============================================================================

def shared_secret_point(private_key: BytesLike, network_public_key: BytesLike) -> bytes:
    """
    Multiply the network public key by our private scalar.

    Returns:
        64 bytes: X || Y of the shared point (uncompressed, no 0x04 prefix)
    """
    scalar = _parse_private_key(private_key)
    vk = _parse_public_key(network_public_key)
    point = vk.pubkey.point * scalar
    return point.x().to_bytes(32, "big") + point.y().to_bytes(32, "big")


def shared_key_from_point(shared_point: bytes) -> bytes:
    """
    Enclave-compatible shared secret from an uncompressed shared point.

    SHA-256 over a synthetic tag byte ``(Y[31] & 1) | 2`` followed by X.
    """
    if len(shared_point) != POINT_SIZE:
        raise ValueError(f"Shared point must be {POINT_SIZE} bytes, got {len(shared_point)}")
    version = (shared_point[63] & 0x01) | 0x02
    return _sha256(bytes([version]), shared_point[:32])


def derive_aes_key(shared_secret: BytesLike) -> bytes:
    """HKDF-SHA256 (empty salt, info ``"aes-gcm key"``) to a 32-byte key."""
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=None,
        info=AES_KEY_INFO,
    )
    return hkdf.derive(as_bytes(shared_secret))


def generate_shared_key(private_key: BytesLike, network_public_key: BytesLike) -> bytes:
    """ECDH then :func:`shared_key_from_point`."""
    return shared_key_from_point(shared_secret_point(private_key, network_public_key))


def generate_aes_key(private_key: BytesLike, network_public_key: BytesLike) -> bytes:
    """Full derivation: ECDH, tag-and-hash, HKDF."""
    return derive_aes_key(generate_shared_key(private_key, network_public_key))


# =============================================================================
# Derivation strategies
# =============================================================================

class KeyDerivation(ABC):
    """Turns an uncompressed shared point (X || Y) into a symmetric key."""

    name: str = "abstract"

    @abstractmethod
    def derive_key(self, shared_point: bytes) -> bytes:
        pass


class SeismicKeyDerivation(KeyDerivation):
    """The network's tag-byte + HKDF("aes-gcm key") convention."""

    name = "seismic"

    def derive_key(self, shared_point: bytes) -> bytes:
        return derive_aes_key(shared_key_from_point(shared_point))


class KeyAgreement:
    """
    Binds a local private scalar to a derivation strategy.

    Stateless apart from the key; safe to share between tasks.
    """

    def __init__(
        self,
        private_key: BytesLike,
        derivation: KeyDerivation | None = None,
    ):
        _parse_private_key(private_key)
        self._private_key = as_bytes(private_key)
        self._derivation = derivation or SeismicKeyDerivation()

    @property
    def derivation(self) -> KeyDerivation:
        return self._derivation

    def derive_shared_key(self, remote_public_key: BytesLike) -> bytes:
        """32-byte symmetric key shared with ``remote_public_key``."""
        point = shared_secret_point(self._private_key, remote_public_key)
        return self._derivation.derive_key(point)


# =============================================================================
# Key pair
# =============================================================================

@dataclass(frozen=True)
class EncryptionKeyPair:
    """
    Client encryption key pair.

    Attributes:
        private_key: 32-byte secp256k1 scalar
        public_key: 33-byte compressed point, exchanged with the network
    """
    private_key: bytes
    public_key: bytes

    def __repr__(self) -> str:
        return f"EncryptionKeyPair(public_key={to_hex(self.public_key)})"

    @classmethod
    def from_private_key(cls, private_key: BytesLike) -> "EncryptionKeyPair":
        """Load a static key pair."""
        raw = as_bytes(private_key)
        return cls(private_key=raw, public_key=public_key_from_private(raw))

    @classmethod
    def generate(cls) -> "EncryptionKeyPair":
        """Ephemeral key pair for one client session."""
        while True:
            candidate = secrets.token_bytes(PRIVATE_KEY_SIZE)
            if 1 <= int.from_bytes(candidate, "big") < CURVE_ORDER:
                return cls.from_private_key(candidate)


__all__ = [
    "AES_KEY_INFO",
    "CURVE_ORDER",
    "compress_public_key",
    "public_key_from_private",
    "shared_secret_point",
    "shared_key_from_point",
    "derive_aes_key",
    "generate_shared_key",
    "generate_aes_key",
    "KeyDerivation",
    "SeismicKeyDerivation",
    "KeyAgreement",
    "EncryptionKeyPair",
]
