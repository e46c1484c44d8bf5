# seismic_shield/errors.py
"""
Seismic Shield Error Taxonomy

All fatal conditions raised by the SDK derive from SeismicError.

    SeismicError
    ├── ConfigurationError      wrong key/nonce length, bad public key, missing chainId
    ├── AuthenticationError     AEAD tag verification failed
    ├── ValidityWindowError     expiry in the past, chain id mismatch
    ├── NonceReuseError         encryption nonce reused under one key
    ├── SigningError            account cannot sign the requested payload
    ├── SignedCallError         signed read preconditions violated
    └── RPCError                JSON-RPC error object returned by the node

Transport exceptions (httpx.HTTPError and friends) are never wrapped.
"""

from __future__ import annotations

from typing import Any, Optional


class SeismicError(Exception):
    """
    Base error.

    Attributes:
        field: Name of the offending field, when one applies
        expected: What was expected (length, value, ...)
        received: What was actually received
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        expected: Any = None,
        received: Any = None,
    ):
        super().__init__(message)
        self.field = field
        self.expected = expected
        self.received = received


# =============================================================================
# Configuration errors
# =============================================================================

class ConfigurationError(SeismicError):
    """Invalid static input. Fatal, never retried."""
    pass


class InvalidKeyLengthError(ConfigurationError):
    """Symmetric key is not 32 bytes."""

    def __init__(self, received: int, expected: int = 32):
        super().__init__(
            f"Key must be {expected} bytes ({expected * 8} bits), got {received}",
            field="key",
            expected=expected,
            received=received,
        )


class InvalidNonceLengthError(ConfigurationError):
    """Encryption nonce is not 12 bytes."""

    def __init__(self, received: int, expected: int = 12):
        super().__init__(
            f"Nonce must be {expected} bytes, got {received}",
            field="nonce",
            expected=expected,
            received=received,
        )


class InvalidPublicKeyError(ConfigurationError):
    """Public key does not decode to a secp256k1 point."""
    pass


class InvalidPrivateKeyError(ConfigurationError):
    """Private scalar is malformed or out of range."""
    pass


class InvalidFieldError(ConfigurationError):
    """A metadata or transaction field has the wrong shape."""
    pass


class MissingChainIdError(ConfigurationError):
    """Seismic transactions cannot be encoded without a chain id."""

    def __init__(self):
        super().__init__(
            "Seismic transactions require chainId",
            field="chainId",
        )


# =============================================================================
# Authentication errors
# =============================================================================

class AuthenticationError(SeismicError):
    """AEAD authentication failed."""
    pass


class DecryptionError(AuthenticationError):
    """
    Decryption/authentication failed.

    Wrong key, wrong nonce, wrong AAD and corrupted ciphertext are
    deliberately indistinguishable.
    """

    def __init__(self):
        super().__init__("Decryption failed: authentication tag mismatch")


# =============================================================================
# Validity window errors
# =============================================================================

class ValidityWindowError(SeismicError):
    """The transaction's temporal binding is unusable."""
    pass


class ExpiredBlockError(ValidityWindowError):
    """Caller-supplied expiry is not ahead of the latest block."""

    def __init__(self, expires_at_block: int, latest_block: int):
        super().__init__(
            f"expiresAtBlock is in the past: {expires_at_block} <= latest block {latest_block}",
            field="expiresAtBlock",
            expected=f"> {latest_block}",
            received=expires_at_block,
        )


class ChainIdMismatchError(ValidityWindowError):
    """Configured chain id differs from the node's eth_chainId."""

    def __init__(self, configured: int, reported: int):
        super().__init__(
            f"Client chain's id does not match eth_chainId response: "
            f"configured {configured}, node reported {reported}",
            field="chainId",
            expected=configured,
            received=reported,
        )


# =============================================================================
# Programming errors
# =============================================================================

class NonceReuseError(SeismicError):
    """An encryption nonce was reused under the same key."""

    def __init__(self, nonce: bytes):
        super().__init__(
            f"Encryption nonce 0x{nonce.hex()} already used under this key",
            field="encryptionNonce",
            received="0x" + nonce.hex(),
        )


# =============================================================================
# Signing / call errors
# =============================================================================

class SigningError(SeismicError):
    """Account could not produce a signature."""
    pass


class UnsupportedSigningError(SigningError):
    """Account does not support the requested signing method."""
    pass


class SignedCallError(SeismicError):
    """Signed read could not be performed."""

    def __init__(self, reason: str):
        super().__init__(f"Signed call failed: {reason}")
        self.reason = reason


# =============================================================================
# RPC errors
# =============================================================================

class RPCError(SeismicError):
    """Base JSON-RPC error."""

    def __init__(self, message: str, code: int = -32000, data: Any = None):
        super().__init__(message)
        self.code = code
        self.data = data


class ResponseError(RPCError):
    """Node answered with a JSON-RPC error object or a malformed body."""
    pass


__all__ = [
    "SeismicError",
    "ConfigurationError",
    "InvalidKeyLengthError",
    "InvalidNonceLengthError",
    "InvalidPublicKeyError",
    "InvalidPrivateKeyError",
    "InvalidFieldError",
    "MissingChainIdError",
    "AuthenticationError",
    "DecryptionError",
    "ValidityWindowError",
    "ExpiredBlockError",
    "ChainIdMismatchError",
    "NonceReuseError",
    "SigningError",
    "UnsupportedSigningError",
    "SignedCallError",
    "RPCError",
    "ResponseError",
]
