# seismic_shield/crypto/__init__.py
"""
Seismic Shield Cryptography Module

Key agreement, AEAD and nonce handling for shielded calldata.

  - ecdh:   secp256k1 ECDH + enclave key derivation (strategy objects)
  - aead:   AES-256-GCM with the empty-payload convention
  - nonce:  96-bit encryption nonces
  - common: byte/hex helpers and sizes
"""

from .common import (
    # Constants
    KEY_SIZE,
    NONCE_SIZE,
    TAG_SIZE,
    PRIVATE_KEY_SIZE,
    COMPRESSED_PUBKEY_SIZE,
    UNCOMPRESSED_PUBKEY_SIZE,
    ADDRESS_SIZE,
    HASH_SIZE,
    U64_MAX,
    # Helpers
    as_bytes,
    to_hex,
    is_empty,
    strip_leading_zeros,
    int_to_minimal_bytes,
    minimal_bytes_to_int,
)

from .nonce import (
    random_encryption_nonce,
    nonce_from_int,
    normalize_nonce,
    NonceSource,
)

from .ecdh import (
    AES_KEY_INFO,
    compress_public_key,
    public_key_from_private,
    shared_secret_point,
    shared_key_from_point,
    derive_aes_key,
    generate_shared_key,
    generate_aes_key,
    KeyDerivation,
    SeismicKeyDerivation,
    KeyAgreement,
    EncryptionKeyPair,
)

from .aead import (
    AeadCipher,
    AesGcmCipher,
)

__all__ = [
    # Constants
    "KEY_SIZE",
    "NONCE_SIZE",
    "TAG_SIZE",
    "PRIVATE_KEY_SIZE",
    "COMPRESSED_PUBKEY_SIZE",
    "UNCOMPRESSED_PUBKEY_SIZE",
    "ADDRESS_SIZE",
    "HASH_SIZE",
    "U64_MAX",
    # Helpers
    "as_bytes",
    "to_hex",
    "is_empty",
    "strip_leading_zeros",
    "int_to_minimal_bytes",
    "minimal_bytes_to_int",
    # Nonce
    "random_encryption_nonce",
    "nonce_from_int",
    "normalize_nonce",
    "NonceSource",
    # ECDH
    "AES_KEY_INFO",
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
    # AEAD
    "AeadCipher",
    "AesGcmCipher",
]
