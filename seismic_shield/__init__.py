# seismic_shield/__init__.py
"""
Seismic Shield: Shielded Transactions for Seismic Networks

- Enclave key agreement (secp256k1 ECDH + HKDF)
- Calldata AEAD (AES-256-GCM) bound to transaction metadata
- Byte-exact 0x4a transaction serialization
- EIP-712 signing path for typed-data-only wallets
- Signed reads with encrypted responses

Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │  seismic_shield                                         │
    │  ├── crypto/           # Key agreement, AEAD, nonces    │
    │  │   ├── ecdh.py       # shared key derivation          │
    │  │   ├── aead.py       # AES-256-GCM                    │
    │  │   └── nonce.py      # 96-bit encryption nonces       │
    │  │                                                      │
    │  ├── block/            # Chain integration              │
    │  │   ├── wire/         # metadata AAD, tx codec, 712    │
    │  │   ├── transport/    # JSON-RPC client                │
    │  │   ├── adapters/     # signing accounts               │
    │  │   └── mempool/      # encryptor + tx builder         │
    │  │                                                      │
    │  ├── client.py         # ShieldedClient facade          │
    │  ├── config.py         # dataclass config + logging     │
    │  └── errors.py         # SeismicError hierarchy         │
    └─────────────────────────────────────────────────────────┘
"""

__version__ = "0.1.0"

# =============================================================================
# Errors
# =============================================================================

from .errors import (
    SeismicError,
    ConfigurationError,
    InvalidKeyLengthError,
    InvalidNonceLengthError,
    InvalidPublicKeyError,
    InvalidPrivateKeyError,
    InvalidFieldError,
    MissingChainIdError,
    AuthenticationError,
    DecryptionError,
    ValidityWindowError,
    ExpiredBlockError,
    ChainIdMismatchError,
    NonceReuseError,
    SigningError,
    UnsupportedSigningError,
    SignedCallError,
    RPCError,
    ResponseError,
)

# =============================================================================
# Cryptography
# =============================================================================

from .crypto import (
    EncryptionKeyPair,
    KeyAgreement,
    SeismicKeyDerivation,
    generate_aes_key,
    AesGcmCipher,
    random_encryption_nonce,
    nonce_from_int,
)

# =============================================================================
# Chain integration
# =============================================================================

from .block import (
    SANVIL,
    SEISMIC_DEVNET,
    AadFormat,
    TxSeismicMetadata,
    build_metadata,
    encode_metadata_as_aad,
    SeismicTransaction,
    Signature,
    serialize_seismic_transaction,
    decode_seismic_transaction,
    seismic_tx_typed_data,
    SeismicRPCClient,
    MockHTTPTransport,
    LocalAccountAdapter,
    JsonRpcAccountAdapter,
    ShieldedEncryptor,
    SecurityParams,
    ShieldedTxBuilder,
)

# =============================================================================
# Client
# =============================================================================

from .config import (
    RPCConfig,
    SecurityConfig,
    LogConfig,
    ShieldedClientConfig,
    configure_logging,
)

from .client import ShieldedClient, create_shielded_client


__all__ = [
    "__version__",
    # Errors
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
    # Cryptography
    "EncryptionKeyPair",
    "KeyAgreement",
    "SeismicKeyDerivation",
    "generate_aes_key",
    "AesGcmCipher",
    "random_encryption_nonce",
    "nonce_from_int",
    # Chain integration
    "SANVIL",
    "SEISMIC_DEVNET",
    "AadFormat",
    "TxSeismicMetadata",
    "build_metadata",
    "encode_metadata_as_aad",
    "SeismicTransaction",
    "Signature",
    "serialize_seismic_transaction",
    "decode_seismic_transaction",
    "seismic_tx_typed_data",
    "SeismicRPCClient",
    "MockHTTPTransport",
    "LocalAccountAdapter",
    "JsonRpcAccountAdapter",
    "ShieldedEncryptor",
    "SecurityParams",
    "ShieldedTxBuilder",
    # Client
    "RPCConfig",
    "SecurityConfig",
    "LogConfig",
    "ShieldedClientConfig",
    "configure_logging",
    "ShieldedClient",
    "create_shielded_client",
]
