# seismic_shield/block/__init__.py
"""
Seismic Shield Block: Chain Integration Layer

Submodules:
    chains      - Chain definitions (sanvil, devnet) and tx-type constants
    wire/       - Metadata AAD, 0x4a transaction codec, EIP-712 typed data
    transport/  - SeismicRPCClient over a pluggable HTTPTransport
    adapters/   - Account adapters (local key, JSON-RPC typed-data signer)
    mempool/    - ShieldedEncryptor and ShieldedTxBuilder

Quick Start:
    from seismic_shield.block import (
        SeismicRPCClient, ShieldedEncryptor, ShieldedTxBuilder,
        LocalAccountAdapter,
    )

    rpc = SeismicRPCClient("http://127.0.0.1:8545")
    tee_pk = await rpc.get_tee_public_key()
    encryptor = ShieldedEncryptor.from_key_agreement(sk, tee_pk)
    builder = ShieldedTxBuilder(rpc, encryptor, LocalAccountAdapter(account_sk))
    tx_hash = await builder.send_shielded_transaction(data=calldata, to=contract)
"""

# Order matters: wire depends on chains; transport, adapters and mempool
# depend on wire.
from .chains import (
    SEISMIC_TX_TYPE,
    DEFAULT_BLOCKS_WINDOW,
    DEFAULT_GAS,
    Chain,
    SANVIL,
    SEISMIC_DEVNET,
    LOCAL_SEISMIC_RETH,
    get_chain,
)

from .wire import (
    AadFormat,
    LegacyFields,
    SeismicElements,
    TxSeismicMetadata,
    build_metadata,
    encode_metadata_as_aad,
    encode_tx_fields_as_aad,
    Signature,
    SeismicTransaction,
    serialize_seismic_transaction,
    signing_hash,
    decode_seismic_transaction,
    recover_transaction_sender,
    TYPED_DATA_MESSAGE_VERSION,
    seismic_tx_typed_data,
)

from .transport import (
    BlockInfo,
    HTTPTransport,
    HttpxTransport,
    MockHTTPTransport,
    SeismicRPCClient,
)

from .adapters import (
    AccountCapability,
    AccountAdapter,
    LocalAccountAdapter,
    JsonRpcAccountAdapter,
)

from .mempool import (
    ShieldedEncryptor,
    SecurityParams,
    ShieldedTxBuilder,
    DebugResult,
)

__all__ = [
    # Chains
    "SEISMIC_TX_TYPE",
    "DEFAULT_BLOCKS_WINDOW",
    "DEFAULT_GAS",
    "Chain",
    "SANVIL",
    "SEISMIC_DEVNET",
    "LOCAL_SEISMIC_RETH",
    "get_chain",
    # Wire
    "AadFormat",
    "LegacyFields",
    "SeismicElements",
    "TxSeismicMetadata",
    "build_metadata",
    "encode_metadata_as_aad",
    "encode_tx_fields_as_aad",
    "Signature",
    "SeismicTransaction",
    "serialize_seismic_transaction",
    "signing_hash",
    "decode_seismic_transaction",
    "recover_transaction_sender",
    "TYPED_DATA_MESSAGE_VERSION",
    "seismic_tx_typed_data",
    # Transport
    "BlockInfo",
    "HTTPTransport",
    "HttpxTransport",
    "MockHTTPTransport",
    "SeismicRPCClient",
    # Adapters
    "AccountCapability",
    "AccountAdapter",
    "LocalAccountAdapter",
    "JsonRpcAccountAdapter",
    # Mempool
    "ShieldedEncryptor",
    "SecurityParams",
    "ShieldedTxBuilder",
    "DebugResult",
]
