# seismic_shield/block/wire/__init__.py
"""
Seismic Shield Wire Formats

Modules:
    metadata:    TxSeismicMetadata and its AAD encodings
    transaction: 0x4a transaction serialization, signing hash, decoding
    typed_data:  EIP-712 rendering for typed-data-only accounts

Usage:
    from seismic_shield.block.wire import (
        build_metadata, encode_metadata_as_aad,
        SeismicTransaction, serialize_seismic_transaction,
    )

    aad = encode_metadata_as_aad(metadata)
    tx = SeismicTransaction.from_metadata(metadata, ciphertext, gas_price, gas)
    raw = serialize_seismic_transaction(tx, signature)
"""

from .metadata import (
    AadFormat,
    LegacyFields,
    SeismicElements,
    TxSeismicMetadata,
    build_metadata,
    encode_metadata_as_aad,
    encode_tx_fields_as_aad,
    encode_aad,
)

from .transaction import (
    Signature,
    SeismicTransaction,
    to_y_parity_signature_array,
    serialize_seismic_transaction,
    signing_hash,
    decode_seismic_transaction,
    recover_transaction_sender,
)

from .typed_data import (
    TYPED_DATA_MESSAGE_VERSION,
    seismic_tx_typed_data,
    typed_data_hash,
)

__all__ = [
    # Metadata
    "AadFormat",
    "LegacyFields",
    "SeismicElements",
    "TxSeismicMetadata",
    "build_metadata",
    "encode_metadata_as_aad",
    "encode_tx_fields_as_aad",
    "encode_aad",
    # Transaction
    "Signature",
    "SeismicTransaction",
    "to_y_parity_signature_array",
    "serialize_seismic_transaction",
    "signing_hash",
    "decode_seismic_transaction",
    "recover_transaction_sender",
    # Typed data
    "TYPED_DATA_MESSAGE_VERSION",
    "seismic_tx_typed_data",
    "typed_data_hash",
]
