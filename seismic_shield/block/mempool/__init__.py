# seismic_shield/block/mempool/__init__.py
"""
Seismic Shield Mempool: Shielded Transactions

Modules:
    encrypt: ShieldedEncryptor, calldata AEAD bound to tx metadata
    builder: ShieldedTxBuilder, metadata/encrypt/sign/send orchestration

Usage:
    from seismic_shield.block.mempool import ShieldedEncryptor, ShieldedTxBuilder

    encryptor = ShieldedEncryptor.from_key_agreement(sk, tee_public_key)
    builder = ShieldedTxBuilder(rpc, encryptor, account, chain_id=31337)
    tx_hash = await builder.send_shielded_transaction(data=calldata, to=contract)
"""

from .encrypt import ShieldedEncryptor

from .builder import (
    RAW_MESSAGE_VERSION,
    SecurityParams,
    ValidityWindow,
    resolve_validity_window,
    PreparedTransaction,
    SignedPayload,
    DebugResult,
    ShieldedTxBuilder,
)

__all__ = [
    # Encryption
    "ShieldedEncryptor",
    # Builder
    "RAW_MESSAGE_VERSION",
    "SecurityParams",
    "ValidityWindow",
    "resolve_validity_window",
    "PreparedTransaction",
    "SignedPayload",
    "DebugResult",
    "ShieldedTxBuilder",
]
