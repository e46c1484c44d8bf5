# seismic_shield/block/adapters/__init__.py
"""
Seismic Shield Account Adapters

    AccountAdapter:        abstract signing interface used by the builder
    LocalAccountAdapter:   in-process key, raw tx + typed data
    JsonRpcAccountAdapter: remote account, typed data only
"""

from .base import (
    TxSerializer,
    AccountCapability,
    AccountAdapter,
    LocalAccountAdapter,
    JsonRpcAccountAdapter,
    recover_typed_data_signer,
    recover_message_signer,
)

__all__ = [
    "TxSerializer",
    "AccountCapability",
    "AccountAdapter",
    "LocalAccountAdapter",
    "JsonRpcAccountAdapter",
    "recover_typed_data_signer",
    "recover_message_signer",
]
