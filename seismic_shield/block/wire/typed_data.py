# seismic_shield/block/wire/typed_data.py
"""
Seismic Shield Wire Format: EIP-712 Typed Data

Accounts that cannot sign raw transactions (browser wallets, remote JSON-RPC
signers) sign an EIP-712 rendering of the seismic transaction instead. The
node receives ``{data: typedData, signature}`` and reconstructs the tx.

Message version 2 marks a typed-data-signed transaction; raw-signed
transactions use version 0.
"""

from __future__ import annotations

from typing import Any, Dict

from eth_account.messages import encode_typed_data
from eth_utils import keccak, to_checksum_address

from .transaction import SeismicTransaction
from ...crypto.common import to_hex
from ...errors import MissingChainIdError


# =============================================================================
# Constants
# =============================================================================

TYPED_DATA_MESSAGE_VERSION: int = 2

DOMAIN_NAME: str = "Seismic Transaction"
DOMAIN_VERSION: str = str(TYPED_DATA_MESSAGE_VERSION)
ZERO_ADDRESS: str = "0x0000000000000000000000000000000000000000"

EIP712_DOMAIN_TYPE = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]

TX_SEISMIC_TYPE = [
    {"name": "chainId", "type": "uint64"},
    {"name": "nonce", "type": "uint64"},
    {"name": "gasPrice", "type": "uint128"},
    {"name": "gasLimit", "type": "uint64"},
    # zero address for contract creation
    {"name": "to", "type": "address"},
    {"name": "value", "type": "uint256"},
    {"name": "encryptionPubkey", "type": "bytes"},
    {"name": "messageVersion", "type": "uint8"},
    {"name": "input", "type": "bytes"},
]


# =============================================================================
# Builders
# =============================================================================

def seismic_tx_typed_data(tx: SeismicTransaction) -> Dict[str, Any]:
    """
    EIP-712 full message for ``tx``.

    The result is JSON-serializable and can be passed both to
    ``eth_signTypedData_v4`` and to :func:`typed_data_hash`.

    Raises:
        MissingChainIdError: tx.chain_id is None or 0
    """
    if not tx.chain_id:
        raise MissingChainIdError()

    message = {
        "chainId": tx.chain_id,
        "nonce": tx.nonce or 0,
        "gasPrice": tx.gas_price or 0,
        "gasLimit": tx.gas or 0,
        "to": to_checksum_address(tx.to) if tx.to else ZERO_ADDRESS,
        "value": tx.value or 0,
        "encryptionPubkey": to_hex(tx.encryption_pubkey),
        "messageVersion": TYPED_DATA_MESSAGE_VERSION,
        "input": to_hex(tx.data),
    }
    return {
        "types": {
            "EIP712Domain": EIP712_DOMAIN_TYPE,
            "TxSeismic": TX_SEISMIC_TYPE,
        },
        "primaryType": "TxSeismic",
        "domain": {
            "name": DOMAIN_NAME,
            "version": DOMAIN_VERSION,
            "chainId": tx.chain_id,
            "verifyingContract": ZERO_ADDRESS,
        },
        "message": message,
    }


def typed_data_hash(typed_data: Dict[str, Any]) -> bytes:
    """The 32-byte EIP-712 digest a wallet signs for ``typed_data``."""
    signable = encode_typed_data(full_message=typed_data)
    return keccak(b"\x19" + signable.version + signable.header + signable.body)


__all__ = [
    "TYPED_DATA_MESSAGE_VERSION",
    "DOMAIN_NAME",
    "DOMAIN_VERSION",
    "ZERO_ADDRESS",
    "seismic_tx_typed_data",
    "typed_data_hash",
]
