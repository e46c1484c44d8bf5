# seismic_shield/client.py
"""
Seismic Shield Client

One object bundling the RPC client, the calldata encryptor and the
transaction builder for a single account.

Usage:
    config = ShieldedClientConfig(chain_id=31337)
    account = LocalAccountAdapter(account_sk)

    async with await create_shielded_client(config, account) as client:
        tx_hash = await client.send_shielded_transaction(data=calldata, to=contract)
        output = await client.signed_call(data=calldata, to=contract)
"""

from __future__ import annotations

import logging
from typing import Optional

from .block.adapters.base import AccountAdapter
from .block.mempool.builder import (
    DebugResult,
    SecurityParams,
    ShieldedTxBuilder,
)
from .block.mempool.encrypt import ShieldedEncryptor
from .block.transport.rpc import BlockTag, HTTPTransport, SeismicRPCClient
from .block.wire.metadata import TxSeismicMetadata
from .config import ShieldedClientConfig
from .crypto.common import BytesLike, to_hex
from .crypto.ecdh import EncryptionKeyPair
from .errors import ConfigurationError


logger = logging.getLogger(__name__)


class ShieldedClient:
    """
    Shielded wallet client.

    Build with :func:`create_shielded_client`, which fetches the enclave
    key before anything is encrypted.
    """

    def __init__(
        self,
        config: ShieldedClientConfig,
        rpc: SeismicRPCClient,
        key_pair: EncryptionKeyPair,
        encryptor: ShieldedEncryptor,
        builder: ShieldedTxBuilder,
    ):
        self._config = config
        self._rpc = rpc
        self._key_pair = key_pair
        self._encryptor = encryptor
        self._builder = builder

    @property
    def config(self) -> ShieldedClientConfig:
        return self._config

    @property
    def rpc(self) -> SeismicRPCClient:
        return self._rpc

    @property
    def builder(self) -> ShieldedTxBuilder:
        return self._builder

    @property
    def account(self) -> Optional[AccountAdapter]:
        return self._builder.account

    def get_encryption_public_key(self) -> bytes:
        return self._key_pair.public_key

    def _security(self, security: Optional[SecurityParams]) -> SecurityParams:
        if security is not None:
            return security
        return SecurityParams(blocks_window=self._config.security.blocks_window)

    # =========================================================================
    # Encryption
    # =========================================================================

    def encrypt(
        self,
        plaintext: BytesLike,
        metadata: TxSeismicMetadata,
        gas_price: Optional[int] = None,
        gas: Optional[int] = None,
    ) -> bytes:
        """
        Encrypt calldata with the configured AAD format.

        ``gas_price`` and ``gas`` are bound only by the tx_fields format and
        must match the transaction the ciphertext is sent in.
        """
        return self._encryptor.encrypt(
            plaintext, metadata, self._config.aad_format, gas_price=gas_price, gas=gas
        )

    def decrypt(
        self,
        ciphertext: BytesLike,
        metadata: TxSeismicMetadata,
        gas_price: Optional[int] = None,
        gas: Optional[int] = None,
    ) -> bytes:
        return self._encryptor.decrypt(
            ciphertext, metadata, self._config.aad_format, gas_price=gas_price, gas=gas
        )

    # =========================================================================
    # Transactions
    # =========================================================================

    async def send_shielded_transaction(
        self,
        data: BytesLike,
        to: Optional[BytesLike],
        value: int = 0,
        nonce: Optional[int] = None,
        gas: Optional[int] = None,
        gas_price: Optional[int] = None,
        security: Optional[SecurityParams] = None,
    ) -> str:
        return await self._builder.send_shielded_transaction(
            data, to, value, nonce, gas, gas_price, self._security(security)
        )

    async def signed_call(
        self,
        data: BytesLike,
        to: BytesLike,
        value: int = 0,
        gas: Optional[int] = None,
        gas_price: Optional[int] = None,
        from_address: Optional[str] = None,
        block: BlockTag = "latest",
        security: Optional[SecurityParams] = None,
    ) -> Optional[bytes]:
        return await self._builder.signed_call(
            data, to, value, gas, gas_price, from_address, block, self._security(security)
        )

    async def debug_transaction(
        self,
        data: BytesLike,
        to: Optional[BytesLike],
        value: int = 0,
        nonce: Optional[int] = None,
        gas: Optional[int] = None,
        gas_price: Optional[int] = None,
        security: Optional[SecurityParams] = None,
    ) -> DebugResult:
        return await self._builder.debug_transaction(
            data, to, value, nonce, gas, gas_price, self._security(security)
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def aclose(self) -> None:
        await self._rpc.aclose()

    async def __aenter__(self) -> "ShieldedClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


async def create_shielded_client(
    config: ShieldedClientConfig,
    account: Optional[AccountAdapter] = None,
    transport: Optional[HTTPTransport] = None,
) -> ShieldedClient:
    """
    Validate ``config``, fetch the enclave public key and wire everything up.

    Raises:
        ConfigurationError: config.validate() reported problems, or the
            network key is not a valid secp256k1 point
        ResponseError: seismic_getTeePublicKey failed

    The RPC client is closed again if anything after its creation fails.
    """
    errors = config.validate()
    if errors:
        raise ConfigurationError("; ".join(errors))

    rpc = SeismicRPCClient(config.rpc.url, transport=transport, timeout=config.rpc.timeout)
    try:
        tee_public_key = await rpc.get_tee_public_key()

        if config.encryption_private_key is not None:
            key_pair = EncryptionKeyPair.from_private_key(config.encryption_private_key)
        else:
            key_pair = EncryptionKeyPair.generate()

        encryptor = ShieldedEncryptor.from_key_agreement(
            private_key=key_pair.private_key,
            network_public_key=tee_public_key,
        )
    except BaseException:
        await rpc.aclose()
        raise

    builder = ShieldedTxBuilder(
        rpc=rpc,
        encryptor=encryptor,
        account=account,
        chain_id=config.chain_id,
        default_gas=config.security.default_gas,
        aad_format=config.aad_format,
    )
    logger.info(
        "shielded client ready: chain=%d rpc=%s encryption_pubkey=%s",
        config.chain_id, config.rpc.url, to_hex(key_pair.public_key),
    )
    return ShieldedClient(config, rpc, key_pair, encryptor, builder)


__all__ = [
    "ShieldedClient",
    "create_shielded_client",
]
