# seismic_shield/block/mempool/encrypt.py
"""
Seismic Shield Mempool: Calldata Encryption

Encrypt transaction calldata so that only the network enclave can read it
while it sits in the mempool.

Architecture:
    Client key pair + enclave public key → ECDH → AES key (per client)
    calldata + TxSeismicMetadata → AAD → AES-GCM(key, encryptionNonce, AAD)

Security Properties:
    - Confidential calldata (only the enclave shares the AES key)
    - Tamper-proof metadata (AAD binds sender, chain, nonce, expiry, ...)
    - Nonce misuse detection (a nonce is accepted once within the most
      recent DEFAULT_MAX_TRACKED_NONCES encryptions)

Usage:
    from seismic_shield.block.mempool import ShieldedEncryptor

    encryptor = ShieldedEncryptor.from_key_agreement(
        private_key=pair.private_key,
        network_public_key=tee_public_key,
    )
    ciphertext = encryptor.encrypt(calldata, metadata)
    plaintext = encryptor.decrypt(ciphertext, metadata)
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Deque, Optional, Set, Type

from ..wire.metadata import AadFormat, TxSeismicMetadata, encode_aad
from ...crypto.aead import AeadCipher, AesGcmCipher
from ...crypto.common import BytesLike, as_bytes, to_hex
from ...crypto.ecdh import KeyAgreement, KeyDerivation, public_key_from_private
from ...crypto.nonce import NonceSource
from ...errors import NonceReuseError


logger = logging.getLogger(__name__)

DEFAULT_MAX_TRACKED_NONCES: int = 65536


# =============================================================================
# ShieldedEncryptor
# =============================================================================

class ShieldedEncryptor:
    """
    Calldata encryptor bound to one AES key.

    Remembers the nonces of its last ``max_tracked_nonces`` encryptions and
    refuses to seal with any of them again. Older nonces are forgotten in
    FIFO order, so memory stays bounded for long-lived clients.

    Decryption is not tracked: a signed read decrypts its response under
    the nonce it encrypted the request with.
    """

    def __init__(
        self,
        aes_key: BytesLike,
        encryption_pubkey: BytesLike,
        cipher_cls: Type[AeadCipher] = AesGcmCipher,
        nonce_source: Optional[NonceSource] = None,
        guard_nonce_reuse: bool = True,
        max_tracked_nonces: int = DEFAULT_MAX_TRACKED_NONCES,
    ):
        """
        Args:
            aes_key: 32-byte symmetric key shared with the enclave
            encryption_pubkey: Client's compressed public key (sent on the wire)
            cipher_cls: AEAD implementation
            nonce_source: Where fresh encryption nonces come from
            guard_nonce_reuse: Raise NonceReuseError on a repeated nonce
            max_tracked_nonces: Size of the reuse window
        """
        self._cipher = cipher_cls(aes_key)
        self._encryption_pubkey = as_bytes(encryption_pubkey)
        self._nonce_source = nonce_source or NonceSource()
        self._guard = guard_nonce_reuse
        if max_tracked_nonces < 1:
            raise ValueError("max_tracked_nonces must be positive")
        self._max_tracked = max_tracked_nonces
        self._used_nonces: Set[bytes] = set()
        self._nonce_order: Deque[bytes] = deque()
        self._lock = threading.Lock()

    @classmethod
    def from_key_agreement(
        cls,
        private_key: BytesLike,
        network_public_key: BytesLike,
        derivation: Optional[KeyDerivation] = None,
        cipher_cls: Type[AeadCipher] = AesGcmCipher,
        nonce_source: Optional[NonceSource] = None,
    ) -> "ShieldedEncryptor":
        """Derive the AES key from our private key and the enclave's public key."""
        agreement = KeyAgreement(private_key, derivation)
        aes_key = agreement.derive_shared_key(network_public_key)
        logger.debug(
            "derived calldata key (%s) for network key %s",
            agreement.derivation.name,
            to_hex(as_bytes(network_public_key)),
        )
        return cls(
            aes_key=aes_key,
            encryption_pubkey=public_key_from_private(private_key),
            cipher_cls=cipher_cls,
            nonce_source=nonce_source,
        )

    @property
    def encryption_pubkey(self) -> bytes:
        return self._encryption_pubkey

    @property
    def cipher(self) -> AeadCipher:
        return self._cipher

    def next_nonce(self) -> bytes:
        """A fresh 12-byte encryption nonce."""
        return self._nonce_source.next()

    def _claim_nonce(self, nonce: bytes) -> None:
        if not self._guard:
            return
        with self._lock:
            if nonce in self._used_nonces:
                raise NonceReuseError(nonce)
            self._used_nonces.add(nonce)
            self._nonce_order.append(nonce)
            if len(self._nonce_order) > self._max_tracked:
                self._used_nonces.discard(self._nonce_order.popleft())

    def encrypt(
        self,
        plaintext: BytesLike,
        metadata: TxSeismicMetadata,
        aad_format: AadFormat = AadFormat.METADATA,
        gas_price: Optional[int] = None,
        gas: Optional[int] = None,
    ) -> bytes:
        """
        Encrypt calldata under ``metadata.encryption_nonce`` with AAD.

        Empty calldata returns b"" and does not consume the nonce.

        Raises:
            NonceReuseError: nonce already used by this encryptor
        """
        data = as_bytes(plaintext)
        if not data:
            return b""
        nonce = metadata.encryption_nonce
        aad = encode_aad(metadata, aad_format, gas_price=gas_price, gas=gas)
        self._claim_nonce(nonce)
        return self._cipher.encrypt(data, nonce, aad)

    def decrypt(
        self,
        ciphertext: BytesLike,
        metadata: TxSeismicMetadata,
        aad_format: AadFormat = AadFormat.METADATA,
        gas_price: Optional[int] = None,
        gas: Optional[int] = None,
    ) -> bytes:
        """
        Decrypt calldata or a signed-read response.

        Raises:
            DecryptionError: key, nonce, AAD or ciphertext mismatch
        """
        aad = encode_aad(metadata, aad_format, gas_price=gas_price, gas=gas)
        return self._cipher.decrypt(ciphertext, metadata.encryption_nonce, aad)


__all__ = [
    "DEFAULT_MAX_TRACKED_NONCES",
    "ShieldedEncryptor",
]
