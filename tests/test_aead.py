# tests/test_aead.py
"""
AEAD and encryption nonce tests.

Categories:
  1. Correctness (round trip, empty payload)
  2. Robustness (key/nonce lengths, tampering)
  3. Cross-implementation ciphertext vectors
  4. Nonces
"""

import pytest

from seismic_shield.crypto.aead import AesGcmCipher
from seismic_shield.crypto.common import TAG_SIZE, as_bytes
from seismic_shield.crypto.ecdh import KeyAgreement, generate_aes_key
from seismic_shield.crypto.nonce import (
    NonceSource,
    nonce_from_int,
    normalize_nonce,
    random_encryption_nonce,
)
from seismic_shield.block.wire.metadata import encode_tx_fields_as_aad
from seismic_shield.errors import (
    DecryptionError,
    InvalidKeyLengthError,
    InvalidNonceLengthError,
)

from vectors import (
    CALLDATA_AAD,
    CALLDATA_CIPHERTEXT,
    CALLDATA_TX,
    CLIENT_PRIVATE_KEY,
    ENVELOPE_AAD,
    ENVELOPE_CIPHERTEXT,
    ENVELOPE_TX,
    KEYGEN_AES_KEY,
    NETWORK_PUBLIC_KEY,
    PLAINTEXT,
    metadata_from_vector,
)


KEY = as_bytes(KEYGEN_AES_KEY)
NONCE = bytes(range(12))
AAD = b"bound metadata"


@pytest.fixture
def cipher():
    return AesGcmCipher(KEY)


# =============================================================================
# 1. Correctness
# =============================================================================

@pytest.mark.parametrize("plaintext", [b"\x00", b"hello seismic", bytes(range(256)) * 4])
def test_round_trip(cipher, plaintext):
    ct = cipher.encrypt(plaintext, NONCE, AAD)
    assert len(ct) == len(plaintext) + TAG_SIZE
    assert cipher.decrypt(ct, NONCE, AAD) == plaintext


def test_round_trip_without_aad(cipher):
    ct = cipher.encrypt(b"calldata", NONCE)
    assert cipher.decrypt(ct, NONCE) == b"calldata"


def test_hex_inputs(cipher):
    ct = cipher.encrypt(PLAINTEXT, "0x" + NONCE.hex(), "0x" + AAD.hex())
    assert ct == cipher.encrypt(as_bytes(PLAINTEXT), NONCE, AAD)


def test_deterministic(cipher):
    assert cipher.encrypt(b"same", NONCE, AAD) == cipher.encrypt(b"same", NONCE, AAD)


@pytest.mark.parametrize("empty", [b"", "0x", ""])
def test_empty_plaintext_short_circuits(cipher, empty):
    assert cipher.encrypt(empty, NONCE, AAD) == b""
    assert cipher.decrypt(empty, NONCE, AAD) == b""


def test_empty_plaintext_still_checks_nonce(cipher):
    with pytest.raises(InvalidNonceLengthError):
        cipher.encrypt(b"", b"\x00" * 11)


# =============================================================================
# 2. Robustness
# =============================================================================

@pytest.mark.parametrize("length", [0, 16, 31, 33])
def test_key_length(length):
    with pytest.raises(InvalidKeyLengthError) as exc_info:
        AesGcmCipher(b"\x01" * length)
    assert exc_info.value.expected == 32
    assert exc_info.value.received == length


@pytest.mark.parametrize("length", [0, 8, 11, 13, 16])
def test_nonce_length(cipher, length):
    with pytest.raises(InvalidNonceLengthError) as exc_info:
        cipher.encrypt(b"data", b"\x00" * length)
    assert exc_info.value.expected == 12
    with pytest.raises(InvalidNonceLengthError):
        cipher.decrypt(b"\x00" * 20, b"\x00" * length)


def test_tampered_ciphertext(cipher):
    ct = bytearray(cipher.encrypt(b"transfer 100", NONCE, AAD))
    ct[0] ^= 0x01
    with pytest.raises(DecryptionError):
        cipher.decrypt(bytes(ct), NONCE, AAD)


def test_tampered_tag(cipher):
    ct = bytearray(cipher.encrypt(b"transfer 100", NONCE, AAD))
    ct[-1] ^= 0x80
    with pytest.raises(DecryptionError):
        cipher.decrypt(bytes(ct), NONCE, AAD)


def test_wrong_aad(cipher):
    ct = cipher.encrypt(b"transfer 100", NONCE, AAD)
    with pytest.raises(DecryptionError):
        cipher.decrypt(ct, NONCE, AAD + b"!")
    with pytest.raises(DecryptionError):
        cipher.decrypt(ct, NONCE)


def test_wrong_nonce(cipher):
    ct = cipher.encrypt(b"transfer 100", NONCE, AAD)
    with pytest.raises(DecryptionError):
        cipher.decrypt(ct, bytes(12), AAD)


def test_wrong_key():
    ct = AesGcmCipher(KEY).encrypt(b"transfer 100", NONCE, AAD)
    with pytest.raises(DecryptionError):
        AesGcmCipher(b"\x02" * 32).decrypt(ct, NONCE, AAD)


def test_truncated_ciphertext(cipher):
    with pytest.raises(DecryptionError):
        cipher.decrypt(b"\x00" * (TAG_SIZE - 1), NONCE, AAD)


# =============================================================================
# 3. Cross-implementation ciphertext vectors
# =============================================================================

def test_zero_nonce_envelope_vector():
    metadata = metadata_from_vector(ENVELOPE_TX)
    aad = encode_tx_fields_as_aad(metadata, ENVELOPE_TX["gas_price"], ENVELOPE_TX["gas"])
    assert aad == as_bytes(ENVELOPE_AAD)

    key = KeyAgreement(CLIENT_PRIVATE_KEY).derive_shared_key(NETWORK_PUBLIC_KEY)
    cipher = AesGcmCipher(key)
    ct = cipher.encrypt(PLAINTEXT, metadata.encryption_nonce, aad)
    assert ct == as_bytes(ENVELOPE_CIPHERTEXT)
    assert cipher.decrypt(ct, metadata.encryption_nonce, aad) == as_bytes(PLAINTEXT)


def test_calldata_vector():
    metadata = metadata_from_vector(CALLDATA_TX)
    aad = encode_tx_fields_as_aad(metadata, CALLDATA_TX["gas_price"], CALLDATA_TX["gas"])
    assert aad == as_bytes(CALLDATA_AAD)

    key = generate_aes_key(CLIENT_PRIVATE_KEY, NETWORK_PUBLIC_KEY)
    assert key == generate_aes_key(CLIENT_PRIVATE_KEY, NETWORK_PUBLIC_KEY)
    cipher = AesGcmCipher(key)
    ct = cipher.encrypt(PLAINTEXT, metadata.encryption_nonce, aad)
    assert ct == as_bytes(CALLDATA_CIPHERTEXT)
    assert cipher.decrypt(ct, metadata.encryption_nonce, aad) == as_bytes(PLAINTEXT)


# =============================================================================
# 4. Nonces
# =============================================================================

def test_nonce_from_int_layout():
    assert nonce_from_int(0) == bytes(12)
    assert nonce_from_int(1) == bytes(7) + b"\x01" + bytes(4)
    assert nonce_from_int(2**64 - 1) == b"\xff" * 8 + bytes(4)


@pytest.mark.parametrize("value", [-1, 2**64])
def test_nonce_from_int_range(value):
    with pytest.raises(ValueError):
        nonce_from_int(value)


def test_int_nonce_matches_rendered_nonce(cipher):
    assert cipher.encrypt(b"calldata", 7, AAD) == cipher.encrypt(b"calldata", nonce_from_int(7), AAD)
    ct = cipher.encrypt(b"calldata", 7, AAD)
    assert cipher.decrypt(ct, nonce_from_int(7), AAD) == b"calldata"


def test_normalize_nonce():
    assert normalize_nonce(NONCE) == NONCE
    assert normalize_nonce("0x" + NONCE.hex()) == NONCE
    assert normalize_nonce(3) == nonce_from_int(3)
    with pytest.raises(InvalidNonceLengthError):
        normalize_nonce("0x00")


def test_random_nonces():
    nonces = {random_encryption_nonce() for _ in range(64)}
    assert len(nonces) == 64
    assert all(len(n) == 12 for n in nonces)


def test_nonce_source():
    random_source = NonceSource()
    assert not random_source.is_deterministic
    assert random_source.next() != random_source.next()

    fixed = NonceSource(fixed=NONCE)
    assert fixed.is_deterministic
    assert fixed.next() == fixed.next() == NONCE

    with pytest.raises(InvalidNonceLengthError):
        NonceSource(fixed=b"\x00" * 8)
