# tests/test_transaction.py
"""
0x4a transaction codec tests.

Categories:
  1. Signed wire vectors (sanvil, devnet)
  2. Unsigned form and signing hash
  3. Signature normalization
  4. Decoding
  5. Local signing and sender recovery
"""

import asyncio

import pytest
import rlp

from seismic_shield.block.adapters.base import LocalAccountAdapter
from seismic_shield.block.wire.transaction import (
    SIGNED_FIELD_COUNT,
    UNSIGNED_FIELD_COUNT,
    SeismicTransaction,
    Signature,
    decode_seismic_transaction,
    recover_transaction_sender,
    serialize_seismic_transaction,
    signing_hash,
    to_y_parity_signature_array,
)
from seismic_shield.crypto.common import as_bytes
from seismic_shield.errors import InvalidFieldError, MissingChainIdError

from vectors import (
    ACCOUNT_ADDRESS,
    ACCOUNT_PRIVATE_KEY,
    WIRE_DEVNET,
    WIRE_SANVIL,
    WIRE_TX,
)


def _tx(chain_id, data=b"", **overrides):
    fields = dict(WIRE_TX)
    fields.update(overrides)
    return SeismicTransaction(
        chain_id=chain_id,
        nonce=fields["nonce"],
        gas_price=fields["gas_price"],
        gas=fields["gas"],
        to=as_bytes(fields["to"]) if fields["to"] else None,
        value=fields["value"],
        data=as_bytes(data),
        encryption_pubkey=as_bytes(fields["encryption_pubkey"]),
        encryption_nonce=as_bytes(fields["encryption_nonce"]),
        message_version=fields["message_version"],
        recent_block_hash=as_bytes(fields["recent_block_hash"]),
        expires_at_block=fields["expires_at_block"],
        signed_read=fields["signed_read"],
    )


def _signature(vector):
    return Signature(
        r=int(vector["r"], 16),
        s=int(vector["s"], 16),
        y_parity=vector["y_parity"],
    )


# =============================================================================
# 1. Signed wire vectors
# =============================================================================

@pytest.mark.parametrize("vector", [WIRE_SANVIL, WIRE_DEVNET], ids=["sanvil", "devnet"])
def test_signed_serialization_vector(vector):
    tx = _tx(vector["chain_id"], vector["data"])
    raw = serialize_seismic_transaction(tx, _signature(vector))
    assert raw == as_bytes(vector["expected"])


@pytest.mark.parametrize("vector", [WIRE_SANVIL, WIRE_DEVNET], ids=["sanvil", "devnet"])
def test_v_form_signature_matches_y_parity_form(vector):
    tx = _tx(vector["chain_id"], vector["data"])
    legacy_v = Signature(
        r=int(vector["r"], 16),
        s=int(vector["s"], 16),
        v=27 + vector["y_parity"],
    )
    assert serialize_seismic_transaction(tx, legacy_v) == as_bytes(vector["expected"])


def test_serialization_starts_with_type_byte():
    raw = serialize_seismic_transaction(_tx(31337))
    assert raw[0] == 0x4A


# =============================================================================
# 2. Unsigned form and signing hash
# =============================================================================

def test_unsigned_form_omits_signature_fields():
    items = rlp.decode(serialize_seismic_transaction(_tx(31337, WIRE_SANVIL["data"]))[1:])
    assert len(items) == UNSIGNED_FIELD_COUNT
    assert items[-1] == as_bytes(WIRE_SANVIL["data"])


def test_signed_form_has_sixteen_fields():
    tx = _tx(31337, WIRE_SANVIL["data"])
    items = rlp.decode(serialize_seismic_transaction(tx, _signature(WIRE_SANVIL))[1:])
    assert len(items) == SIGNED_FIELD_COUNT
    assert items[13] == b""


@pytest.mark.parametrize("chain_id", [None, 0])
def test_missing_chain_id(chain_id):
    with pytest.raises(MissingChainIdError):
        serialize_seismic_transaction(_tx(chain_id))
    with pytest.raises(MissingChainIdError):
        signing_hash(_tx(chain_id))


def test_signing_hash_depends_on_chain():
    assert signing_hash(_tx(31337)) != signing_hash(_tx(5124))
    assert len(signing_hash(_tx(31337))) == 32


def test_none_fields_encode_empty():
    tx = SeismicTransaction(chain_id=1)
    items = rlp.decode(serialize_seismic_transaction(tx)[1:])
    assert items[0] == b"\x01"
    assert all(item == b"" for item in items[1:])


# =============================================================================
# 3. Signature normalization
# =============================================================================

@pytest.mark.parametrize("v, parity", [(0, 0), (1, 1), (27, 0), (28, 1)])
def test_v_to_parity(v, parity):
    assert Signature(r=1, s=2, v=v).parity == parity


def test_y_parity_wins_over_v():
    assert Signature(r=1, s=2, v=27, y_parity=1).parity == 1


@pytest.mark.parametrize("v", [2, 26, 29, 37, None])
def test_invalid_v(v):
    with pytest.raises(InvalidFieldError):
        Signature(r=1, s=2, v=v).parity


def test_invalid_y_parity():
    with pytest.raises(InvalidFieldError):
        Signature(r=1, s=2, y_parity=2).parity


def test_y_parity_signature_array():
    assert to_y_parity_signature_array(Signature(r=0, s=5, y_parity=0)) == [b"", b"", b"\x05"]
    assert to_y_parity_signature_array(Signature(r=256, s=1, v=28)) == [b"\x01", b"\x01\x00", b"\x01"]


def test_signature_bytes_round_trip():
    sig = _signature(WIRE_DEVNET)
    raw = sig.to_bytes()
    assert len(raw) == 65
    assert raw[64] == 28
    parsed = Signature.from_bytes(raw)
    assert (parsed.r, parsed.s, parsed.parity) == (sig.r, sig.s, 1)
    with pytest.raises(InvalidFieldError):
        Signature.from_bytes(raw[:64])


def test_signature_to_rpc():
    rpc = _signature(WIRE_SANVIL).to_rpc()
    assert rpc == {"r": WIRE_SANVIL["r"], "s": WIRE_SANVIL["s"], "yParity": "0x0"}


# =============================================================================
# 4. Decoding
# =============================================================================

@pytest.mark.parametrize("vector", [WIRE_SANVIL, WIRE_DEVNET], ids=["sanvil", "devnet"])
def test_decode_vector(vector):
    tx, sig = decode_seismic_transaction(vector["expected"])
    assert tx == _tx(vector["chain_id"], vector["data"])
    assert sig.parity == vector["y_parity"]
    assert sig.r == int(vector["r"], 16)
    assert sig.s == int(vector["s"], 16)


def test_decode_unsigned():
    tx = _tx(31337, b"\xaa\xbb")
    decoded, sig = decode_seismic_transaction(serialize_seismic_transaction(tx))
    assert decoded == tx
    assert sig is None


def test_decode_restores_leading_zero_nonce_and_creation():
    tx = _tx(31337, b"\x01", encryption_nonce="0x0000" + "ab" * 10, to=None)
    decoded, _ = decode_seismic_transaction(serialize_seismic_transaction(tx))
    assert decoded.encryption_nonce == tx.encryption_nonce
    assert decoded.to is None


@pytest.mark.parametrize(
    "raw",
    [
        b"",
        b"\x02" + rlp.encode([b""] * 13),
        b"\x4a" + rlp.encode([b""] * 12),
        b"\x4a" + rlp.encode([b""] * 14),
        b"\x4a\xff\xff",
        b"\x4a" + rlp.encode([b"\x01"] * 12 + [[b""]]),
    ],
    ids=["empty", "wrong-type", "too-few", "odd-count", "bad-rlp", "nested"],
)
def test_decode_rejects_malformed(raw):
    with pytest.raises(InvalidFieldError):
        decode_seismic_transaction(raw)


# =============================================================================
# 5. Local signing and sender recovery
# =============================================================================

def test_local_sign_and_recover():
    account = LocalAccountAdapter(ACCOUNT_PRIVATE_KEY)
    assert account.address == ACCOUNT_ADDRESS
    tx = _tx(31337, WIRE_SANVIL["data"])

    raw = asyncio.run(account.sign_transaction(tx))

    decoded, sig = decode_seismic_transaction(raw)
    assert decoded == tx
    assert sig.parity in (0, 1)
    assert recover_transaction_sender(raw) == ACCOUNT_ADDRESS


def test_local_signing_is_deterministic():
    account = LocalAccountAdapter(ACCOUNT_PRIVATE_KEY)
    tx = _tx(5124, WIRE_DEVNET["data"])
    assert asyncio.run(account.sign_transaction(tx)) == asyncio.run(account.sign_transaction(tx))


def test_recover_requires_signature():
    with pytest.raises(InvalidFieldError):
        recover_transaction_sender(serialize_seismic_transaction(_tx(31337)))
