"""Tests for account decoding."""

import pytest

from pumpfun_sdk.accounts import (
    BondingCurveState,
    decode_bonding_curve,
    decode_global_account,
)
from pumpfun_sdk.constants import BONDING_CURVE_DISCRIMINATOR
from pumpfun_sdk.exceptions import InvalidAccountData
from pumpfun_sdk.layouts import BONDING_CURVE_SIZE, GLOBAL_SIZE

from helpers.fake_chain import (
    CREATOR,
    FEE_RECIPIENT,
    encode_bonding_curve,
    encode_global,
    key,
)


def test_layout_sizes():
    assert BONDING_CURVE_SIZE == 81
    assert GLOBAL_SIZE == 418


def test_decode_bonding_curve():
    state = decode_bonding_curve(encode_bonding_curve())
    assert state == BondingCurveState(
        virtual_token_reserves=1_000_000_000_000,
        virtual_sol_reserves=30_000_000_000,
        real_token_reserves=800_000_000_000,
        real_sol_reserves=5_000_000_000,
        token_total_supply=1_000_000_000_000_000,
        complete=False,
        creator=CREATOR,
    )
    assert state.is_active


def test_decode_bonding_curve_is_little_endian():
    data = bytearray(encode_bonding_curve(virtual_token_reserves=0))
    data[8] = 0x01
    data[9] = 0x02
    assert decode_bonding_curve(bytes(data)).virtual_token_reserves == 0x0201


def test_trailing_padding_ignored():
    data = encode_bonding_curve() + bytes(69)
    assert decode_bonding_curve(data).virtual_sol_reserves == 30_000_000_000


def test_completed_curve_not_active():
    state = decode_bonding_curve(encode_bonding_curve(complete=True))
    assert state.complete
    assert not state.is_active


def test_truncated_account():
    with pytest.raises(InvalidAccountData) as exc_info:
        decode_bonding_curve(encode_bonding_curve()[:-1])
    assert exc_info.value.account_type == "BondingCurve"
    assert exc_info.value.details["expected"] == 81


def test_discriminator_mismatch():
    data = encode_bonding_curve(discriminator=bytes(8))
    with pytest.raises(InvalidAccountData, match="discriminator"):
        decode_bonding_curve(data)


def test_global_bytes_are_not_a_bonding_curve():
    with pytest.raises(InvalidAccountData):
        decode_bonding_curve(encode_global())


def test_invalid_bool_byte():
    data = bytearray(encode_bonding_curve())
    data[48] = 2
    with pytest.raises(InvalidAccountData):
        decode_bonding_curve(bytes(data))


def test_missing_account():
    with pytest.raises(InvalidAccountData, match="not found"):
        decode_bonding_curve(None)


def test_decode_global_account():
    state = decode_global_account(encode_global())
    assert state.initialized
    assert state.fee_recipient == FEE_RECIPIENT
    assert state.fee_basis_points == 95
    assert state.creator_fee_basis_points == 5
    assert state.fee_recipients == tuple(key(20 + i) for i in range(7))
    assert state.set_creator_authority == key(12)


def test_global_initial_curve():
    state = decode_global_account(encode_global())
    curve = state.initial_curve(CREATOR)
    assert curve.virtual_token_reserves == 1_073_000_000_000_000
    assert curve.virtual_sol_reserves == 30_000_000_000
    assert curve.real_token_reserves == 793_100_000_000_000
    assert curve.real_sol_reserves == 0
    assert curve.creator == CREATOR
    assert not curve.complete


def test_global_discriminator_checked():
    data = BONDING_CURVE_DISCRIMINATOR + encode_global()[8:]
    with pytest.raises(InvalidAccountData) as exc_info:
        decode_global_account(data)
    assert exc_info.value.account_type == "Global"
