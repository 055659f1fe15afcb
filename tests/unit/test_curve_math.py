"""
Unit tests for the constant-product curve math.

Tests cover:
- Exact-input output and exact-output input formulas
- Rounding direction and minimality of the exact-output input
- u64/u128 domain checks
- Liquidity edge cases
- Market cap, buy-out and initial buy helpers
"""

import pytest
from hypothesis import assume, given
from hypothesis import strategies as st

from pumpfun_sdk.accounts import decode_bonding_curve, decode_global_account
from pumpfun_sdk.constants import U64_MAX, U128_MAX
from pumpfun_sdk.curve.math import (
    buy_out_price,
    checked_add,
    checked_mul,
    curve_input,
    curve_output,
    initial_buy_tokens,
    market_cap_sol,
    require_u64,
)
from pumpfun_sdk.exceptions import ArithmeticOverflow, InsufficientLiquidity, ValidationError

from helpers.fake_chain import encode_bonding_curve, encode_global


class TestCurveOutput:
    def test_reference_fixture(self):
        """1 SOL into 30 SOL / 1M token virtual reserves, no fees."""
        out = curve_output(1_000_000_000, 30_000_000_000, 1_000_000_000_000)
        assert out == 1_000_000_000 * 1_000_000_000_000 // 31_000_000_000
        assert out == 32_258_064_516

    def test_rounds_down(self):
        # 10 * 7 / (3 + 10) = 5.38
        assert curve_output(10, 3, 7) == 5

    def test_output_never_drains_reserve(self):
        out = curve_output(U64_MAX, 1, 1_000)
        assert out < 1_000

    def test_zero_output_is_insufficient_liquidity(self):
        with pytest.raises(InsufficientLiquidity):
            curve_output(1, 1_000_000_000_000, 1)

    def test_zero_input(self):
        with pytest.raises(InsufficientLiquidity):
            curve_output(0, 100, 100)

    def test_empty_reserves(self):
        with pytest.raises(InsufficientLiquidity):
            curve_output(100, 0, 100)
        with pytest.raises(InsufficientLiquidity):
            curve_output(100, 100, 0)

    def test_amount_above_u64_overflows(self):
        with pytest.raises(ArithmeticOverflow) as exc_info:
            curve_output(U64_MAX + 1, 100, 100)
        assert exc_info.value.limit == U64_MAX

    def test_negative_amount_rejected(self):
        with pytest.raises(ArithmeticOverflow):
            curve_output(-1, 100, 100)

    def test_non_integer_rejected(self):
        with pytest.raises(ValidationError):
            curve_output(1.5, 100, 100)

    def test_wide_intermediate_product(self):
        """Products beyond 64 bits are computed exactly."""
        out = curve_output(U64_MAX, U64_MAX, U64_MAX)
        assert out == U64_MAX * U64_MAX // (2 * U64_MAX)


class TestCurveInput:
    def test_rounds_up(self):
        # 1e9 * 30e9 / (1e12 - 1e9) = 30030030.03
        assert curve_input(1_000_000_000, 30_000_000_000, 1_000_000_000_000) == 30_030_031

    def test_exact_division_not_bumped(self):
        # 50 * 100 / (100 - 50) = 100
        assert curve_input(50, 100, 100) == 100

    def test_output_equal_to_reserve_rejected(self):
        with pytest.raises(InsufficientLiquidity):
            curve_input(100, 100, 100)

    def test_output_above_reserve_rejected(self):
        with pytest.raises(InsufficientLiquidity):
            curve_input(101, 100, 100)

    def test_zero_output_rejected(self):
        with pytest.raises(InsufficientLiquidity):
            curve_input(0, 100, 100)

    def test_result_above_u64_overflows(self):
        with pytest.raises(ArithmeticOverflow):
            curve_input(U64_MAX - 1, U64_MAX, U64_MAX)


class TestCheckedArithmetic:
    def test_checked_mul_within_u128(self):
        assert checked_mul(U64_MAX, U64_MAX) == U64_MAX * U64_MAX

    def test_checked_mul_overflow(self):
        with pytest.raises(ArithmeticOverflow):
            checked_mul(U128_MAX, 2)

    def test_checked_add_overflow(self):
        with pytest.raises(ArithmeticOverflow):
            checked_add(U128_MAX, 1)

    def test_require_u64_bounds(self):
        assert require_u64(0) == 0
        assert require_u64(U64_MAX) == U64_MAX
        with pytest.raises(ValidationError):
            require_u64(True)


@given(
    reserve_in=st.integers(min_value=1, max_value=10**15),
    reserve_out=st.integers(min_value=2, max_value=10**15),
    data=st.data(),
)
def test_exact_output_input_is_minimal(reserve_in, reserve_out, data):
    """curve_input gives the smallest input whose output covers the request."""
    wanted = data.draw(st.integers(min_value=1, max_value=reserve_out - 1))
    try:
        needed = curve_input(wanted, reserve_in, reserve_out)
    except ArithmeticOverflow:
        assume(False)

    assert curve_output(needed, reserve_in, reserve_out) >= wanted

    if needed > 1:
        try:
            short = curve_output(needed - 1, reserve_in, reserve_out)
        except InsufficientLiquidity:
            short = 0
        assert short < wanted


@given(
    amount=st.integers(min_value=1, max_value=U64_MAX),
    reserve_in=st.integers(min_value=1, max_value=U64_MAX),
    reserve_out=st.integers(min_value=1, max_value=U64_MAX),
)
def test_output_is_bounded_by_reserve(amount, reserve_in, reserve_out):
    try:
        out = curve_output(amount, reserve_in, reserve_out)
    except InsufficientLiquidity:
        return
    assert 0 < out < reserve_out


@given(
    smaller=st.integers(min_value=1, max_value=10**12),
    extra=st.integers(min_value=0, max_value=10**12),
)
def test_output_monotonic_in_input(smaller, extra):
    reserve_in, reserve_out = 30_000_000_000, 1_000_000_000_000
    try:
        low = curve_output(smaller, reserve_in, reserve_out)
    except InsufficientLiquidity:
        low = 0
    high = curve_output(smaller + extra, reserve_in, reserve_out)
    assert high >= low


class TestCurveHelpers:
    def test_market_cap(self):
        state = decode_bonding_curve(encode_bonding_curve())
        expected = 1_000_000_000_000_000 * 30_000_000_000 // 1_000_000_000_000
        assert market_cap_sol(state) == expected

    def test_market_cap_empty_curve(self):
        state = decode_bonding_curve(encode_bonding_curve(virtual_token_reserves=0))
        assert market_cap_sol(state) == 0

    def test_buy_out_price_includes_fee(self):
        state = decode_bonding_curve(encode_bonding_curve(real_token_reserves=1_000_000_000))
        raw = curve_input(1_000_000_000, 30_000_000_000, 1_000_000_000_000)
        assert buy_out_price(state, 0, 100) == raw + raw * 100 // 10_000

    def test_initial_buy_tokens(self):
        global_state = decode_global_account(encode_global())
        vsol, vtok = 30_000_000_000, 1_073_000_000_000_000
        amount = 1_000_000_000
        expected = vtok - (vsol * vtok // (vsol + amount) + 1)
        assert initial_buy_tokens(global_state, amount) == expected

    def test_initial_buy_capped_at_real_reserve(self):
        global_state = decode_global_account(encode_global(initial_real_token_reserves=1_000))
        assert initial_buy_tokens(global_state, 1_000_000_000) == 1_000

    def test_initial_buy_zero(self):
        global_state = decode_global_account(encode_global())
        assert initial_buy_tokens(global_state, 0) == 0
