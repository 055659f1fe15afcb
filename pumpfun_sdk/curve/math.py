"""
Constant-product curve arithmetic.

All amounts are integers in the smallest denomination (lamports and raw token
units). Operands are u64 values; products are formed in a checked u128 domain
and any value leaving its domain raises ArithmeticOverflow instead of wrapping.
"""

from ..accounts import BondingCurveState, GlobalAccountState
from ..constants import BPS_DENOMINATOR, U64_MAX, U128_MAX
from ..exceptions import ArithmeticOverflow, InsufficientLiquidity, ValidationError


def require_u64(value: int, name: str = "value") -> int:
    """Validate that value is an integer in [0, 2**64)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0 or value > U64_MAX:
        raise ArithmeticOverflow(f"{name} outside u64 range: {value}", value=value, limit=U64_MAX)
    return value


def checked_add(a: int, b: int) -> int:
    result = a + b
    if result > U128_MAX:
        raise ArithmeticOverflow("u128 addition overflow", value=result, limit=U128_MAX)
    return result


def checked_mul(a: int, b: int) -> int:
    result = a * b
    if result > U128_MAX:
        raise ArithmeticOverflow("u128 multiplication overflow", value=result, limit=U128_MAX)
    return result


def ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def fee_on(notional: int, basis_points: int) -> int:
    """Fee charged on notional at basis_points, rounded down."""
    return checked_mul(notional, basis_points) // BPS_DENOMINATOR


def curve_output(amount_in: int, reserve_in: int, reserve_out: int) -> int:
    """
    Output amount for an exact input against a constant-product curve.

    Formula: amount_out = floor(amount_in * reserve_out / (reserve_in + amount_in))

    Args:
        amount_in: Exact amount paid into the curve
        reserve_in: Virtual reserve on the input side
        reserve_out: Virtual reserve on the output side

    Returns:
        Raw output amount, before fees

    Raises:
        ArithmeticOverflow: If an operand is not a u64 value
        InsufficientLiquidity: If a reserve is empty or the output rounds to zero
    """
    require_u64(amount_in, "amount_in")
    require_u64(reserve_in, "reserve_in")
    require_u64(reserve_out, "reserve_out")

    if reserve_in == 0 or reserve_out == 0:
        raise InsufficientLiquidity("Curve reserves are empty")

    numerator = checked_mul(amount_in, reserve_out)
    denominator = checked_add(reserve_in, amount_in)
    amount_out = numerator // denominator

    if amount_out <= 0:
        raise InsufficientLiquidity(
            f"Input {amount_in} produces no output",
            details={"amount_in": amount_in, "reserve_in": reserve_in, "reserve_out": reserve_out},
        )
    return amount_out


def curve_input(amount_out: int, reserve_in: int, reserve_out: int) -> int:
    """
    Minimal input that yields at least amount_out from the curve.

    Formula: amount_in = ceil(amount_out * reserve_in / (reserve_out - amount_out))

    Raises:
        ArithmeticOverflow: If an operand or the result is not a u64 value
        InsufficientLiquidity: If amount_out is zero or would drain reserve_out
    """
    require_u64(amount_out, "amount_out")
    require_u64(reserve_in, "reserve_in")
    require_u64(reserve_out, "reserve_out")

    if amount_out == 0:
        raise InsufficientLiquidity("Requested output must be positive")
    if reserve_in == 0 or amount_out >= reserve_out:
        raise InsufficientLiquidity(
            f"Requested output {amount_out} exceeds available reserve {reserve_out}",
            details={"amount_out": amount_out, "reserve_out": reserve_out},
        )

    numerator = checked_mul(amount_out, reserve_in)
    amount_in = ceil_div(numerator, reserve_out - amount_out)
    return require_u64(amount_in, "amount_in")


def market_cap_sol(state: BondingCurveState) -> int:
    """Market cap in lamports at the current virtual price."""
    if state.virtual_token_reserves == 0:
        return 0
    return (
        checked_mul(state.token_total_supply, state.virtual_sol_reserves)
        // state.virtual_token_reserves
    )


def buy_out_price(state: BondingCurveState, amount: int, fee_basis_points: int) -> int:
    """
    Lamports needed to buy the remaining real token reserves, fee included.

    Args:
        state: Current curve state
        amount: Minimum token amount to price; raised to the real reserve
        fee_basis_points: Protocol fee rate

    Returns:
        Total lamports including the fee
    """
    tokens = max(require_u64(amount, "amount"), state.real_token_reserves)
    raw = curve_input(tokens, state.virtual_sol_reserves, state.virtual_token_reserves)
    return require_u64(raw + fee_on(raw, fee_basis_points), "buy_out_price")


def initial_buy_tokens(global_state: GlobalAccountState, amount: int) -> int:
    """
    Tokens received by the first buy on a new curve, before fees.

    Priced against the global initial reserves and capped at the initial real
    token reserve.
    """
    require_u64(amount, "amount")
    if amount == 0:
        return 0

    vsol = global_state.initial_virtual_sol_reserves
    vtok = global_state.initial_virtual_token_reserves
    invariant = checked_mul(vsol, vtok)
    new_sol_reserves = checked_add(vsol, amount)
    new_token_reserves = invariant // new_sol_reserves + 1
    tokens = max(vtok - new_token_reserves, 0)
    return min(tokens, global_state.initial_real_token_reserves)
