"""
Quote and slippage engine for bonding-curve trades.

Fee order matches the program: buys pay fees on top of the raw SOL that enters
the curve, sells have fees deducted from the raw SOL that leaves it. A quote
either satisfies the caller's bound or raises before any instruction is built.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from solders.pubkey import Pubkey

from ..accounts import BondingCurveState, GlobalAccountState
from ..constants import (
    BPS_DENOMINATOR,
    DEFAULT_SLIPPAGE_BPS,
    FeeCategory,
    TradeDirection,
    TradeMode,
    U64_MAX,
)
from ..exceptions import (
    CurveCompleted,
    InsufficientLiquidity,
    SlippageExceeded,
    ValidationError,
)
from .math import curve_input, curve_output, fee_on, require_u64

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeeSchedule:
    """
    Basis-point fee rates per category plus optional flat components.

    Attributes:
        rates: Rate per FeeCategory, in basis points of BPS_DENOMINATOR
        flat: Flat amount per FeeCategory, in lamports
    """

    rates: Mapping[FeeCategory, int] = field(default_factory=dict)
    flat: Mapping[FeeCategory, int] = field(default_factory=dict)

    def __post_init__(self):
        for category, rate in list(self.rates.items()) + list(self.flat.items()):
            if not isinstance(category, FeeCategory):
                raise ValidationError(f"Unknown fee category: {category!r}")
            if isinstance(rate, bool) or not isinstance(rate, int) or rate < 0:
                raise ValidationError(f"Fee for {category.value} must be a non-negative integer")
        if self.total_rate >= BPS_DENOMINATOR:
            raise ValidationError(
                f"Total fee rate {self.total_rate} bps must be below {BPS_DENOMINATOR}",
                details={"rates": {c.value: r for c, r in self.rates.items()}},
            )

    @classmethod
    def from_bps(cls, protocol_bps: int = 0, creator_bps: int = 0) -> "FeeSchedule":
        rates = {FeeCategory.PROTOCOL: protocol_bps}
        if creator_bps:
            rates[FeeCategory.CREATOR] = creator_bps
        return cls(rates=rates)

    @classmethod
    def from_global(
        cls, global_state: GlobalAccountState, creator: Optional[Pubkey] = None
    ) -> "FeeSchedule":
        """
        Fee schedule the program charges for a curve.

        The creator fee only applies to curves that have a creator set.
        """
        creator_bps = 0
        if creator is not None and creator != Pubkey.default():
            creator_bps = global_state.creator_fee_basis_points
        return cls.from_bps(global_state.fee_basis_points, creator_bps)

    @property
    def total_rate(self) -> int:
        return sum(self.rates.values())

    @property
    def total_flat(self) -> int:
        return sum(self.flat.values())

    def fees_on(self, notional: int) -> Dict[FeeCategory, int]:
        """Per-category fee on notional: floor(notional * rate / scale) + flat."""
        categories = list(self.rates) + [c for c in self.flat if c not in self.rates]
        return {
            category: fee_on(notional, self.rates.get(category, 0)) + self.flat.get(category, 0)
            for category in categories
        }


@dataclass(frozen=True)
class PriorityFee:
    """Compute budget settings prepended to a trade transaction."""

    unit_limit: Optional[int] = None
    unit_price: Optional[int] = None


@dataclass(frozen=True)
class TradeRequest:
    """
    A buy or sell with its slippage bound.

    Buy exact-output fixes the token amount and bounds the SOL paid with
    max_input. Buy exact-input fixes the SOL budget (fees included) and bounds
    the tokens received with min_output; its optional max_input is the SOL cap
    written on-chain for the quoted tokens and defaults to the budget. Sell
    fixes the token amount and bounds the SOL received with min_output.
    """

    direction: TradeDirection
    mode: TradeMode
    amount: int
    max_input: Optional[int] = None
    min_output: Optional[int] = None
    priority_fee: Optional[PriorityFee] = None
    track_volume: Optional[bool] = None

    def __post_init__(self):
        if isinstance(self.amount, bool) or not isinstance(self.amount, int) or self.amount <= 0:
            raise ValidationError(f"Trade amount must be a positive integer, got {self.amount!r}")
        require_u64(self.amount, "amount")

        if self.direction == TradeDirection.SELL and self.mode == TradeMode.EXACT_OUTPUT:
            raise ValidationError("Sells are exact-input only")

        if self.direction == TradeDirection.BUY and self.mode == TradeMode.EXACT_OUTPUT:
            if self.max_input is None or self.min_output is not None:
                raise ValidationError("Exact-output buys are bounded by max_input only")
            require_u64(self.max_input, "max_input")
        elif self.direction == TradeDirection.BUY:
            if self.min_output is None:
                raise ValidationError("Exact-input buys are bounded by min_output")
            require_u64(self.min_output, "min_output")
            if self.max_input is not None:
                require_u64(self.max_input, "max_input")
                if self.max_input < self.amount:
                    raise ValidationError(
                        f"SOL cap {self.max_input} is below the budget {self.amount}"
                    )
        else:
            if self.min_output is None or self.max_input is not None:
                raise ValidationError("Sells are bounded by min_output only")
            require_u64(self.min_output, "min_output")

    @classmethod
    def buy_exact_input(
        cls, sol_amount: int, min_tokens: int = 0, max_sol: Optional[int] = None, **kwargs
    ) -> "TradeRequest":
        return cls(
            TradeDirection.BUY,
            TradeMode.EXACT_INPUT,
            sol_amount,
            max_input=max_sol,
            min_output=min_tokens,
            **kwargs,
        )

    @classmethod
    def buy_exact_output(cls, token_amount: int, max_sol: int, **kwargs) -> "TradeRequest":
        return cls(TradeDirection.BUY, TradeMode.EXACT_OUTPUT, token_amount, max_input=max_sol, **kwargs)

    @classmethod
    def sell(cls, token_amount: int, min_sol: int = 0, **kwargs) -> "TradeRequest":
        return cls(TradeDirection.SELL, TradeMode.EXACT_INPUT, token_amount, min_output=min_sol, **kwargs)


@dataclass(frozen=True)
class TradeQuote:
    """
    Result of pricing a trade against a curve.

    Attributes:
        direction: Trade side
        mode: Which side the request fixed
        input_amount: Total paid (SOL incl. fees for buys, tokens for sells)
        raw_input: Amount that enters the curve, before fees
        output_before_fees: Curve output before fee deduction
        fees: Fee per category, in lamports
        output_after_fees: Amount the trader receives
        slippage_bound: Bound written into the instruction
            (max_sol_cost for buys, min_sol_output for sells)
    """

    direction: TradeDirection
    mode: TradeMode
    input_amount: int
    raw_input: int
    output_before_fees: int
    fees: Dict[FeeCategory, int]
    output_after_fees: int
    slippage_bound: int

    @property
    def total_fee(self) -> int:
        return sum(self.fees.values())


def quote_trade(state: BondingCurveState, fees: FeeSchedule, request: TradeRequest) -> TradeQuote:
    """
    Price a trade and enforce its slippage bound.

    Args:
        state: Freshly read curve state
        fees: Fee schedule for the curve
        request: Trade to price

    Returns:
        TradeQuote satisfying the request's bound

    Raises:
        CurveCompleted: If the curve is complete, whatever its reserves
        InsufficientLiquidity: If the curve cannot fill the trade
        ArithmeticOverflow: If an amount leaves the integer domain
        SlippageExceeded: If the quote falls outside the bound
    """
    if state.complete:
        raise CurveCompleted()

    if request.direction == TradeDirection.BUY:
        if request.mode == TradeMode.EXACT_OUTPUT:
            quote = _quote_buy_exact_output(state, fees, request)
        else:
            quote = _quote_buy_exact_input(state, fees, request)
    else:
        quote = _quote_sell(state, fees, request)

    logger.debug(
        f"Quoted {request.direction.value} {request.mode.value}: "
        f"in={quote.input_amount} out={quote.output_after_fees} fee={quote.total_fee}"
    )
    return quote


def _quote_buy_exact_output(
    state: BondingCurveState, fees: FeeSchedule, request: TradeRequest
) -> TradeQuote:
    tokens = request.amount
    if tokens > state.real_token_reserves:
        raise InsufficientLiquidity(
            f"Requested {tokens} tokens, only {state.real_token_reserves} left on the curve"
        )

    raw = curve_input(tokens, state.virtual_sol_reserves, state.virtual_token_reserves)
    fee_breakdown = fees.fees_on(raw)
    total = require_u64(raw + sum(fee_breakdown.values()), "input_amount")

    if total > request.max_input:
        raise SlippageExceeded(
            f"Buy requires {total} lamports, above maximum {request.max_input}",
            bound=request.max_input,
            actual=total,
        )

    return TradeQuote(
        direction=TradeDirection.BUY,
        mode=TradeMode.EXACT_OUTPUT,
        input_amount=total,
        raw_input=raw,
        output_before_fees=tokens,
        fees=fee_breakdown,
        output_after_fees=tokens,
        slippage_bound=request.max_input,
    )


def _quote_buy_exact_input(
    state: BondingCurveState, fees: FeeSchedule, request: TradeRequest
) -> TradeQuote:
    budget = request.amount
    raw = budget * BPS_DENOMINATOR // (BPS_DENOMINATOR + fees.total_rate) - fees.total_flat
    if raw <= 0:
        raise InsufficientLiquidity(f"Budget {budget} does not cover fees")
    if state.real_token_reserves == 0:
        raise InsufficientLiquidity("No tokens left on the curve")

    tokens = curve_output(raw, state.virtual_sol_reserves, state.virtual_token_reserves)
    if tokens > state.real_token_reserves:
        # the program only charges for the tokens it can deliver
        tokens = state.real_token_reserves
        raw = curve_input(tokens, state.virtual_sol_reserves, state.virtual_token_reserves)

    fee_breakdown = fees.fees_on(raw)
    total = raw + sum(fee_breakdown.values())

    if tokens < request.min_output:
        raise SlippageExceeded(
            f"Buy returns {tokens} tokens, below minimum {request.min_output}",
            bound=request.min_output,
            actual=tokens,
        )

    return TradeQuote(
        direction=TradeDirection.BUY,
        mode=TradeMode.EXACT_INPUT,
        input_amount=total,
        raw_input=raw,
        output_before_fees=tokens,
        fees=fee_breakdown,
        output_after_fees=tokens,
        slippage_bound=budget if request.max_input is None else request.max_input,
    )


def _quote_sell(state: BondingCurveState, fees: FeeSchedule, request: TradeRequest) -> TradeQuote:
    tokens = request.amount
    gross = curve_output(tokens, state.virtual_token_reserves, state.virtual_sol_reserves)
    if gross > state.real_sol_reserves:
        raise InsufficientLiquidity(
            f"Sell returns {gross} lamports, curve holds {state.real_sol_reserves}"
        )

    fee_breakdown = fees.fees_on(gross)
    total_fee = sum(fee_breakdown.values())
    if total_fee >= gross:
        raise InsufficientLiquidity(f"Fees {total_fee} consume the whole output {gross}")
    net = gross - total_fee

    if net < request.min_output:
        raise SlippageExceeded(
            f"Sell returns {net} lamports, below minimum {request.min_output}",
            bound=request.min_output,
            actual=net,
        )

    return TradeQuote(
        direction=TradeDirection.SELL,
        mode=TradeMode.EXACT_INPUT,
        input_amount=tokens,
        raw_input=tokens,
        output_before_fees=gross,
        fees=fee_breakdown,
        output_after_fees=net,
        slippage_bound=request.min_output,
    )


def calculate_with_slippage_buy(amount: int, basis_points: int = DEFAULT_SLIPPAGE_BPS) -> int:
    """Upper bound for a payment: amount plus basis_points of it."""
    return amount + amount * basis_points // BPS_DENOMINATOR


def calculate_with_slippage_sell(amount: int, basis_points: int = DEFAULT_SLIPPAGE_BPS) -> int:
    """Lower bound for a receipt: amount less basis_points of it."""
    return max(amount - amount * basis_points // BPS_DENOMINATOR, 0)


def request_with_slippage(
    state: BondingCurveState,
    fees: FeeSchedule,
    direction: TradeDirection,
    mode: TradeMode,
    amount: int,
    slippage_bps: int = DEFAULT_SLIPPAGE_BPS,
    **kwargs,
) -> TradeRequest:
    """
    Build a TradeRequest whose bound tolerates slippage_bps of price movement.

    The current curve is quoted without a bound and the bound is then widened
    by slippage_bps in the caller's disfavor. Exact-input buys get both bounds:
    the token minimum checked here and the SOL cap the program enforces.

    Args:
        state: Freshly read curve state
        fees: Fee schedule for the curve
        direction: Trade side
        mode: Which side the request fixes
        amount: Fixed amount
        slippage_bps: Tolerance in basis points
        **kwargs: priority_fee and track_volume passed through to TradeRequest

    Returns:
        TradeRequest ready for quote_trade and the instruction builders
    """
    if slippage_bps < 0 or slippage_bps >= BPS_DENOMINATOR:
        raise ValidationError(f"Slippage must be in [0, {BPS_DENOMINATOR}) bps, got {slippage_bps}")

    if direction == TradeDirection.BUY and mode == TradeMode.EXACT_OUTPUT:
        loose = TradeRequest(direction, mode, amount, max_input=U64_MAX)
        quote = quote_trade(state, fees, loose)
        max_input = min(calculate_with_slippage_buy(quote.input_amount, slippage_bps), U64_MAX)
        return TradeRequest(direction, mode, amount, max_input=max_input, **kwargs)

    loose = TradeRequest(direction, mode, amount, min_output=0)
    quote = quote_trade(state, fees, loose)
    min_output = calculate_with_slippage_sell(quote.output_after_fees, slippage_bps)
    if direction == TradeDirection.BUY:
        # the quoted tokens may cost more by the time the program prices them
        max_input = min(calculate_with_slippage_buy(amount, slippage_bps), U64_MAX)
        return TradeRequest(
            direction, mode, amount, max_input=max_input, min_output=min_output, **kwargs
        )
    return TradeRequest(direction, mode, amount, min_output=min_output, **kwargs)
