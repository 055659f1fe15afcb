"""
Bonding-curve pricing: constant-product math and the quote/slippage engine.
"""

from .math import (
    buy_out_price,
    checked_add,
    checked_mul,
    curve_input,
    curve_output,
    initial_buy_tokens,
    market_cap_sol,
)
from .quote import (
    FeeSchedule,
    PriorityFee,
    TradeQuote,
    TradeRequest,
    calculate_with_slippage_buy,
    calculate_with_slippage_sell,
    quote_trade,
    request_with_slippage,
)

__all__ = [
    "FeeSchedule",
    "PriorityFee",
    "TradeQuote",
    "TradeRequest",
    "buy_out_price",
    "calculate_with_slippage_buy",
    "calculate_with_slippage_sell",
    "checked_add",
    "checked_mul",
    "curve_input",
    "curve_output",
    "initial_buy_tokens",
    "market_cap_sol",
    "quote_trade",
    "request_with_slippage",
]
