"""
pump.fun SDK.

Client library for the pump.fun bonding-curve program on Solana: curve pricing
and slippage checks, account decoding, instruction building, and typed event
streams from program logs.
"""

PROJECT_NAME = "pumpfun-sdk"
from pumpfun_sdk.version import __version__ as VERSION  # noqa: E402

# Export main components for easier imports
from pumpfun_sdk.accounts import (
    BondingCurveState,
    GlobalAccountState,
    decode_bonding_curve,
    decode_global_account,
)
from pumpfun_sdk.client import PumpFunClient
from pumpfun_sdk.constants import (
    BackpressurePolicy,
    Commitment,
    FeeCategory,
    SessionState,
    TradeDirection,
    TradeMode,
)
from pumpfun_sdk.curve import (
    FeeSchedule,
    PriorityFee,
    TradeQuote,
    TradeRequest,
    quote_trade,
    request_with_slippage,
)
from pumpfun_sdk.events import (
    CompleteEvent,
    CreateEvent,
    DomainEvent,
    SetParamsEvent,
    TradeEvent,
    UnhandledEvent,
    UnknownEvent,
    decode_frame,
)
from pumpfun_sdk.exceptions import (
    ArithmeticOverflow,
    CurveCompleted,
    FrameDecodeError,
    InsufficientLiquidity,
    InvalidAccountData,
    PumpFunError,
    SlippageExceeded,
    TransportError,
)
from pumpfun_sdk.stream import SubscriptionSession

__all__ = [
    "PROJECT_NAME",
    "VERSION",
    "ArithmeticOverflow",
    "BackpressurePolicy",
    "BondingCurveState",
    "Commitment",
    "CompleteEvent",
    "CreateEvent",
    "CurveCompleted",
    "DomainEvent",
    "FeeCategory",
    "FeeSchedule",
    "FrameDecodeError",
    "GlobalAccountState",
    "InsufficientLiquidity",
    "InvalidAccountData",
    "PriorityFee",
    "PumpFunClient",
    "PumpFunError",
    "SessionState",
    "SetParamsEvent",
    "SlippageExceeded",
    "SubscriptionSession",
    "TradeDirection",
    "TradeEvent",
    "TradeMode",
    "TradeQuote",
    "TradeRequest",
    "TransportError",
    "UnhandledEvent",
    "UnknownEvent",
    "decode_bonding_curve",
    "decode_frame",
    "decode_global_account",
    "quote_trade",
    "request_with_slippage",
]
