"""
Typed pump.fun events and the program-data frame decoder.
"""

from .decoder import (
    DecodeOutcome,
    LogNotification,
    RawFrame,
    decode_frame,
    decode_transaction_logs,
    extract_frames,
)
from .types import (
    CompleteEvent,
    CreateEvent,
    DomainEvent,
    SetParamsEvent,
    TradeEvent,
    UnhandledEvent,
    UnknownEvent,
)

__all__ = [
    "CompleteEvent",
    "CreateEvent",
    "DecodeOutcome",
    "DomainEvent",
    "LogNotification",
    "RawFrame",
    "SetParamsEvent",
    "TradeEvent",
    "UnhandledEvent",
    "UnknownEvent",
    "decode_frame",
    "decode_transaction_logs",
    "extract_frames",
]
