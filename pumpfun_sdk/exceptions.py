"""
Exception hierarchy for the pump.fun SDK.

Pricing and decoding errors are raised to the immediate caller. A
FrameDecodeError is scoped to one frame and a TransportError to one
subscription session; neither is retried by the SDK.
"""

from typing import Any, Dict, Optional


class PumpFunError(Exception):
    """Base exception for all pump.fun SDK errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(PumpFunError):
    """Raised when there are configuration-related issues."""

    pass


class ValidationError(PumpFunError):
    """Raised when a request or configuration value is inconsistent."""

    pass


class ArithmeticOverflow(PumpFunError):
    """Raised when an amount or intermediate product leaves the integer domain."""

    def __init__(
        self,
        message: str,
        value: Optional[int] = None,
        limit: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.value = value
        self.limit = limit


class InsufficientLiquidity(PumpFunError):
    """Raised when the curve cannot produce a positive amount for a trade."""

    pass


class CurveCompleted(PumpFunError):
    """Raised when a quote is requested against a finalized bonding curve."""

    def __init__(
        self,
        message: str = "Bonding curve is complete",
        mint: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.mint = mint


class SlippageExceeded(PumpFunError):
    """Raised when a quote falls outside the caller's slippage bound."""

    def __init__(
        self,
        message: str,
        bound: Optional[int] = None,
        actual: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.bound = bound
        self.actual = actual


class InvalidAccountData(PumpFunError):
    """Raised when raw account bytes do not match the expected layout."""

    def __init__(
        self,
        message: str,
        account_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.account_type = account_type


class FrameDecodeError(PumpFunError):
    """Raised when a single program-data frame cannot be decoded."""

    def __init__(
        self,
        message: str,
        signature: Optional[str] = None,
        event_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.signature = signature
        self.event_type = event_type


class TransportError(PumpFunError):
    """Raised when the RPC or log-stream transport fails."""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
