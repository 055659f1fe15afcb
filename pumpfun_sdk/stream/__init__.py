"""
Log subscription sessions and the Solana websocket transport.
"""

from .session import EventHandler, SubscriptionSession
from .transport import SolanaLogStream, SolanaLogTransport

__all__ = ["EventHandler", "SolanaLogStream", "SolanaLogTransport", "SubscriptionSession"]
