"""
Solana websocket log transport.

Adapts solana-py's websocket client to the LogTransport protocol: one
connection per subscription, notifications converted to LogNotification.
"""

import logging
from collections import deque
from typing import Deque, Optional

from solana.rpc.websocket_api import SolanaWsClientProtocol, connect
from solders.pubkey import Pubkey
from solders.rpc.config import RpcTransactionLogsFilterMentions
from solders.rpc.responses import LogsNotification, SubscriptionResult
from websockets.exceptions import WebSocketException

from ..constants import Commitment
from ..events.decoder import LogNotification
from ..exceptions import TransportError

logger = logging.getLogger(__name__)


class SolanaLogStream:
    """An open logsSubscribe subscription on its own websocket connection."""

    def __init__(self, websocket: SolanaWsClientProtocol, subscription_id: int, endpoint: str):
        self._websocket = websocket
        self.subscription_id = subscription_id
        self.endpoint = endpoint
        self._pending: Deque[LogNotification] = deque()
        self._closed = False

    def __aiter__(self) -> "SolanaLogStream":
        return self

    async def __anext__(self) -> LogNotification:
        while not self._pending:
            if self._closed:
                raise StopAsyncIteration
            try:
                messages = await self._websocket.recv()
            except (WebSocketException, OSError) as e:
                if self._closed:
                    raise StopAsyncIteration
                raise TransportError(
                    f"Websocket receive failed: {e}", endpoint=self.endpoint
                ) from e

            for message in messages:
                if isinstance(message, LogsNotification):
                    self._pending.append(_to_notification(message))

        return self._pending.popleft()

    async def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._websocket.logs_unsubscribe(self.subscription_id)
        except (WebSocketException, OSError) as e:
            logger.debug(f"logsUnsubscribe failed on {self.endpoint}: {e}")
        finally:
            await self._websocket.close()
        logger.debug(f"Unsubscribed {self.subscription_id} on {self.endpoint}")


def _to_notification(message: LogsNotification) -> LogNotification:
    value = message.result.value
    return LogNotification(
        signature=str(value.signature),
        logs=list(value.logs),
        err=value.err,
        slot=message.result.context.slot,
    )


class SolanaLogTransport:
    """LogTransport backed by a Solana websocket endpoint."""

    def __init__(self, ws_url: str):
        self.ws_url = ws_url

    async def subscribe(self, mentions: Pubkey, commitment: Commitment) -> SolanaLogStream:
        """
        Open a logsSubscribe subscription for transactions mentioning an address.

        Raises:
            TransportError: If the connection or the subscription request fails
        """
        websocket: Optional[SolanaWsClientProtocol] = None
        try:
            websocket = await connect(self.ws_url)
            await websocket.logs_subscribe(
                RpcTransactionLogsFilterMentions(mentions), commitment=commitment.value
            )
            response = await websocket.recv()
        except (WebSocketException, OSError) as e:
            if websocket is not None:
                await websocket.close()
            raise TransportError(
                f"Failed to subscribe to logs: {e}", endpoint=self.ws_url
            ) from e

        subscription = next((m for m in response if isinstance(m, SubscriptionResult)), None)
        if subscription is None:
            await websocket.close()
            raise TransportError(
                f"Unexpected subscription response: {response}", endpoint=self.ws_url
            )

        logger.info(f"logsSubscribe {subscription.result} for {mentions} on {self.ws_url}")
        return SolanaLogStream(websocket, subscription.result, self.ws_url)
