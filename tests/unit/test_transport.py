"""Tests for the websocket log transport."""

from unittest.mock import AsyncMock, patch

import pytest
from solders.rpc.responses import LogsNotification, SubscriptionResult

from pumpfun_sdk.constants import Commitment
from pumpfun_sdk.exceptions import TransportError
from pumpfun_sdk.stream.transport import SolanaLogStream, SolanaLogTransport

from helpers.fake_chain import MINT

WS_URL = "ws://localhost:8900"
SIGNATURE = (
    "5h6xBEauJ3PK6SWCZ1PGjBvj8vDdWG3KpwATGy1ARAXFSDwt8GFXM7W5Ncn16wmqokgpiKRLuS83KUxyZyv2sUYv"
)

LOGS_NOTIFICATION = (
    '{"jsonrpc": "2.0", "method": "logsNotification", "params": {"result": '
    '{"context": {"slot": 5208469}, "value": {"signature": "' + SIGNATURE + '", '
    '"err": null, "logs": ["Program log: one", "Program log: two"]}}, '
    '"subscription": 24040}}'
)


def logs_notification():
    return LogsNotification.from_json(LOGS_NOTIFICATION)


def subscription_result(subscription_id=24040):
    return SubscriptionResult.from_json(
        '{"jsonrpc": "2.0", "result": %d, "id": 1}' % subscription_id
    )


class DummyWebSocket:
    """Minimal stand-in for solana-py's websocket protocol."""

    def __init__(self, *batches):
        self._batches = list(batches)
        self.logs_subscribe = AsyncMock()
        self.logs_unsubscribe = AsyncMock()
        self.close = AsyncMock()

    async def recv(self):
        if not self._batches:
            raise OSError("connection closed")
        batch = self._batches.pop(0)
        if isinstance(batch, BaseException):
            raise batch
        return batch


class TestSolanaLogStream:
    @pytest.mark.asyncio
    async def test_yields_notifications(self):
        websocket = DummyWebSocket([logs_notification(), subscription_result()], [logs_notification()])
        stream = SolanaLogStream(websocket, 24040, WS_URL)

        first = await stream.__anext__()
        assert first.signature == SIGNATURE
        assert first.logs == ["Program log: one", "Program log: two"]
        assert first.err is None
        assert first.slot == 5208469
        assert (await stream.__anext__()).signature == SIGNATURE

    @pytest.mark.asyncio
    async def test_receive_failure_is_transport_error(self):
        stream = SolanaLogStream(DummyWebSocket(OSError("reset")), 1, WS_URL)
        with pytest.raises(TransportError) as exc_info:
            await stream.__anext__()
        assert exc_info.value.endpoint == WS_URL

    @pytest.mark.asyncio
    async def test_unsubscribe_once(self):
        websocket = DummyWebSocket()
        stream = SolanaLogStream(websocket, 7, WS_URL)

        await stream.unsubscribe()
        await stream.unsubscribe()

        websocket.logs_unsubscribe.assert_awaited_once_with(7)
        websocket.close.assert_awaited_once()
        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()

    @pytest.mark.asyncio
    async def test_unsubscribe_closes_even_on_failure(self):
        websocket = DummyWebSocket()
        websocket.logs_unsubscribe.side_effect = OSError("gone")
        await SolanaLogStream(websocket, 7, WS_URL).unsubscribe()
        websocket.close.assert_awaited_once()


class TestSolanaLogTransport:
    @pytest.mark.asyncio
    async def test_subscribe(self):
        websocket = DummyWebSocket([subscription_result(99)])
        with patch(
            "pumpfun_sdk.stream.transport.connect", AsyncMock(return_value=websocket)
        ) as connect:
            stream = await SolanaLogTransport(WS_URL).subscribe(MINT, Commitment.PROCESSED)

        connect.assert_awaited_once_with(WS_URL)
        args, kwargs = websocket.logs_subscribe.call_args
        assert kwargs["commitment"] == "processed"
        assert stream.subscription_id == 99

    @pytest.mark.asyncio
    async def test_connect_failure(self):
        with patch(
            "pumpfun_sdk.stream.transport.connect", AsyncMock(side_effect=OSError("refused"))
        ):
            with pytest.raises(TransportError, match="Failed to subscribe"):
                await SolanaLogTransport(WS_URL).subscribe(MINT, Commitment.CONFIRMED)

    @pytest.mark.asyncio
    async def test_unexpected_subscription_response(self):
        websocket = DummyWebSocket([logs_notification()])
        with patch("pumpfun_sdk.stream.transport.connect", AsyncMock(return_value=websocket)):
            with pytest.raises(TransportError, match="Unexpected subscription response"):
                await SolanaLogTransport(WS_URL).subscribe(MINT, Commitment.CONFIRMED)
        websocket.close.assert_awaited_once()
