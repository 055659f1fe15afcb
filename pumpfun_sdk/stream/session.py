"""
Subscription session: one log subscription and its dispatch loop.

The session owns the transport subscription from start() until teardown and
moves through CREATED -> ACTIVE -> CLOSING -> CLOSED, or ACTIVE -> ERRORED when
the transport fails. Notifications are decoded and dispatched one at a time in
transport order.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Union

from solders.pubkey import Pubkey

from ..constants import (
    DEFAULT_CONFIG,
    PUMPFUN_PROGRAM_ID,
    BackpressurePolicy,
    Commitment,
    SessionState,
)
from ..events.decoder import LogNotification, decode_frame, extract_frames
from ..events.types import DomainEvent
from ..exceptions import FrameDecodeError, PumpFunError, TransportError, ValidationError
from ..interfaces import LogStream, LogTransport

logger = logging.getLogger(__name__)

EventHandler = Callable[
    [
        Optional[str],
        Optional[DomainEvent],
        Optional[PumpFunError],
        Optional[LogNotification],
    ],
    Union[None, Awaitable[None]],
]


@dataclass(frozen=True)
class _EndOfStream:
    error: Optional[TransportError] = None


class SubscriptionSession:
    """
    A single log subscription with decode-and-dispatch.

    The handler is called as handler(signature, event, error, notification) and
    may be a plain function or a coroutine function. For each frame exactly one
    of event and error is set. A transport failure is reported once with
    signature None and a TransportError.

    Use as an async context manager so the subscription is released on every
    exit path:

        async with SubscriptionSession(transport, handler) as session:
            await session.wait_closed()
    """

    def __init__(
        self,
        transport: LogTransport,
        handler: EventHandler,
        program_id: Pubkey = PUMPFUN_PROGRAM_ID,
        mentions: Optional[Pubkey] = None,
        commitment: Commitment = Commitment.CONFIRMED,
        backpressure: BackpressurePolicy = BackpressurePolicy.BLOCK,
        buffer_size: int = DEFAULT_CONFIG["SESSION_BUFFER_SIZE"],
        include_failed: bool = False,
    ):
        if buffer_size <= 0:
            raise ValidationError(f"buffer_size must be positive, got {buffer_size}")

        self.transport = transport
        self.handler = handler
        self.program_id = program_id
        self.mentions = mentions or program_id
        self.commitment = commitment
        self.backpressure = backpressure
        self.buffer_size = buffer_size
        self.include_failed = include_failed

        self.dropped_notifications = 0
        self._state = SessionState.CREATED
        self._stream: Optional[LogStream] = None
        self._run_task: Optional[asyncio.Task] = None
        self._reader_task: Optional[asyncio.Task] = None
        self._release_task: Optional[asyncio.Future] = None
        self._dispatching = False

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state == SessionState.ACTIVE

    async def start(self) -> None:
        """
        Open the transport subscription and begin dispatching.

        Raises:
            ValidationError: If the session was already started
            TransportError: If the subscription cannot be established
        """
        if self._state != SessionState.CREATED:
            raise ValidationError(f"Session cannot start from state {self._state.value}")

        try:
            self._stream = await self.transport.subscribe(self.mentions, self.commitment)
        except TransportError:
            self._state = SessionState.ERRORED
            raise

        if self._state != SessionState.CREATED:
            # cancelled while subscribing
            await self._release()
            return

        self._state = SessionState.ACTIVE
        self._run_task = asyncio.create_task(self._run())
        self._run_task.add_done_callback(self._on_run_done)
        logger.info(
            f"Subscribed to logs mentioning {self.mentions} "
            f"({self.commitment.value}, {self.backpressure.value})"
        )

    def cancel(self) -> None:
        """
        Request cancellation. Synchronous and idempotent.

        Nothing is dispatched after this returns; a handler call already in
        progress runs to completion before the subscription is released.
        """
        if self._state == SessionState.CREATED:
            self._state = SessionState.CLOSED
            return
        if self._state != SessionState.ACTIVE:
            return

        self._state = SessionState.CLOSING
        logger.debug(f"Cancelling subscription for {self.mentions}")
        if self._reader_task is not None:
            self._reader_task.cancel()
        if self._run_task is not None and not self._dispatching:
            self._run_task.cancel()

    async def close(self) -> None:
        """Cancel and wait until the subscription is released."""
        self.cancel()
        await self.wait_closed()

    async def wait_closed(self) -> None:
        """Wait until the session reaches CLOSED or ERRORED."""
        if asyncio.current_task() is self._run_task:
            # called from a handler; the run task releases once it returns
            return
        if self._run_task is not None:
            await asyncio.wait([self._run_task])
        if self._release_task is not None:
            await self._release_task
        await self._release()

    async def __aenter__(self) -> "SubscriptionSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _run(self) -> None:
        try:
            if self.backpressure == BackpressurePolicy.DROP:
                await self._pump_buffered()
            else:
                await self._pump_inline()
        except TransportError as e:
            await self._fail(e)
        except Exception as e:
            await self._fail(TransportError(f"Log stream failed: {e}", details={"error": repr(e)}))
        finally:
            await self._release()

    async def _pump_inline(self) -> None:
        async for notification in self._stream:
            if self._state != SessionState.ACTIVE:
                return
            await self._dispatch_notification(notification)
            if self._state != SessionState.ACTIVE:
                return

        if self._state == SessionState.ACTIVE:
            raise TransportError("Log stream ended unexpectedly")

    async def _pump_buffered(self) -> None:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.buffer_size)
        self._reader_task = asyncio.create_task(self._read_into(queue))
        try:
            while self._state == SessionState.ACTIVE:
                item = await queue.get()
                if isinstance(item, _EndOfStream):
                    if self._state != SessionState.ACTIVE:
                        return
                    raise item.error or TransportError("Log stream ended unexpectedly")
                if self._state != SessionState.ACTIVE:
                    return
                await self._dispatch_notification(item)
        finally:
            self._reader_task.cancel()
            await asyncio.wait([self._reader_task])

    async def _read_into(self, queue: asyncio.Queue) -> None:
        try:
            async for notification in self._stream:
                if self._state != SessionState.ACTIVE:
                    return
                try:
                    queue.put_nowait(notification)
                except asyncio.QueueFull:
                    self.dropped_notifications += 1
                    logger.warning(
                        f"Handler behind, dropped notification {notification.signature} "
                        f"({self.dropped_notifications} dropped)"
                    )
            end = _EndOfStream()
        except TransportError as e:
            end = _EndOfStream(e)
        except Exception as e:
            end = _EndOfStream(TransportError(f"Log stream failed: {e}", details={"error": repr(e)}))
        await queue.put(end)

    async def _dispatch_notification(self, notification: LogNotification) -> None:
        if notification.failed and not self.include_failed:
            logger.debug(f"Skipping failed transaction {notification.signature}")
            return

        for frame in extract_frames(notification, self.program_id):
            if self._state != SessionState.ACTIVE:
                return
            try:
                event, error = decode_frame(frame.signature, frame.data), None
            except FrameDecodeError as e:
                logger.warning(f"Failed to decode frame {frame.index} of {frame.signature}: {e}")
                event, error = None, e
            await self._invoke(frame.signature, event, error, notification)

    async def _invoke(self, signature, event, error, notification) -> None:
        self._dispatching = True
        try:
            result = self.handler(signature, event, error, notification)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Event handler failed for {signature}: {e}", exc_info=True)
        finally:
            self._dispatching = False

    async def _fail(self, error: TransportError) -> None:
        if self._state != SessionState.ACTIVE:
            logger.debug(f"Ignoring transport error during teardown: {error}")
            return

        self._state = SessionState.ERRORED
        logger.error(f"Subscription for {self.mentions} failed: {error}")
        await self._invoke(None, None, error, None)

    def _on_run_done(self, task: asyncio.Task) -> None:
        # a run task cancelled before its first step never reaches its finally
        if self._stream is not None:
            self._release_task = asyncio.ensure_future(self._release())

    async def _release(self) -> None:
        stream, self._stream = self._stream, None
        if stream is not None:
            try:
                await stream.unsubscribe()
            except Exception as e:
                logger.warning(f"Unsubscribe failed for {self.mentions}: {e}")

        if self._state == SessionState.CLOSING:
            self._state = SessionState.CLOSED
            logger.info(f"Subscription for {self.mentions} closed")
