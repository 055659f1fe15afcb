"""
Event frame decoder.

A frame is one "Program data: <base64>" log line emitted by the program. The
first 8 bytes select the event layout from a fixed table; the remainder must
decode exactly. Failures are confined to the frame that caused them.
"""

import base64
import binascii
import logging
from dataclasses import dataclass, fields
from typing import Any, Iterator, List, Optional, Sequence, Union

from construct import ConstructError
from solders.pubkey import Pubkey

from ..constants import (
    COMPLETE_EVENT_DISCRIMINATOR,
    CREATE_EVENT_DISCRIMINATOR,
    DISCRIMINATOR_SIZE,
    PROGRAM_DATA_PREFIX,
    PUMPFUN_PROGRAM_ID,
    SET_PARAMS_EVENT_DISCRIMINATOR,
    TRADE_EVENT_DISCRIMINATOR,
    UNHANDLED_EVENT_DISCRIMINATORS,
)
from ..exceptions import FrameDecodeError
from ..layouts import (
    COMPLETE_EVENT_LAYOUT,
    CREATE_EVENT_LAYOUT,
    SET_PARAMS_EVENT_LAYOUT,
    TRADE_EVENT_LAYOUT,
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

logger = logging.getLogger(__name__)

# discriminator -> (layout, event class)
EVENT_TABLE = {
    CREATE_EVENT_DISCRIMINATOR: (CREATE_EVENT_LAYOUT, CreateEvent),
    TRADE_EVENT_DISCRIMINATOR: (TRADE_EVENT_LAYOUT, TradeEvent),
    COMPLETE_EVENT_DISCRIMINATOR: (COMPLETE_EVENT_LAYOUT, CompleteEvent),
    SET_PARAMS_EVENT_DISCRIMINATOR: (SET_PARAMS_EVENT_LAYOUT, SetParamsEvent),
}


@dataclass(frozen=True)
class LogNotification:
    """
    One transaction's log output as delivered by a log stream.

    Attributes:
        signature: Transaction signature
        logs: Log lines in program order
        err: Transaction error, None when it succeeded
        slot: Slot the notification was observed at, when known
    """

    signature: str
    logs: Sequence[str]
    err: Any = None
    slot: Optional[int] = None

    @property
    def failed(self) -> bool:
        return self.err is not None


@dataclass(frozen=True)
class RawFrame:
    """Base64 program data from one log line, with its origin."""

    signature: str
    data: str
    index: int


@dataclass(frozen=True)
class DecodeOutcome:
    """Result of decoding one frame: an event or the error it produced."""

    signature: str
    event: Optional[DomainEvent] = None
    error: Optional[FrameDecodeError] = None


def _event_from_container(cls, parsed):
    values = {}
    for f in fields(cls):
        value = parsed[f.name]
        if isinstance(value, list):
            value = tuple(value)
        values[f.name] = value
    return cls(**values)


def decode_frame(signature: Optional[str], data: Union[str, bytes]) -> DomainEvent:
    """
    Decode a single program-data frame into a domain event.

    Args:
        signature: Transaction the frame came from, attached to any error
        data: Base64 text from the log line, or the already decoded bytes

    Returns:
        The matching event; UnhandledEvent for known pump.fun events without a
        layout here, UnknownEvent for unrecognized discriminators

    Raises:
        FrameDecodeError: If the frame is not valid base64, is shorter than a
            discriminator, or does not match the layout of its discriminator
    """
    if isinstance(data, str):
        try:
            raw = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise FrameDecodeError(f"Invalid base64 frame: {e}", signature=signature) from e
    else:
        raw = bytes(data)

    if len(raw) < DISCRIMINATOR_SIZE:
        raise FrameDecodeError(
            f"Frame too short: {len(raw)} bytes",
            signature=signature,
            details={"length": len(raw)},
        )

    discriminator = raw[:DISCRIMINATOR_SIZE]
    payload = raw[DISCRIMINATOR_SIZE:]

    entry = EVENT_TABLE.get(discriminator)
    if entry is None:
        if discriminator in UNHANDLED_EVENT_DISCRIMINATORS:
            return UnhandledEvent(discriminator=discriminator, payload=payload)
        logger.debug(f"Unknown event discriminator {discriminator.hex()} in {signature}")
        return UnknownEvent(raw=raw)

    layout, cls = entry
    try:
        parsed = layout.parse(payload)
    except (ConstructError, UnicodeDecodeError) as e:
        raise FrameDecodeError(
            f"Malformed {cls.__name__} payload: {e}",
            signature=signature,
            event_type=cls.__name__,
            details={"length": len(payload)},
        ) from e

    return _event_from_container(cls, parsed)


def extract_frames(
    notification: LogNotification, program_id: Pubkey = PUMPFUN_PROGRAM_ID
) -> Iterator[RawFrame]:
    """
    Yield the program-data frames emitted by program_id.

    Tracks the invoke stack from "Program <id> invoke [n]" and
    "Program <id> success|failed" lines so that data logged by other programs
    in the same transaction is filtered out before decoding.
    """
    target = str(program_id)
    stack: List[str] = []
    index = 0

    for line in notification.logs:
        if line.startswith(PROGRAM_DATA_PREFIX):
            if stack and stack[-1] == target:
                yield RawFrame(
                    signature=notification.signature,
                    data=line[len(PROGRAM_DATA_PREFIX):].strip(),
                    index=index,
                )
                index += 1
            continue

        parts = line.split(" ")
        if len(parts) >= 3 and parts[0] == "Program" and not parts[1].endswith(":"):
            if parts[2] == "invoke":
                stack.append(parts[1])
            elif parts[2] in ("success", "failed:", "failed") and stack:
                stack.pop()


def decode_transaction_logs(
    signature: str,
    logs: Sequence[str],
    program_id: Pubkey = PUMPFUN_PROGRAM_ID,
) -> List[DecodeOutcome]:
    """
    Decode every program frame in a transaction's log output.

    Used to re-decode events for a signature fetched over RPC. A malformed frame
    yields an outcome carrying its error; the remaining frames still decode.
    """
    outcomes = []
    notification = LogNotification(signature=signature, logs=logs)
    for frame in extract_frames(notification, program_id):
        try:
            outcomes.append(DecodeOutcome(signature, event=decode_frame(signature, frame.data)))
        except FrameDecodeError as e:
            logger.warning(f"Skipping malformed frame {frame.index} in {signature}: {e}")
            outcomes.append(DecodeOutcome(signature, error=e))
    return outcomes
