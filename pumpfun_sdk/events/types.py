"""
Domain events emitted by the pump.fun program.

Each event is an immutable dataclass produced only by the frame decoder.
DomainEvent is the closed union of every variant, including the two arms that
carry undecoded payloads.
"""

from dataclasses import dataclass
from typing import Tuple, Union

from solders.pubkey import Pubkey

from ..constants import DISCRIMINATOR_SIZE


@dataclass(frozen=True)
class CreateEvent:
    """A new token and its bonding curve were created."""

    name: str
    symbol: str
    uri: str
    mint: Pubkey
    bonding_curve: Pubkey
    user: Pubkey
    creator: Pubkey
    timestamp: int
    virtual_token_reserves: int
    virtual_sol_reserves: int
    real_token_reserves: int
    token_total_supply: int


@dataclass(frozen=True)
class TradeEvent:
    """A buy or sell against a bonding curve, with the resulting reserves."""

    mint: Pubkey
    sol_amount: int
    token_amount: int
    is_buy: bool
    user: Pubkey
    timestamp: int
    virtual_sol_reserves: int
    virtual_token_reserves: int
    real_sol_reserves: int
    real_token_reserves: int
    fee_recipient: Pubkey
    fee_basis_points: int
    fee: int
    creator: Pubkey
    creator_fee_basis_points: int
    creator_fee: int
    track_volume: bool
    total_unclaimed_tokens: int
    total_claimed_tokens: int
    current_sol_volume: int
    last_update_timestamp: int


@dataclass(frozen=True)
class CompleteEvent:
    """A bonding curve sold out and is now complete."""

    user: Pubkey
    mint: Pubkey
    bonding_curve: Pubkey
    timestamp: int


@dataclass(frozen=True)
class SetParamsEvent:
    """The program's global parameters were updated."""

    initial_virtual_token_reserves: int
    initial_virtual_sol_reserves: int
    initial_real_token_reserves: int
    final_real_sol_reserves: int
    token_total_supply: int
    fee_basis_points: int
    withdraw_authority: Pubkey
    enable_migrate: bool
    pool_migration_fee: int
    creator_fee_basis_points: int
    fee_recipients: Tuple[Pubkey, ...]
    timestamp: int
    set_creator_authority: Pubkey
    admin_set_creator_authority: Pubkey


@dataclass(frozen=True)
class UnhandledEvent:
    """A known pump.fun event this library does not decode."""

    discriminator: bytes
    payload: bytes


@dataclass(frozen=True)
class UnknownEvent:
    """An event with an unrecognized discriminator, kept byte-for-byte."""

    raw: bytes

    @property
    def discriminator(self) -> bytes:
        return self.raw[:DISCRIMINATOR_SIZE]


DomainEvent = Union[
    CreateEvent,
    TradeEvent,
    CompleteEvent,
    SetParamsEvent,
    UnhandledEvent,
    UnknownEvent,
]
