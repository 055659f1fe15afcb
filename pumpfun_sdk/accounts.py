"""
Account state views for the pump.fun program.

Deserializes raw account bytes into immutable state objects. Nothing is cached
here: reserves change with every trade, so callers refetch before each quote.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

from construct import ConstructError, Container
from solders.pubkey import Pubkey

from .constants import BONDING_CURVE_DISCRIMINATOR, GLOBAL_DISCRIMINATOR
from .exceptions import InvalidAccountData
from .layouts import BONDING_CURVE_LAYOUT, BONDING_CURVE_SIZE, GLOBAL_LAYOUT, GLOBAL_SIZE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BondingCurveState:
    """Live reserves of one token's bonding curve."""

    virtual_token_reserves: int
    virtual_sol_reserves: int
    real_token_reserves: int
    real_sol_reserves: int
    token_total_supply: int
    complete: bool
    creator: Pubkey

    @property
    def is_active(self) -> bool:
        return (
            not self.complete
            and self.virtual_token_reserves > 0
            and self.virtual_sol_reserves > 0
        )


@dataclass(frozen=True)
class GlobalAccountState:
    """Program-wide configuration stored in the global account."""

    initialized: bool
    authority: Pubkey
    fee_recipient: Pubkey
    initial_virtual_token_reserves: int
    initial_virtual_sol_reserves: int
    initial_real_token_reserves: int
    token_total_supply: int
    fee_basis_points: int
    withdraw_authority: Pubkey
    enable_migrate: bool
    pool_migration_fee: int
    creator_fee_basis_points: int
    fee_recipients: Tuple[Pubkey, ...]
    set_creator_authority: Pubkey

    def initial_curve(self, creator: Pubkey) -> BondingCurveState:
        """
        Curve state a freshly created token starts from.

        Used to quote the creator's initial buy before the bonding curve
        account exists on chain.
        """
        return BondingCurveState(
            virtual_token_reserves=self.initial_virtual_token_reserves,
            virtual_sol_reserves=self.initial_virtual_sol_reserves,
            real_token_reserves=self.initial_real_token_reserves,
            real_sol_reserves=0,
            token_total_supply=self.token_total_supply,
            complete=False,
            creator=creator,
        )


def _parse(layout, data: bytes, size: int, discriminator: bytes, account_type: str) -> Container:
    if data is None:
        raise InvalidAccountData(f"{account_type} account not found", account_type=account_type)

    data = bytes(data)
    if len(data) < size:
        raise InvalidAccountData(
            f"{account_type} account too short: {len(data)} bytes, expected at least {size}",
            account_type=account_type,
            details={"length": len(data), "expected": size},
        )

    if data[: len(discriminator)] != discriminator:
        raise InvalidAccountData(
            f"{account_type} discriminator mismatch: {data[:len(discriminator)].hex()}",
            account_type=account_type,
            details={"expected": discriminator.hex()},
        )

    try:
        return layout.parse(data[:size])
    except ConstructError as e:
        raise InvalidAccountData(
            f"Failed to decode {account_type} account: {e}", account_type=account_type
        ) from e


def decode_bonding_curve(data: bytes) -> BondingCurveState:
    """
    Decode a bonding curve account.

    Args:
        data: Raw account bytes, including the 8-byte discriminator

    Returns:
        BondingCurveState with the decoded reserves

    Raises:
        InvalidAccountData: If the data is too short, has the wrong discriminator
            or contains invalid field encodings
    """
    parsed = _parse(
        BONDING_CURVE_LAYOUT,
        data,
        BONDING_CURVE_SIZE,
        BONDING_CURVE_DISCRIMINATOR,
        "BondingCurve",
    )
    state = BondingCurveState(
        virtual_token_reserves=parsed.virtual_token_reserves,
        virtual_sol_reserves=parsed.virtual_sol_reserves,
        real_token_reserves=parsed.real_token_reserves,
        real_sol_reserves=parsed.real_sol_reserves,
        token_total_supply=parsed.token_total_supply,
        complete=parsed.complete,
        creator=parsed.creator,
    )
    logger.debug(
        f"Decoded bonding curve: vsol={state.virtual_sol_reserves} "
        f"vtok={state.virtual_token_reserves} complete={state.complete}"
    )
    return state


def decode_global_account(data: bytes) -> GlobalAccountState:
    """
    Decode the program's global account.

    Args:
        data: Raw account bytes, including the 8-byte discriminator

    Returns:
        GlobalAccountState

    Raises:
        InvalidAccountData: If the bytes do not match the global layout
    """
    parsed = _parse(GLOBAL_LAYOUT, data, GLOBAL_SIZE, GLOBAL_DISCRIMINATOR, "Global")
    return GlobalAccountState(
        initialized=parsed.initialized,
        authority=parsed.authority,
        fee_recipient=parsed.fee_recipient,
        initial_virtual_token_reserves=parsed.initial_virtual_token_reserves,
        initial_virtual_sol_reserves=parsed.initial_virtual_sol_reserves,
        initial_real_token_reserves=parsed.initial_real_token_reserves,
        token_total_supply=parsed.token_total_supply,
        fee_basis_points=parsed.fee_basis_points,
        withdraw_authority=parsed.withdraw_authority,
        enable_migrate=parsed.enable_migrate,
        pool_migration_fee=parsed.pool_migration_fee,
        creator_fee_basis_points=parsed.creator_fee_basis_points,
        fee_recipients=tuple(parsed.fee_recipients),
        set_creator_authority=parsed.set_creator_authority,
    )
