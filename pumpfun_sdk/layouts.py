"""
Binary layouts of the pump.fun program.

Every account, event and instruction-argument layout the SDK reads or writes is
declared here as an explicit Borsh schema (field order, width, little-endian).
A program upgrade that reorders or adds fields is handled by editing this table;
decoders and builders only refer to the layout names.
"""

from construct import (
    Adapter,
    Array,
    Bytes,
    If,
    Int8ul,
    Int32ul,
    Int64sl,
    Int64ul,
    PascalString,
    Struct,
    Terminated,
    ValidationError,
    this,
)
from solders.pubkey import Pubkey

from .constants import DISCRIMINATOR_SIZE


class BorshBool(Adapter):
    """Borsh bool: one byte that must be 0 or 1."""

    def __init__(self):
        super().__init__(Int8ul)

    def _decode(self, obj, context, path):
        if obj not in (0, 1):
            raise ValidationError(f"invalid bool byte {obj}", path=path)
        return bool(obj)

    def _encode(self, obj, context, path):
        return 1 if obj else 0


class PubkeyField(Adapter):
    """32 raw bytes decoded as a solders Pubkey."""

    def __init__(self):
        super().__init__(Bytes(32))

    def _decode(self, obj, context, path):
        return Pubkey.from_bytes(obj)

    def _encode(self, obj, context, path):
        return bytes(obj)


BorshString = PascalString(Int32ul, "utf8")
U64 = Int64ul
I64 = Int64sl

# Accounts (leading discriminator included, trailing padding ignored)

BONDING_CURVE_LAYOUT = Struct(
    "discriminator" / Bytes(DISCRIMINATOR_SIZE),
    "virtual_token_reserves" / U64,
    "virtual_sol_reserves" / U64,
    "real_token_reserves" / U64,
    "real_sol_reserves" / U64,
    "token_total_supply" / U64,
    "complete" / BorshBool(),
    "creator" / PubkeyField(),
)

GLOBAL_LAYOUT = Struct(
    "discriminator" / Bytes(DISCRIMINATOR_SIZE),
    "initialized" / BorshBool(),
    "authority" / PubkeyField(),
    "fee_recipient" / PubkeyField(),
    "initial_virtual_token_reserves" / U64,
    "initial_virtual_sol_reserves" / U64,
    "initial_real_token_reserves" / U64,
    "token_total_supply" / U64,
    "fee_basis_points" / U64,
    "withdraw_authority" / PubkeyField(),
    "enable_migrate" / BorshBool(),
    "pool_migration_fee" / U64,
    "creator_fee_basis_points" / U64,
    "fee_recipients" / Array(7, PubkeyField()),
    "set_creator_authority" / PubkeyField(),
)

BONDING_CURVE_SIZE = BONDING_CURVE_LAYOUT.sizeof()
GLOBAL_SIZE = GLOBAL_LAYOUT.sizeof()

# Events (payload after the discriminator, must be consumed exactly)

CREATE_EVENT_LAYOUT = Struct(
    "name" / BorshString,
    "symbol" / BorshString,
    "uri" / BorshString,
    "mint" / PubkeyField(),
    "bonding_curve" / PubkeyField(),
    "user" / PubkeyField(),
    "creator" / PubkeyField(),
    "timestamp" / I64,
    "virtual_token_reserves" / U64,
    "virtual_sol_reserves" / U64,
    "real_token_reserves" / U64,
    "token_total_supply" / U64,
    Terminated,
)

TRADE_EVENT_LAYOUT = Struct(
    "mint" / PubkeyField(),
    "sol_amount" / U64,
    "token_amount" / U64,
    "is_buy" / BorshBool(),
    "user" / PubkeyField(),
    "timestamp" / I64,
    "virtual_sol_reserves" / U64,
    "virtual_token_reserves" / U64,
    "real_sol_reserves" / U64,
    "real_token_reserves" / U64,
    "fee_recipient" / PubkeyField(),
    "fee_basis_points" / U64,
    "fee" / U64,
    "creator" / PubkeyField(),
    "creator_fee_basis_points" / U64,
    "creator_fee" / U64,
    "track_volume" / BorshBool(),
    "total_unclaimed_tokens" / U64,
    "total_claimed_tokens" / U64,
    "current_sol_volume" / U64,
    "last_update_timestamp" / I64,
    Terminated,
)

COMPLETE_EVENT_LAYOUT = Struct(
    "user" / PubkeyField(),
    "mint" / PubkeyField(),
    "bonding_curve" / PubkeyField(),
    "timestamp" / I64,
    Terminated,
)

SET_PARAMS_EVENT_LAYOUT = Struct(
    "initial_virtual_token_reserves" / U64,
    "initial_virtual_sol_reserves" / U64,
    "initial_real_token_reserves" / U64,
    "final_real_sol_reserves" / U64,
    "token_total_supply" / U64,
    "fee_basis_points" / U64,
    "withdraw_authority" / PubkeyField(),
    "enable_migrate" / BorshBool(),
    "pool_migration_fee" / U64,
    "creator_fee_basis_points" / U64,
    "fee_recipients" / Array(8, PubkeyField()),
    "timestamp" / I64,
    "set_creator_authority" / PubkeyField(),
    "admin_set_creator_authority" / PubkeyField(),
    Terminated,
)

# Instruction arguments (after the instruction discriminator)

CREATE_ARGS_LAYOUT = Struct(
    "name" / BorshString,
    "symbol" / BorshString,
    "uri" / BorshString,
    "creator" / PubkeyField(),
)

# track_volume is a Borsh Option<bool>: tag byte then the value when tag == 1
BUY_ARGS_LAYOUT = Struct(
    "amount" / U64,
    "max_sol_cost" / U64,
    "track_volume_tag" / Int8ul,
    "track_volume" / If(this.track_volume_tag == 1, BorshBool()),
)

SELL_ARGS_LAYOUT = Struct(
    "amount" / U64,
    "min_sol_output" / U64,
)
