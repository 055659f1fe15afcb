"""
Constants and enums for the pump.fun SDK.

Centralizes program addresses, PDA seeds, discriminators and numeric limits
shared by the curve engine, the layouts and the instruction builders.
"""

from enum import Enum

from solders.pubkey import Pubkey


class TradeDirection(Enum):
    """Side of a bonding-curve trade."""

    BUY = "buy"
    SELL = "sell"


class TradeMode(Enum):
    """Which side of the trade the request fixes."""

    EXACT_INPUT = "exact_input"
    EXACT_OUTPUT = "exact_output"


class FeeCategory(Enum):
    """Fee categories charged by the program."""

    PROTOCOL = "protocol"
    CREATOR = "creator"


class SessionState(Enum):
    """Lifecycle of a log subscription session."""

    CREATED = "created"
    ACTIVE = "active"
    CLOSING = "closing"
    CLOSED = "closed"
    ERRORED = "errored"


class BackpressurePolicy(Enum):
    """What a session does when its handler is slower than the transport."""

    BLOCK = "block"
    DROP = "drop"


class Commitment(Enum):
    """Solana commitment levels."""

    PROCESSED = "processed"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"


# Program and sysvar addresses
PUMPFUN_PROGRAM_ID = Pubkey.from_string("6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P")
EVENT_AUTHORITY = Pubkey.from_string("Ce6TQqeHC9p8KetsN6JsjHK7UTZk7nasjjnr7XxXp9F1")
FEE_PROGRAM_ID = Pubkey.from_string("pfeeUxB6jkeY1Hxd7CsFCAjcbHA9rWtchMGdZ6VojVZ")
MPL_TOKEN_METADATA_PROGRAM_ID = Pubkey.from_string(
    "metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s"
)
SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")
TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string(
    "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
)
RENT_SYSVAR_ID = Pubkey.from_string("SysvarRent111111111111111111111111111111111")

# PDA seeds
GLOBAL_SEED = b"global"
MINT_AUTHORITY_SEED = b"mint-authority"
BONDING_CURVE_SEED = b"bonding-curve"
METADATA_SEED = b"metadata"
CREATOR_VAULT_SEED = b"creator-vault"
GLOBAL_VOLUME_ACCUMULATOR_SEED = b"global_volume_accumulator"
USER_VOLUME_ACCUMULATOR_SEED = b"user_volume_accumulator"
FEE_CONFIG_SEED = b"fee_config"

# Discriminators (8-byte Anchor prefixes)
DISCRIMINATOR_SIZE = 8
BONDING_CURVE_DISCRIMINATOR = bytes([23, 183, 248, 55, 96, 216, 172, 96])
GLOBAL_DISCRIMINATOR = bytes([167, 232, 232, 177, 200, 108, 114, 127])

CREATE_INSTRUCTION_DISCRIMINATOR = bytes([24, 30, 200, 40, 5, 28, 7, 119])
BUY_INSTRUCTION_DISCRIMINATOR = bytes([102, 6, 61, 18, 1, 218, 235, 234])
SELL_INSTRUCTION_DISCRIMINATOR = bytes([51, 230, 133, 164, 1, 127, 131, 173])

CREATE_EVENT_DISCRIMINATOR = bytes([27, 114, 169, 77, 222, 235, 99, 118])
TRADE_EVENT_DISCRIMINATOR = bytes([189, 219, 127, 211, 78, 230, 97, 238])
COMPLETE_EVENT_DISCRIMINATOR = bytes([95, 114, 97, 156, 212, 46, 152, 8])
SET_PARAMS_EVENT_DISCRIMINATOR = bytes([223, 195, 159, 246, 62, 48, 143, 131])

# Events the program emits that this SDK recognizes but does not decode
UNHANDLED_EVENT_DISCRIMINATORS = frozenset(
    bytes(d)
    for d in (
        [64, 69, 192, 104, 29, 30, 25, 107],
        [245, 59, 70, 34, 75, 185, 109, 92],
        [147, 250, 108, 120, 247, 29, 67, 222],
        [79, 172, 246, 49, 205, 91, 206, 232],
        [146, 159, 189, 172, 146, 88, 56, 244],
        [122, 2, 127, 1, 14, 191, 12, 175],
        [189, 233, 93, 185, 92, 148, 234, 148],
        [97, 97, 215, 144, 93, 146, 22, 124],
        [134, 36, 13, 72, 232, 101, 130, 216],
        [237, 52, 123, 37, 245, 251, 72, 210],
        [142, 203, 6, 32, 127, 105, 191, 162],
        [197, 122, 167, 124, 116, 81, 91, 255],
        [182, 195, 137, 42, 35, 206, 207, 247],
    )
)

PROGRAM_DATA_PREFIX = "Program data: "

# Numeric limits
U64_MAX = 2**64 - 1
U128_MAX = 2**128 - 1
BPS_DENOMINATOR = 10_000
DEFAULT_SLIPPAGE_BPS = 500

# Cluster endpoints (http, ws)
CLUSTER_ENDPOINTS = {
    "mainnet": ("https://api.mainnet-beta.solana.com", "wss://api.mainnet-beta.solana.com"),
    "devnet": ("https://api.devnet.solana.com", "wss://api.devnet.solana.com"),
    "testnet": ("https://api.testnet.solana.com", "wss://api.testnet.solana.com"),
    "localnet": ("http://localhost:8899", "ws://localhost:8900"),
}

# Default configuration constants
DEFAULT_CONFIG = {
    "CLUSTER": "mainnet",
    "COMMITMENT": Commitment.CONFIRMED.value,
    "SLIPPAGE_BPS": DEFAULT_SLIPPAGE_BPS,
    "SESSION_BUFFER_SIZE": 1000,
    "BACKPRESSURE": BackpressurePolicy.BLOCK.value,
}
