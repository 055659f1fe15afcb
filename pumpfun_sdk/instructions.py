"""
Instruction builders and PDA derivation for the pump.fun program.

Builders return solders Instructions (program id, ordered account metas,
discriminator + Borsh arguments). Signing and submission are left to the
TransactionSigner and RpcClient collaborators.
"""

from typing import List, Optional

from solders.compute_budget import set_compute_unit_limit, set_compute_unit_price
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from .constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    BONDING_CURVE_SEED,
    BUY_INSTRUCTION_DISCRIMINATOR,
    CREATE_INSTRUCTION_DISCRIMINATOR,
    CREATOR_VAULT_SEED,
    EVENT_AUTHORITY,
    FEE_CONFIG_SEED,
    FEE_PROGRAM_ID,
    GLOBAL_SEED,
    GLOBAL_VOLUME_ACCUMULATOR_SEED,
    METADATA_SEED,
    MINT_AUTHORITY_SEED,
    MPL_TOKEN_METADATA_PROGRAM_ID,
    PUMPFUN_PROGRAM_ID,
    RENT_SYSVAR_ID,
    SELL_INSTRUCTION_DISCRIMINATOR,
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    USER_VOLUME_ACCUMULATOR_SEED,
    TradeDirection,
)
from .curve.math import require_u64
from .curve.quote import PriorityFee, TradeQuote
from .exceptions import ValidationError
from .layouts import BUY_ARGS_LAYOUT, CREATE_ARGS_LAYOUT, SELL_ARGS_LAYOUT


def _pda(seeds, program_id: Pubkey = PUMPFUN_PROGRAM_ID) -> Pubkey:
    return Pubkey.find_program_address(seeds, program_id)[0]


def global_pda() -> Pubkey:
    return _pda([GLOBAL_SEED])


def mint_authority_pda() -> Pubkey:
    return _pda([MINT_AUTHORITY_SEED])


def bonding_curve_pda(mint: Pubkey) -> Pubkey:
    return _pda([BONDING_CURVE_SEED, bytes(mint)])


def creator_vault_pda(creator: Pubkey) -> Pubkey:
    return _pda([CREATOR_VAULT_SEED, bytes(creator)])


def metadata_pda(mint: Pubkey) -> Pubkey:
    return _pda(
        [METADATA_SEED, bytes(MPL_TOKEN_METADATA_PROGRAM_ID), bytes(mint)],
        MPL_TOKEN_METADATA_PROGRAM_ID,
    )


def global_volume_accumulator_pda() -> Pubkey:
    return _pda([GLOBAL_VOLUME_ACCUMULATOR_SEED])


def user_volume_accumulator_pda(user: Pubkey) -> Pubkey:
    return _pda([USER_VOLUME_ACCUMULATOR_SEED, bytes(user)])


def fee_config_pda() -> Pubkey:
    return _pda([FEE_CONFIG_SEED, bytes(PUMPFUN_PROGRAM_ID)], FEE_PROGRAM_ID)


def associated_token_address(owner: Pubkey, mint: Pubkey) -> Pubkey:
    """Associated token account of owner for mint under the SPL token program."""
    return _pda(
        [bytes(owner), bytes(TOKEN_PROGRAM_ID), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )


def _ro(pubkey: Pubkey) -> AccountMeta:
    return AccountMeta(pubkey, is_signer=False, is_writable=False)


def _w(pubkey: Pubkey) -> AccountMeta:
    return AccountMeta(pubkey, is_signer=False, is_writable=True)


def _signer(pubkey: Pubkey) -> AccountMeta:
    return AccountMeta(pubkey, is_signer=True, is_writable=True)


def create_instruction(
    payer: Pubkey,
    mint: Pubkey,
    name: str,
    symbol: str,
    uri: str,
    creator: Optional[Pubkey] = None,
) -> Instruction:
    """
    Build the instruction that creates a token and its bonding curve.

    Args:
        payer: Fee payer, also the default creator
        mint: New mint address; its keypair must co-sign
        name: Token name
        symbol: Token symbol
        uri: Metadata URI
        creator: Creator credited with creator fees

    Returns:
        Create instruction
    """
    bonding_curve = bonding_curve_pda(mint)
    data = CREATE_INSTRUCTION_DISCRIMINATOR + CREATE_ARGS_LAYOUT.build(
        dict(name=name, symbol=symbol, uri=uri, creator=creator or payer)
    )
    accounts = [
        _signer(mint),
        _ro(mint_authority_pda()),
        _w(bonding_curve),
        _w(associated_token_address(bonding_curve, mint)),
        _ro(global_pda()),
        _ro(MPL_TOKEN_METADATA_PROGRAM_ID),
        _w(metadata_pda(mint)),
        _signer(payer),
        _ro(SYSTEM_PROGRAM_ID),
        _ro(TOKEN_PROGRAM_ID),
        _ro(ASSOCIATED_TOKEN_PROGRAM_ID),
        _ro(RENT_SYSVAR_ID),
        _ro(EVENT_AUTHORITY),
        _ro(PUMPFUN_PROGRAM_ID),
    ]
    return Instruction(PUMPFUN_PROGRAM_ID, data, accounts)


def buy_instruction(
    payer: Pubkey,
    mint: Pubkey,
    fee_recipient: Pubkey,
    creator: Pubkey,
    amount: int,
    max_sol_cost: int,
    track_volume: Optional[bool] = None,
) -> Instruction:
    """
    Build a buy of exactly amount tokens paying at most max_sol_cost lamports.

    The payer's associated token account must already exist.
    """
    require_u64(amount, "amount")
    require_u64(max_sol_cost, "max_sol_cost")

    bonding_curve = bonding_curve_pda(mint)
    data = BUY_INSTRUCTION_DISCRIMINATOR + BUY_ARGS_LAYOUT.build(
        dict(
            amount=amount,
            max_sol_cost=max_sol_cost,
            track_volume_tag=0 if track_volume is None else 1,
            track_volume=track_volume,
        )
    )
    accounts = [
        _ro(global_pda()),
        _w(fee_recipient),
        _ro(mint),
        _w(bonding_curve),
        _w(associated_token_address(bonding_curve, mint)),
        _w(associated_token_address(payer, mint)),
        _signer(payer),
        _ro(SYSTEM_PROGRAM_ID),
        _ro(TOKEN_PROGRAM_ID),
        _w(creator_vault_pda(creator)),
        _ro(EVENT_AUTHORITY),
        _ro(PUMPFUN_PROGRAM_ID),
        _w(global_volume_accumulator_pda()),
        _w(user_volume_accumulator_pda(payer)),
        _ro(fee_config_pda()),
        _ro(FEE_PROGRAM_ID),
    ]
    return Instruction(PUMPFUN_PROGRAM_ID, data, accounts)


def sell_instruction(
    payer: Pubkey,
    mint: Pubkey,
    fee_recipient: Pubkey,
    creator: Pubkey,
    amount: int,
    min_sol_output: int,
) -> Instruction:
    """Build a sell of exactly amount tokens receiving at least min_sol_output lamports."""
    require_u64(amount, "amount")
    require_u64(min_sol_output, "min_sol_output")

    bonding_curve = bonding_curve_pda(mint)
    data = SELL_INSTRUCTION_DISCRIMINATOR + SELL_ARGS_LAYOUT.build(
        dict(amount=amount, min_sol_output=min_sol_output)
    )
    accounts = [
        _ro(global_pda()),
        _w(fee_recipient),
        _ro(mint),
        _w(bonding_curve),
        _w(associated_token_address(bonding_curve, mint)),
        _w(associated_token_address(payer, mint)),
        _signer(payer),
        _ro(SYSTEM_PROGRAM_ID),
        _w(creator_vault_pda(creator)),
        _ro(TOKEN_PROGRAM_ID),
        _ro(EVENT_AUTHORITY),
        _ro(PUMPFUN_PROGRAM_ID),
        _ro(fee_config_pda()),
        _ro(FEE_PROGRAM_ID),
    ]
    return Instruction(PUMPFUN_PROGRAM_ID, data, accounts)


def priority_fee_instructions(priority_fee: Optional[PriorityFee]) -> List[Instruction]:
    """Compute budget instructions for priority_fee: unit limit first, then unit price."""
    if priority_fee is None:
        return []

    instructions = []
    if priority_fee.unit_limit is not None:
        instructions.append(set_compute_unit_limit(priority_fee.unit_limit))
    if priority_fee.unit_price is not None:
        instructions.append(set_compute_unit_price(priority_fee.unit_price))
    return instructions


def trade_instruction(
    payer: Pubkey,
    mint: Pubkey,
    fee_recipient: Pubkey,
    creator: Pubkey,
    quote: TradeQuote,
    track_volume: Optional[bool] = None,
) -> Instruction:
    """
    Build the buy or sell instruction matching a quote.

    Buys request the quoted tokens with the quote's bound as max_sol_cost;
    sells offer the quoted tokens with the bound as min_sol_output.
    """
    if quote.direction == TradeDirection.BUY:
        if quote.output_after_fees <= 0:
            raise ValidationError("Quote buys no tokens")
        return buy_instruction(
            payer,
            mint,
            fee_recipient,
            creator,
            amount=quote.output_after_fees,
            max_sol_cost=quote.slippage_bound,
            track_volume=track_volume,
        )
    return sell_instruction(
        payer,
        mint,
        fee_recipient,
        creator,
        amount=quote.input_amount,
        min_sol_output=quote.slippage_bound,
    )
