"""
High-level pump.fun client.

Ties the account views, the quote engine and the instruction builders to an
RPC collaborator, and opens subscription sessions on a log transport. Curve
state is fetched fresh for every quote.
"""

import logging
from typing import List, Optional, Sequence

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from .accounts import BondingCurveState, GlobalAccountState, decode_bonding_curve, decode_global_account
from .config_loader import ClientConfig, get_default_config
from .constants import PUMPFUN_PROGRAM_ID, Commitment, TradeDirection, TradeMode
from .curve.quote import (
    FeeSchedule,
    PriorityFee,
    TradeQuote,
    TradeRequest,
    quote_trade,
    request_with_slippage,
)
from .events.decoder import DecodeOutcome, decode_transaction_logs
from .exceptions import ConfigurationError, InvalidAccountData
from .instructions import (
    bonding_curve_pda,
    create_instruction,
    global_pda,
    priority_fee_instructions,
    trade_instruction,
)
from .interfaces import LogTransport, RpcClient, TransactionSigner
from .rpc import KeypairSigner, SolanaRpcClient
from .stream.session import EventHandler, SubscriptionSession
from .stream.transport import SolanaLogTransport

logger = logging.getLogger(__name__)


class PumpFunClient:
    """Client for the pump.fun bonding-curve program."""

    def __init__(
        self,
        rpc: RpcClient,
        transport: Optional[LogTransport] = None,
        signer: Optional[TransactionSigner] = None,
        config: Optional[ClientConfig] = None,
        program_id: Pubkey = PUMPFUN_PROGRAM_ID,
    ):
        self.rpc = rpc
        self.transport = transport
        self.signer = signer
        self.config = config or get_default_config()
        self.program_id = program_id

    @classmethod
    def from_config(
        cls, config: ClientConfig, keypair: Optional[Keypair] = None
    ) -> "PumpFunClient":
        """Client on the configured cluster's RPC and websocket endpoints."""
        cluster = config.cluster
        logger.info(f"PumpFun client on {cluster.name} ({cluster.rpc_url})")
        return cls(
            rpc=SolanaRpcClient(cluster.rpc_url, commitment=cluster.commitment),
            transport=SolanaLogTransport(cluster.ws_url),
            signer=KeypairSigner(keypair) if keypair is not None else None,
            config=config,
        )

    async def get_bonding_curve(self, mint: Pubkey) -> BondingCurveState:
        """
        Fetch and decode the bonding curve of a mint.

        Raises:
            InvalidAccountData: If the account is missing or malformed
            TransportError: If the RPC request fails
        """
        address = bonding_curve_pda(mint)
        data = await self.rpc.get_account_data(address)
        if data is None:
            raise InvalidAccountData(
                f"Bonding curve {address} for mint {mint} not found", account_type="BondingCurve"
            )
        return decode_bonding_curve(data)

    async def get_global_account(self) -> GlobalAccountState:
        data = await self.rpc.get_account_data(global_pda())
        if data is None:
            raise InvalidAccountData("Global account not found", account_type="Global")
        return decode_global_account(data)

    async def quote(self, mint: Pubkey, request: TradeRequest) -> TradeQuote:
        """Quote a trade against freshly fetched curve and global state."""
        state = await self.get_bonding_curve(mint)
        global_state = await self.get_global_account()
        return quote_trade(state, FeeSchedule.from_global(global_state, state.creator), request)

    async def get_trade_instructions(
        self, mint: Pubkey, request: TradeRequest, payer: Optional[Pubkey] = None
    ) -> List[Instruction]:
        """
        Quote a request and build its instructions.

        Returns compute budget instructions (when the request carries a
        priority fee) followed by the buy or sell instruction. Nothing is built
        if the quote violates the request's bound.
        """
        if payer is None:
            payer = self._payer()
        state = await self.get_bonding_curve(mint)
        global_state = await self.get_global_account()
        fees = FeeSchedule.from_global(global_state, state.creator)
        quote = quote_trade(state, fees, request)

        instructions = priority_fee_instructions(request.priority_fee)
        instructions.append(
            trade_instruction(
                payer,
                mint,
                global_state.fee_recipient,
                state.creator,
                quote,
                track_volume=request.track_volume,
            )
        )
        return instructions

    async def get_buy_instructions(
        self,
        mint: Pubkey,
        sol_amount: int,
        slippage_bps: Optional[int] = None,
        priority_fee: Optional[PriorityFee] = None,
        payer: Optional[Pubkey] = None,
    ) -> List[Instruction]:
        """
        Instructions spending sol_amount lamports (fees included) on mint.

        The token amount is quoted from the current curve. The token minimum
        and the on-chain max_sol_cost are both widened by slippage_bps (config
        default when None).
        """
        request = await self._request_with_slippage(
            mint, TradeDirection.BUY, TradeMode.EXACT_INPUT, sol_amount, slippage_bps, priority_fee
        )
        return await self.get_trade_instructions(mint, request, payer)

    async def get_sell_instructions(
        self,
        mint: Pubkey,
        token_amount: int,
        slippage_bps: Optional[int] = None,
        priority_fee: Optional[PriorityFee] = None,
        payer: Optional[Pubkey] = None,
    ) -> List[Instruction]:
        """Instructions selling token_amount raw tokens of mint."""
        request = await self._request_with_slippage(
            mint, TradeDirection.SELL, TradeMode.EXACT_INPUT, token_amount, slippage_bps, priority_fee
        )
        return await self.get_trade_instructions(mint, request, payer)

    def get_create_instruction(
        self,
        mint: Pubkey,
        name: str,
        symbol: str,
        uri: str,
        creator: Optional[Pubkey] = None,
        payer: Optional[Pubkey] = None,
    ) -> Instruction:
        """Instruction creating mint and its bonding curve; uri must already be uploaded."""
        if payer is None:
            payer = self._payer()
        return create_instruction(payer, mint, name, symbol, uri, creator)

    async def build_transaction(
        self, instructions: Sequence[Instruction], extra_signers: Sequence[Keypair] = ()
    ) -> Transaction:
        """Sign instructions with the configured signer against a fresh blockhash."""
        signer = self._require_signer()
        blockhash = await self.rpc.get_latest_blockhash()
        return signer.sign(instructions, blockhash, extra_signers)

    async def send_transaction(
        self, instructions: Sequence[Instruction], extra_signers: Sequence[Keypair] = ()
    ) -> str:
        """Sign and submit instructions; returns the transaction signature."""
        transaction = await self.build_transaction(instructions, extra_signers)
        return await self.rpc.send_transaction(transaction)

    async def fetch_events(self, signature: str) -> List[DecodeOutcome]:
        """Re-decode the events of a confirmed transaction."""
        logs = await self.rpc.get_transaction_logs(signature)
        return decode_transaction_logs(signature, logs, self.program_id)

    def subscribe(
        self,
        handler: EventHandler,
        mentions: Optional[Pubkey] = None,
        commitment: Optional[Commitment] = None,
    ) -> SubscriptionSession:
        """
        Create a subscription session for program events.

        The session is returned unstarted; enter it with `async with` to
        subscribe and guarantee release.
        """
        if self.transport is None:
            raise ConfigurationError("No log transport configured")
        session_config = self.config.session
        return SubscriptionSession(
            self.transport,
            handler,
            program_id=self.program_id,
            mentions=mentions,
            commitment=commitment or self.config.cluster.commitment,
            backpressure=session_config.backpressure,
            buffer_size=session_config.buffer_size,
            include_failed=session_config.include_failed,
        )

    async def _request_with_slippage(
        self, mint, direction, mode, amount, slippage_bps, priority_fee
    ) -> TradeRequest:
        state = await self.get_bonding_curve(mint)
        global_state = await self.get_global_account()
        return request_with_slippage(
            state,
            FeeSchedule.from_global(global_state, state.creator),
            direction,
            mode,
            amount,
            self.config.slippage_bps if slippage_bps is None else slippage_bps,
            priority_fee=priority_fee or self.config.priority_fee.to_priority_fee(),
            track_volume=self.config.track_volume,
        )

    def _payer(self) -> Pubkey:
        return self._require_signer().pubkey

    def _require_signer(self) -> TransactionSigner:
        if self.signer is None:
            raise ConfigurationError("No signer configured")
        return self.signer
