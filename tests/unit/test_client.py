"""
Tests for the high-level client against an in-memory RPC node.
"""

import struct

import pytest
from solders.keypair import Keypair
from solders.transaction import Transaction

from pumpfun_sdk.accounts import decode_bonding_curve, decode_global_account
from pumpfun_sdk.client import PumpFunClient
from pumpfun_sdk.config_loader import ClientConfig, PriorityFeeConfig, SessionConfig
from pumpfun_sdk.constants import (
    BUY_INSTRUCTION_DISCRIMINATOR,
    SELL_INSTRUCTION_DISCRIMINATOR,
    BackpressurePolicy,
    Commitment,
    SessionState,
)
from pumpfun_sdk.curve.quote import FeeSchedule, PriorityFee, TradeRequest, quote_trade
from pumpfun_sdk.events import TradeEvent
from pumpfun_sdk.exceptions import (
    ConfigurationError,
    CurveCompleted,
    InvalidAccountData,
    SlippageExceeded,
    TransportError,
)
from pumpfun_sdk.instructions import bonding_curve_pda, global_pda, priority_fee_instructions
from pumpfun_sdk.rpc import KeypairSigner

from helpers.fake_chain import (
    CREATOR,
    FEE_RECIPIENT,
    MINT,
    encode_bonding_curve,
    encode_global,
    notification,
    program_logs,
    trade_event_bytes,
    wait_until,
)


@pytest.fixture
def keypair():
    return Keypair()


@pytest.fixture
def chain(fake_rpc):
    fake_rpc.accounts[bonding_curve_pda(MINT)] = encode_bonding_curve()
    fake_rpc.accounts[global_pda()] = encode_global()
    return fake_rpc


@pytest.fixture
def client(chain, fake_transport, keypair):
    return PumpFunClient(chain, transport=fake_transport, signer=KeypairSigner(keypair))


def _u64_at(data, offset):
    return struct.unpack_from("<Q", bytes(data), offset)[0]


class TestAccountViews:
    @pytest.mark.asyncio
    async def test_get_bonding_curve(self, client):
        state = await client.get_bonding_curve(MINT)
        assert state == decode_bonding_curve(encode_bonding_curve())

    @pytest.mark.asyncio
    async def test_missing_bonding_curve(self, client, chain):
        del chain.accounts[bonding_curve_pda(MINT)]
        with pytest.raises(InvalidAccountData, match="not found"):
            await client.get_bonding_curve(MINT)

    @pytest.mark.asyncio
    async def test_get_global_account(self, client):
        global_state = await client.get_global_account()
        assert global_state.fee_recipient == FEE_RECIPIENT

    @pytest.mark.asyncio
    async def test_quote_uses_global_fees(self, client):
        request = TradeRequest.sell(1_000_000_000)
        quote = await client.quote(MINT, request)

        fees = FeeSchedule.from_global(decode_global_account(encode_global()), CREATOR)
        expected = quote_trade(decode_bonding_curve(encode_bonding_curve()), fees, request)
        assert quote == expected
        assert quote.total_fee > 0

    @pytest.mark.asyncio
    async def test_quote_completed_curve(self, client, chain):
        chain.accounts[bonding_curve_pda(MINT)] = encode_bonding_curve(complete=True)
        with pytest.raises(CurveCompleted):
            await client.quote(MINT, TradeRequest.sell(1_000))


class TestTradeInstructions:
    @pytest.mark.asyncio
    async def test_buy_instructions(self, client, keypair):
        instructions = await client.get_buy_instructions(MINT, 1_000_000_000, slippage_bps=100)
        assert len(instructions) == 1

        ix = instructions[0]
        assert bytes(ix.data)[:8] == BUY_INSTRUCTION_DISCRIMINATOR
        assert _u64_at(ix.data, 16) == 1_010_000_000
        assert ix.accounts[1].pubkey == FEE_RECIPIENT
        assert ix.accounts[6].pubkey == keypair.pubkey()

    @pytest.mark.asyncio
    async def test_sell_instructions_with_priority_fee(self, client):
        priority_fee = PriorityFee(unit_limit=100_000, unit_price=1_000)
        instructions = await client.get_sell_instructions(
            MINT, 1_000_000, slippage_bps=0, priority_fee=priority_fee
        )
        assert instructions[:2] == priority_fee_instructions(priority_fee)
        sell = instructions[2]
        assert bytes(sell.data)[:8] == SELL_INSTRUCTION_DISCRIMINATOR
        assert _u64_at(sell.data, 8) == 1_000_000

        quote = await client.quote(MINT, TradeRequest.sell(1_000_000))
        assert _u64_at(sell.data, 16) == quote.output_after_fees

    @pytest.mark.asyncio
    async def test_config_priority_fee_default(self, chain, keypair):
        config = ClientConfig(priority_fee=PriorityFeeConfig(unit_price=7))
        client = PumpFunClient(chain, signer=KeypairSigner(keypair), config=config)
        instructions = await client.get_sell_instructions(MINT, 1_000_000)
        assert instructions[0] == priority_fee_instructions(PriorityFee(unit_price=7))[0]

    @pytest.mark.asyncio
    async def test_bound_violation_builds_nothing(self, client):
        request = TradeRequest.sell(1_000_000, min_sol=10**15)
        with pytest.raises(SlippageExceeded):
            await client.get_trade_instructions(MINT, request)

    @pytest.mark.asyncio
    async def test_explicit_payer_without_signer(self, chain, keypair):
        client = PumpFunClient(chain)
        instructions = await client.get_trade_instructions(
            MINT, TradeRequest.sell(1_000), payer=keypair.pubkey()
        )
        assert instructions[-1].accounts[6].pubkey == keypair.pubkey()

    @pytest.mark.asyncio
    async def test_no_signer(self, chain):
        client = PumpFunClient(chain)
        with pytest.raises(ConfigurationError, match="signer"):
            await client.get_trade_instructions(MINT, TradeRequest.sell(1_000))

    def test_create_instruction_defaults_to_signer(self, client, keypair):
        mint = Keypair().pubkey()
        ix = client.get_create_instruction(mint, "Name", "SYM", "https://example.invalid/m.json")
        signers = [meta.pubkey for meta in ix.accounts if meta.is_signer]
        assert signers == [mint, keypair.pubkey()]


class TestTransactions:
    @pytest.mark.asyncio
    async def test_send_transaction(self, client, chain, keypair):
        instructions = await client.get_sell_instructions(MINT, 1_000_000)
        signature = await client.send_transaction(instructions)

        assert len(chain.sent) == 1
        transaction = chain.sent[0]
        assert isinstance(transaction, Transaction)
        assert signature == str(transaction.signatures[0])
        assert transaction.message.account_keys[0] == keypair.pubkey()

    @pytest.mark.asyncio
    async def test_extra_signer(self, client, chain):
        mint = Keypair()
        ix = client.get_create_instruction(mint.pubkey(), "Name", "SYM", "u")
        transaction = await client.build_transaction([ix], extra_signers=[mint])
        assert len(transaction.signatures) == 2

    @pytest.mark.asyncio
    async def test_fetch_events(self, client, chain):
        chain.transaction_logs["sig"] = program_logs(trade_event_bytes(), trade_event_bytes()[:9])
        outcomes = await client.fetch_events("sig")
        assert isinstance(outcomes[0].event, TradeEvent)
        assert outcomes[1].error is not None

    @pytest.mark.asyncio
    async def test_fetch_events_missing_transaction(self, client):
        with pytest.raises(TransportError):
            await client.fetch_events("missing")


class TestSubscribe:
    @pytest.mark.asyncio
    async def test_session_uses_config(self, chain, fake_transport):
        config = ClientConfig(
            session=SessionConfig(backpressure=BackpressurePolicy.DROP, buffer_size=8)
        )
        client = PumpFunClient(chain, transport=fake_transport, config=config)
        session = client.subscribe(lambda *args: None, commitment=Commitment.FINALIZED)

        assert session.state == SessionState.CREATED
        assert session.backpressure == BackpressurePolicy.DROP
        assert session.buffer_size == 8
        assert session.commitment == Commitment.FINALIZED

    @pytest.mark.asyncio
    async def test_subscribe_and_receive(self, client, fake_transport):
        received = []

        async def handler(signature, event, error, notification):
            received.append(event)

        async with client.subscribe(handler, mentions=MINT):
            fake_transport.stream.push(notification("sig", trade_event_bytes()))
            await wait_until(lambda: len(received) == 1)

        assert isinstance(received[0], TradeEvent)
        assert fake_transport.subscriptions == [(MINT, Commitment.CONFIRMED)]

    def test_subscribe_without_transport(self, chain):
        with pytest.raises(ConfigurationError):
            PumpFunClient(chain).subscribe(lambda *args: None)
