"""
Solana RPC and signing adapters.

SolanaRpcClient wraps solana-py's AsyncClient behind the RpcClient protocol
and maps every network or node failure to TransportError. Nothing here retries.
"""

import logging
from typing import List, Optional, Sequence

from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.core import RPCException
from solana.rpc.types import TxOpts
from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction

from .constants import Commitment
from .exceptions import TransportError

logger = logging.getLogger(__name__)

_RPC_ERRORS = (SolanaRpcException, RPCException, OSError)


class SolanaRpcClient:
    """RpcClient backed by solana.rpc.async_api.AsyncClient."""

    def __init__(
        self,
        rpc_url: str,
        commitment: Commitment = Commitment.CONFIRMED,
        skip_preflight: bool = False,
        client: Optional[AsyncClient] = None,
    ):
        self.rpc_url = rpc_url
        self.commitment = commitment
        self.skip_preflight = skip_preflight
        self._client = client or AsyncClient(rpc_url, commitment=commitment.value)

    async def close(self) -> None:
        await self._client.close()

    async def __aenter__(self) -> "SolanaRpcClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def get_account_data(self, address: Pubkey) -> Optional[bytes]:
        try:
            response = await self._client.get_account_info(address)
        except _RPC_ERRORS as e:
            raise TransportError(
                f"getAccountInfo failed for {address}: {e}", endpoint=self.rpc_url
            ) from e

        if response.value is None:
            logger.debug(f"Account {address} not found")
            return None
        return bytes(response.value.data)

    async def get_transaction_logs(self, signature: str) -> List[str]:
        try:
            response = await self._client.get_transaction(
                Signature.from_string(signature),
                encoding="json",
                max_supported_transaction_version=0,
            )
        except _RPC_ERRORS as e:
            raise TransportError(
                f"getTransaction failed for {signature}: {e}", endpoint=self.rpc_url
            ) from e

        if response.value is None:
            raise TransportError(f"Transaction {signature} not found", endpoint=self.rpc_url)

        meta = response.value.transaction.meta
        if meta is None or meta.log_messages is None:
            return []
        return list(meta.log_messages)

    async def get_latest_blockhash(self) -> Hash:
        try:
            response = await self._client.get_latest_blockhash()
        except _RPC_ERRORS as e:
            raise TransportError(f"getLatestBlockhash failed: {e}", endpoint=self.rpc_url) from e
        return response.value.blockhash

    async def send_transaction(self, transaction: Transaction) -> str:
        opts = TxOpts(skip_preflight=self.skip_preflight, preflight_commitment=self.commitment.value)
        try:
            response = await self._client.send_transaction(transaction, opts=opts)
        except _RPC_ERRORS as e:
            raise TransportError(f"sendTransaction failed: {e}", endpoint=self.rpc_url) from e

        signature = str(response.value)
        logger.info(f"Sent transaction {signature}")
        return signature


class KeypairSigner:
    """TransactionSigner for a local solders Keypair paying its own fees."""

    def __init__(self, keypair: Keypair):
        self.keypair = keypair

    @classmethod
    def from_base58(cls, secret: str) -> "KeypairSigner":
        return cls(Keypair.from_base58_string(secret))

    @property
    def pubkey(self) -> Pubkey:
        return self.keypair.pubkey()

    def sign(
        self,
        instructions: Sequence[Instruction],
        blockhash: Hash,
        extra_signers: Sequence[Keypair] = (),
    ) -> Transaction:
        message = Message.new_with_blockhash(list(instructions), self.pubkey, blockhash)
        return Transaction([self.keypair, *extra_signers], message, blockhash)
