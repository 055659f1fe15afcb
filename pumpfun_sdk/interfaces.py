"""
Collaborator interfaces for the pump.fun SDK.

The core only talks to the network and to key material through these
protocols. Production adapters live in rpc.py and stream/transport.py;
tests substitute in-memory fakes.
"""

from typing import AsyncIterator, List, Optional, Protocol, Sequence, runtime_checkable

from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from .constants import Commitment
from .events.decoder import LogNotification


@runtime_checkable
class RpcClient(Protocol):
    """Protocol for request/response access to a Solana node."""

    async def get_account_data(self, address: Pubkey) -> Optional[bytes]:
        """Raw account bytes, or None if the account does not exist."""
        ...

    async def get_transaction_logs(self, signature: str) -> List[str]:
        """Log lines of a confirmed transaction."""
        ...

    async def get_latest_blockhash(self) -> Hash:
        """Recent blockhash for building a transaction."""
        ...

    async def send_transaction(self, transaction: Transaction) -> str:
        """Submit a signed transaction and return its signature."""
        ...


@runtime_checkable
class LogStream(Protocol):
    """An established log subscription yielding notifications in arrival order."""

    def __aiter__(self) -> AsyncIterator[LogNotification]:
        ...

    async def unsubscribe(self) -> None:
        """Tear down the subscription. Safe to call more than once."""
        ...


@runtime_checkable
class LogTransport(Protocol):
    """Protocol for opening log subscriptions."""

    async def subscribe(self, mentions: Pubkey, commitment: Commitment) -> LogStream:
        """Subscribe to logs of transactions that mention an address."""
        ...


@runtime_checkable
class TransactionSigner(Protocol):
    """Protocol for turning instructions into a signed transaction."""

    @property
    def pubkey(self) -> Pubkey:
        """Fee payer address."""
        ...

    def sign(
        self,
        instructions: Sequence[Instruction],
        blockhash: Hash,
        extra_signers: Sequence[Keypair] = (),
    ) -> Transaction:
        """Build and sign a transaction paid for by this signer."""
        ...
