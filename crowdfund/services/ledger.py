"""Interfaces the engine consumes: the ledger, pending transactions and sessions.

Adapters raise ``TransactionError`` subclasses (``UserDeclined``,
``LedgerRejected``, ``TransportFailure``) from mutating calls and from
``PendingTransaction.wait``; reads raise ``TransportFailure`` (or
``LedgerRejected`` when a view call reverts).
"""

from typing import Protocol

from crowdfund.services.schemas.campaign import RawCampaignSnapshot
from crowdfund.services.schemas.chain import SigningSession, TransactionReceipt


class PendingTransaction(Protocol):
    tx_hash: str

    async def wait(self) -> TransactionReceipt:
        """Block until the transaction is confirmed; raise on revert or transport error."""
        ...


class Ledger(Protocol):
    # -- reads ---------------------------------------------------------------

    async def read_campaign(self, campaign: str, actor: str | None = None) -> RawCampaignSnapshot: ...

    async def allowance(self, token: str, owner: str, spender: str) -> int: ...

    async def list_campaigns(self, registry: str) -> list[str]: ...

    # -- writes --------------------------------------------------------------

    async def approve(
        self, session: SigningSession, token: str, spender: str, amount: int
    ) -> PendingTransaction: ...

    async def donate(self, session: SigningSession, campaign: str, amount: int) -> PendingTransaction: ...

    async def withdraw(self, session: SigningSession, campaign: str) -> PendingTransaction: ...

    async def cancel(self, session: SigningSession, campaign: str) -> PendingTransaction: ...

    async def claim_refund(self, session: SigningSession, campaign: str) -> PendingTransaction: ...

    async def create_campaign(
        self,
        session: SigningSession,
        registry: str,
        name: str,
        description: str,
        goal_amount: int,
        deadline: int,
    ) -> PendingTransaction: ...


class SessionProvider(Protocol):
    async def connect(self) -> SigningSession:
        """Request a new signing session."""
        ...
