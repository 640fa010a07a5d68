"""Orchestration of mutating campaign actions.

One ``TransactionOrchestrator`` serves one (campaign, actor) pair and runs at
most one attempt at a time. A donation is two calls on the ledger: the token
allowance granted to the campaign is read first, and when it is short an
``approve`` is submitted and confirmed before ``donate`` is submitted. The
other actions are a single call each.

Attempts end in SUCCEEDED (the snapshot is then re-read from the ledger) or
FAILED (nothing is re-read; the ledger state is presumed unchanged). Failures
are never retried automatically.
"""

from collections.abc import Awaitable, Callable

import structlog

from crowdfund.enums import ActionKind, AttemptPhase, AttemptState
from crowdfund.services.amounts import parse_positive_amount
from crowdfund.services.errors import (
    ActionNotPermitted,
    AttemptInFlight,
    InvalidAmount,
    LedgerRejected,
    SessionRequired,
    TransactionError,
)
from crowdfund.services.ledger import Ledger, PendingTransaction
from crowdfund.services.permissions import actions_for
from crowdfund.services.projector import project
from crowdfund.services.schemas.attempt import AttemptResult, TransactionAttempt
from crowdfund.services.schemas.campaign import ActionSet, CampaignView, RawCampaignSnapshot
from crowdfund.services.schemas.chain import SigningSession, TransactionReceipt

logger = structlog.get_logger(__name__)

Listener = Callable[[TransactionAttempt, str], None]
Phases = Callable[[TransactionAttempt], Awaitable[None]]

PHASE_MESSAGES: dict[AttemptPhase, str] = {
    AttemptPhase.CHECKING_ALLOWANCE: "Checking token allowance...",
    AttemptPhase.APPROVING: "Approving token spend... (confirm in wallet)",
    AttemptPhase.DONATING: "Sending donation... (confirm in wallet)",
    AttemptPhase.WITHDRAWING: "Withdrawing funds... (confirm in wallet)",
    AttemptPhase.CANCELLING: "Cancelling campaign... (confirm in wallet)",
    AttemptPhase.CLAIMING_REFUND: "Claiming refund... (confirm in wallet)",
}

SUCCESS_MESSAGES: dict[ActionKind, str] = {
    ActionKind.DONATE: "Donation successful!",
    ActionKind.WITHDRAW: "Withdrawal successful!",
    ActionKind.CANCEL: "Campaign cancelled. Donors can now claim refunds.",
    ActionKind.CLAIM_REFUND: "Refund claimed successfully!",
}


class TransactionOrchestrator:
    """Sequences ledger calls for donate, withdraw, cancel and refund."""

    def __init__(
        self,
        ledger: Ledger,
        session: SigningSession,
        campaign: str,
        listener: Listener | None = None,
    ) -> None:
        self.ledger: Ledger = ledger
        self.session: SigningSession = session
        self.campaign: str = campaign
        self.view: CampaignView | None = None
        self.snapshot: RawCampaignSnapshot | None = None
        self.last_error: str | None = None
        self._listener: Listener | None = listener
        self._attempt: TransactionAttempt | None = None
        self._busy: bool = False

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def attempt(self) -> TransactionAttempt | None:
        """The attempt in progress, None when idle."""
        return self._attempt

    @property
    def phase(self) -> AttemptPhase:
        return self._attempt.phase if self._attempt else AttemptPhase.IDLE

    async def refresh(self, now: int | None = None) -> CampaignView:
        """Re-read the snapshot and re-project it. The ledger is the only source of truth."""
        snapshot: RawCampaignSnapshot = await self.ledger.read_campaign(
            self.campaign, self.session.address
        )
        self.snapshot = snapshot
        self.view = project(snapshot, now)
        logger.info(
            "Campaign refreshed",
            campaign=self.campaign,
            status=self.view.status.value,
            total_raised=self.view.total_raised,
        )
        return self.view

    def actions(self, now: int | None = None) -> ActionSet:
        """Re-project the last snapshot at ``now`` (default: current time) and evaluate it."""
        if self.snapshot is None:
            return ActionSet()
        self.view = project(self.snapshot, now)
        return actions_for(self.view, self.session.address)

    # -- actions --------------------------------------------------------------

    async def donate(self, amount: int | str) -> AttemptResult:
        value: int = parse_positive_amount(amount) if isinstance(amount, str) else amount
        if value <= 0:
            raise InvalidAmount("Amount must be greater than zero")

        async def _phases(attempt: TransactionAttempt) -> None:
            await self._donate(attempt, value)

        return await self._run(ActionKind.DONATE, _phases)

    async def withdraw(self) -> AttemptResult:
        return await self._run(
            ActionKind.WITHDRAW,
            self._single(
                AttemptPhase.WITHDRAWING,
                lambda: self.ledger.withdraw(self.session, self.campaign),
            ),
        )

    async def cancel(self) -> AttemptResult:
        return await self._run(
            ActionKind.CANCEL,
            self._single(
                AttemptPhase.CANCELLING,
                lambda: self.ledger.cancel(self.session, self.campaign),
            ),
        )

    async def claim_refund(self) -> AttemptResult:
        return await self._run(
            ActionKind.CLAIM_REFUND,
            self._single(
                AttemptPhase.CLAIMING_REFUND,
                lambda: self.ledger.claim_refund(self.session, self.campaign),
            ),
        )

    # -- internals ------------------------------------------------------------

    async def _run(self, kind: ActionKind, phases: Phases) -> AttemptResult:
        if self._busy:
            logger.warning("Attempt rejected, another is in flight", campaign=self.campaign, kind=kind.value)
            raise AttemptInFlight(f"An attempt is already in flight for {self.campaign}")
        if not self.session.connected:
            raise SessionRequired("Connect a wallet to sign transactions")

        # claimed before the first await so a concurrent call sees it
        self._busy = True
        try:
            attempt: TransactionAttempt = TransactionAttempt(kind=kind)
            self._attempt = attempt
            self.last_error = None
            try:
                if self.snapshot is None:
                    await self.refresh()
                # gate on the snapshot re-projected at the current time
                if not self.actions().allows(kind):
                    raise ActionNotPermitted(kind.value)
                await phases(attempt)
            except TransactionError as exc:
                attempt.error = exc.reason
                self.last_error = exc.reason
                self._transition(attempt, AttemptPhase.FAILED, AttemptState.FAILED)
                logger.warning(
                    "Attempt failed",
                    campaign=self.campaign,
                    kind=kind.value,
                    error_type=type(exc).__name__,
                    reason=exc.reason,
                )
                return AttemptResult(
                    kind=kind,
                    succeeded=False,
                    phases=attempt.submitted_phases(),
                    tx_hashes=list(attempt.tx_hashes),
                    message=exc.reason,
                    error=exc,
                    view=self.view,
                )

            self._transition(attempt, AttemptPhase.SUCCEEDED, AttemptState.SUCCEEDED)
            view: CampaignView | None = None
            try:
                view = await self.refresh()
            except TransactionError as exc:
                logger.warning("Refresh after success failed", campaign=self.campaign, reason=exc.reason)
            return AttemptResult(
                kind=kind,
                succeeded=True,
                phases=attempt.submitted_phases(),
                tx_hashes=list(attempt.tx_hashes),
                message=SUCCESS_MESSAGES[kind],
                view=view,
            )
        finally:
            self._attempt = None
            self._busy = False

    async def _donate(self, attempt: TransactionAttempt, amount: int) -> None:
        view: CampaignView | None = self.view
        owner: str | None = self.session.address
        if view is None or owner is None:
            raise SessionRequired("Donations need a loaded campaign and a connected actor")
        token: str = view.token

        self._transition(attempt, AttemptPhase.CHECKING_ALLOWANCE, AttemptState.READING)
        allowance: int = await self.ledger.allowance(token, owner, self.campaign)
        logger.info("Allowance checked", campaign=self.campaign, allowance=allowance, amount=amount)

        # the spend must not be submitted before the approval is confirmed
        if allowance < amount:
            await self._submit(
                attempt,
                AttemptPhase.APPROVING,
                lambda: self.ledger.approve(self.session, token, self.campaign, amount),
            )
        await self._submit(
            attempt,
            AttemptPhase.DONATING,
            lambda: self.ledger.donate(self.session, self.campaign, amount),
        )

    def _single(
        self,
        phase: AttemptPhase,
        call: Callable[[], Awaitable[PendingTransaction]],
    ) -> Phases:
        async def _phases(attempt: TransactionAttempt) -> None:
            await self._submit(attempt, phase, call)

        return _phases

    async def _submit(
        self,
        attempt: TransactionAttempt,
        phase: AttemptPhase,
        call: Callable[[], Awaitable[PendingTransaction]],
    ) -> TransactionReceipt:
        self._transition(attempt, phase, AttemptState.SUBMITTING)
        pending: PendingTransaction = await call()
        attempt.tx_hashes.append(pending.tx_hash)
        self._transition(attempt, phase, AttemptState.AWAITING_CONFIRMATION)
        receipt: TransactionReceipt = await pending.wait()
        if not receipt.succeeded:
            raise LedgerRejected("Transaction reverted")
        return receipt

    def _transition(self, attempt: TransactionAttempt, phase: AttemptPhase, state: AttemptState) -> None:
        attempt.phase = phase
        attempt.state = state
        attempt.history.append((phase, state))
        logger.debug(
            "Attempt transition",
            campaign=self.campaign,
            kind=attempt.kind.value,
            phase=phase.value,
            state=state.value,
        )
        if self._listener is not None:
            self._listener(attempt, self._message(attempt))

    @staticmethod
    def _message(attempt: TransactionAttempt) -> str:
        match attempt.state:
            case AttemptState.SUCCEEDED:
                return SUCCESS_MESSAGES[attempt.kind]
            case AttemptState.FAILED:
                return attempt.error or "Transaction failed"
            case _:
                return PHASE_MESSAGES.get(attempt.phase, "")
