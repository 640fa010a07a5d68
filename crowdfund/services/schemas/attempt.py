"""Transaction attempt state and results."""

from dataclasses import dataclass, field

from crowdfund.enums import ActionKind, AttemptPhase, AttemptState
from crowdfund.services.errors import TransactionError
from crowdfund.services.schemas.campaign import CampaignView


@dataclass
class TransactionAttempt:
    kind: ActionKind
    phase: AttemptPhase = AttemptPhase.IDLE
    state: AttemptState = AttemptState.IDLE
    error: str | None = None
    tx_hashes: list[str] = field(default_factory=list)
    history: list[tuple[AttemptPhase, AttemptState]] = field(default_factory=list)

    @property
    def in_flight(self) -> bool:
        return self.state in (
            AttemptState.READING,
            AttemptState.SUBMITTING,
            AttemptState.AWAITING_CONFIRMATION,
        )

    def submitted_phases(self) -> list[AttemptPhase]:
        """Phases that reached the ledger, in submission order."""
        return [p for p, s in self.history if s is AttemptState.SUBMITTING]


@dataclass
class AttemptResult:
    kind: ActionKind
    succeeded: bool
    phases: list[AttemptPhase]
    tx_hashes: list[str]
    message: str
    error: TransactionError | None = None
    view: CampaignView | None = None
