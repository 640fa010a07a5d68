"""Campaign data transfer objects: raw ledger snapshot and derived projections."""

from dataclasses import dataclass

from crowdfund.enums import ActionKind, CampaignStatus


@dataclass(frozen=True)
class RawCampaignSnapshot:
    """Ledger state of one campaign, as read. Amounts are fixed-point integers."""

    address: str
    name: str
    description: str
    creator: str
    goal_amount: int
    deadline: int
    total_raised: int
    withdrawn: bool
    cancelled: bool
    fee_bps: int
    token: str
    actor: str | None = None
    donation: int = 0


@dataclass(frozen=True)
class CampaignView:
    address: str
    name: str
    description: str
    creator: str
    goal_amount: int
    deadline: int
    total_raised: int
    withdrawn: bool
    cancelled: bool
    fee_bps: int
    token: str
    actor: str | None
    donation: int
    goal_met: bool
    expired: bool
    status: CampaignStatus
    progress_percent: int
    time_remaining: str
    as_of: int


@dataclass(frozen=True)
class ActionSet:
    can_donate: bool = False
    can_withdraw: bool = False
    can_cancel: bool = False
    can_refund: bool = False

    def allows(self, kind: ActionKind) -> bool:
        match kind:
            case ActionKind.DONATE:
                return self.can_donate
            case ActionKind.WITHDRAW:
                return self.can_withdraw
            case ActionKind.CANCEL:
                return self.can_cancel
            case ActionKind.CLAIM_REFUND:
                return self.can_refund
            case _:
                return False


@dataclass(frozen=True)
class FeeSplit:
    fee: int
    net: int
