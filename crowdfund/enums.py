"""Enumeration types for the crowdfunding client engine."""

from enum import Enum


class CampaignStatus(str, Enum):
    """Single status tag of a projected campaign, resolved by precedence."""

    ACTIVE = "active"
    EXPIRED = "expired"
    GOAL_MET = "goal_met"
    WITHDRAWN = "withdrawn"
    CANCELLED = "cancelled"


class ActionKind(str, Enum):
    """Mutating action an actor can attempt against a campaign."""

    DONATE = "donate"
    WITHDRAW = "withdraw"
    CANCEL = "cancel"
    CLAIM_REFUND = "claim_refund"


class AttemptPhase(str, Enum):
    """Step of an attempt. Donations run CHECKING_ALLOWANCE, APPROVING, DONATING."""

    IDLE = "idle"
    CHECKING_ALLOWANCE = "checking_allowance"
    APPROVING = "approving"
    DONATING = "donating"
    WITHDRAWING = "withdrawing"
    CANCELLING = "cancelling"
    CLAIMING_REFUND = "claiming_refund"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class AttemptState(str, Enum):
    """Where an attempt is within its current phase."""

    IDLE = "idle"
    READING = "reading"
    SUBMITTING = "submitting"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
