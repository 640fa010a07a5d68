"""Client-side prediction of which actions an actor may attempt.

The ledger stays authoritative; these flags only gate what is offered and
what the orchestrator is willing to submit.
"""

from crowdfund.services.schemas.campaign import ActionSet, CampaignView, FeeSplit

MAX_FEE_BPS = 10000


def same_address(a: str | None, b: str | None) -> bool:
    if not a or not b:
        return False
    return a.lower() == b.lower()


def evaluate(
    view: CampaignView,
    actor: str | None,
    actor_donation: int,
    is_creator: bool,
) -> ActionSet:
    return ActionSet(
        # overfunding is allowed, so goal_met does not block donations
        can_donate=not view.expired and not view.withdrawn and not view.cancelled,
        can_withdraw=is_creator and view.goal_met and not view.withdrawn and not view.cancelled,
        can_cancel=is_creator and not view.cancelled and not view.withdrawn,
        can_refund=actor_donation > 0
        and (view.cancelled or (view.expired and not view.goal_met)),
    )


def actions_for(view: CampaignView, actor: str | None = None) -> ActionSet:
    """Evaluate for ``actor`` (defaults to the actor the view was read for)."""
    who: str | None = actor if actor is not None else view.actor
    donation: int = view.donation if same_address(who, view.actor) else 0
    return evaluate(view, who, donation, same_address(who, view.creator))


def fee_split(total_raised: int, fee_bps: int) -> FeeSplit:
    """Preview of a withdrawal: platform fee and what the creator receives."""
    if not 0 <= fee_bps <= MAX_FEE_BPS:
        raise ValueError(f"fee_bps must be within [0, {MAX_FEE_BPS}], got {fee_bps}")
    if total_raised < 0:
        raise ValueError(f"total_raised must be non-negative, got {total_raised}")
    fee: int = total_raised * fee_bps // MAX_FEE_BPS
    return FeeSplit(fee=fee, net=total_raised - fee)
