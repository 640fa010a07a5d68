"""Projection of raw campaign snapshots into derived campaign views.

Every consumer (list, detail, "my donations", CLI, HTTP API) goes through
``project`` so status and progress are computed one way only.
"""

import time
from dataclasses import asdict

from crowdfund.enums import CampaignStatus
from crowdfund.services.schemas.campaign import CampaignView, RawCampaignSnapshot

EXPIRED_LABEL = "Expired"

_DAY = 86400
_HOUR = 3600


def now_unix() -> int:
    return int(time.time())


def resolve_status(cancelled: bool, withdrawn: bool, goal_met: bool, expired: bool) -> CampaignStatus:
    # Cancelled > Withdrawn > GoalMet > Expired > Active
    if cancelled:
        return CampaignStatus.CANCELLED
    if withdrawn:
        return CampaignStatus.WITHDRAWN
    if goal_met:
        return CampaignStatus.GOAL_MET
    if expired:
        return CampaignStatus.EXPIRED
    return CampaignStatus.ACTIVE


def progress_percent(total_raised: int, goal_amount: int) -> int:
    if goal_amount == 0:
        return 0
    return min(100, total_raised * 100 // goal_amount)


def time_remaining(deadline: int, now: int) -> str:
    if now > deadline:
        return EXPIRED_LABEL
    remaining: int = deadline - now
    days: int = remaining // _DAY
    hours: int = (remaining % _DAY) // _HOUR
    if days > 0:
        return f"{days}d {hours}h left"
    return f"{hours}h left"


def project(snapshot: RawCampaignSnapshot, now: int | None = None) -> CampaignView:
    """Derive a fresh CampaignView from a ledger snapshot at time ``now``."""
    at: int = now_unix() if now is None else now
    # goal 0 is trivially met while progress stays at 0
    goal_met: bool = snapshot.total_raised >= snapshot.goal_amount
    expired: bool = at > snapshot.deadline
    return CampaignView(
        **asdict(snapshot),
        goal_met=goal_met,
        expired=expired,
        status=resolve_status(snapshot.cancelled, snapshot.withdrawn, goal_met, expired),
        progress_percent=progress_percent(snapshot.total_raised, snapshot.goal_amount),
        time_remaining=time_remaining(snapshot.deadline, at),
        as_of=at,
    )
