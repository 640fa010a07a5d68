"""Typed dicts for service-layer return values.

Keeps CLI- and route-facing functions explicit about their shape instead of
returning bare dicts.
"""

import sys

if sys.version_info >= (3, 12):
    from typing import TypedDict
else:
    from typing_extensions import TypedDict


class ActionSetDict(TypedDict):
    can_donate: bool
    can_withdraw: bool
    can_cancel: bool
    can_refund: bool


class FeePreviewDict(TypedDict):
    fee_bps: int
    fee_percent: str
    fee: int
    net: int
    fee_display: str
    net_display: str


class CampaignSummaryDict(TypedDict):
    address: str
    name: str
    description: str
    creator: str
    creator_short: str
    token: str
    status: str
    goal_amount: int
    total_raised: int
    goal_display: str
    raised_display: str
    progress_percent: int
    goal_met: bool
    expired: bool
    withdrawn: bool
    cancelled: bool
    deadline: int
    deadline_display: str
    time_label: str


class CampaignDetailDict(TypedDict):
    campaign: CampaignSummaryDict
    actor: str | None
    donation: int
    donation_display: str
    actions: ActionSetDict
    fee_preview: FeePreviewDict
