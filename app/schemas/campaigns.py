"""Campaign response schemas."""

from app.schemas.common import CamelModel


class CampaignSummaryResponse(CamelModel):
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


class ActionSetResponse(CamelModel):
    can_donate: bool
    can_withdraw: bool
    can_cancel: bool
    can_refund: bool


class FeePreviewResponse(CamelModel):
    fee_bps: int
    fee_percent: str
    fee: int
    net: int
    fee_display: str
    net_display: str


class CampaignDetailResponse(CamelModel):
    campaign: CampaignSummaryResponse
    actor: str | None
    donation: int
    donation_display: str
    actions: ActionSetResponse
    fee_preview: FeePreviewResponse


class DeploymentResponse(CamelModel):
    chain_id: int
    registry: str
    token: str
