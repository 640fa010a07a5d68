"""Campaign catalog: listing, "my donations", detail loads and creation."""

import asyncio
from dataclasses import dataclass

import structlog

from crowdfund.services._types import (
    ActionSetDict,
    CampaignDetailDict,
    CampaignSummaryDict,
    FeePreviewDict,
)
from crowdfund.services.amounts import (
    SCALE,
    format_amount,
    format_bps,
    format_deadline,
    parse_amount,
    short_address,
)
from crowdfund.services.deployments import DeploymentRegistry
from crowdfund.services.errors import (
    InvalidAmount,
    InvalidCampaignDraft,
    LedgerRejected,
    SessionRequired,
)
from crowdfund.services.ledger import Ledger, PendingTransaction
from crowdfund.services.permissions import actions_for, fee_split
from crowdfund.services.projector import now_unix, project
from crowdfund.services.schemas.campaign import (
    ActionSet,
    CampaignView,
    FeeSplit,
    RawCampaignSnapshot,
)
from crowdfund.services.schemas.chain import (
    DeploymentAddresses,
    SigningSession,
    TransactionReceipt,
)

logger = structlog.get_logger(__name__)

MAX_NAME_LENGTH = 80
MAX_DESCRIPTION_LENGTH = 500
MIN_GOAL = 1 * SCALE


@dataclass(frozen=True)
class CampaignDraft:
    name: str
    description: str
    goal_amount: int
    deadline: int


def validate_draft(
    name: str,
    description: str,
    goal_text: str,
    deadline: int,
    now: int | None = None,
) -> CampaignDraft:
    clean_name: str = name.strip()
    clean_description: str = description.strip()
    if not 0 < len(clean_name) <= MAX_NAME_LENGTH:
        raise InvalidCampaignDraft(f"Name must be 1-{MAX_NAME_LENGTH} characters")
    if not 0 < len(clean_description) <= MAX_DESCRIPTION_LENGTH:
        raise InvalidCampaignDraft(f"Description must be 1-{MAX_DESCRIPTION_LENGTH} characters")
    goal: int = parse_amount(goal_text)
    if goal < MIN_GOAL:
        raise InvalidAmount(f"Goal must be at least {format_amount(MIN_GOAL)}")
    at: int = now_unix() if now is None else now
    if deadline <= at:
        raise InvalidCampaignDraft("Deadline must be in the future")
    return CampaignDraft(
        name=clean_name,
        description=clean_description,
        goal_amount=goal,
        deadline=deadline,
    )


class CampaignCatalog:
    """Read side over every campaign a registry created, plus campaign creation."""

    def __init__(
        self,
        ledger: Ledger,
        deployments: DeploymentRegistry,
        chain_id: int | None,
    ) -> None:
        self.ledger: Ledger = ledger
        self.deployments: DeploymentRegistry = deployments
        self.chain_id: int | None = chain_id

    async def campaign_addresses(self) -> list[str]:
        addrs: DeploymentAddresses = self.deployments.require(self.chain_id)
        return await self.ledger.list_campaigns(addrs.registry)

    async def list_campaigns(self, actor: str | None = None, now: int | None = None) -> list[CampaignView]:
        """All campaigns, newest first."""
        refs: list[str] = await self.campaign_addresses()
        snapshots: list[RawCampaignSnapshot] = await asyncio.gather(
            *(self.ledger.read_campaign(ref, actor) for ref in refs)
        )
        at: int = now_unix() if now is None else now
        views: list[CampaignView] = [project(s, at) for s in snapshots]
        views.reverse()
        logger.info("Campaigns loaded", chain_id=self.chain_id, count=len(views))
        return views

    async def my_donations(self, actor: str, now: int | None = None) -> list[CampaignView]:
        views: list[CampaignView] = await self.list_campaigns(actor, now)
        return [v for v in views if v.donation > 0]

    async def load(self, campaign: str, actor: str | None = None, now: int | None = None) -> CampaignView:
        snapshot: RawCampaignSnapshot = await self.ledger.read_campaign(campaign, actor)
        return project(snapshot, now)

    async def create_campaign(
        self,
        session: SigningSession,
        name: str,
        description: str,
        goal_text: str,
        deadline: int,
        now: int | None = None,
    ) -> TransactionReceipt:
        if not session.connected:
            raise SessionRequired("Connect a wallet to create a campaign")
        addrs: DeploymentAddresses = self.deployments.require(session.chain_id)
        draft: CampaignDraft = validate_draft(name, description, goal_text, deadline, now)

        logger.info("Creating campaign", name=draft.name, goal_amount=draft.goal_amount)
        pending: PendingTransaction = await self.ledger.create_campaign(
            session,
            addrs.registry,
            draft.name,
            draft.description,
            draft.goal_amount,
            draft.deadline,
        )
        receipt: TransactionReceipt = await pending.wait()
        if not receipt.succeeded:
            raise LedgerRejected("Transaction reverted")
        logger.info("Campaign created", tx_hash=receipt.tx_hash)
        return receipt


# -- Presentation ----------------------------------------------------------


def summarize(view: CampaignView) -> CampaignSummaryDict:
    return CampaignSummaryDict(
        address=view.address,
        name=view.name,
        description=view.description,
        creator=view.creator,
        creator_short=short_address(view.creator),
        token=view.token,
        status=view.status.value,
        goal_amount=view.goal_amount,
        total_raised=view.total_raised,
        goal_display=format_amount(view.goal_amount),
        raised_display=format_amount(view.total_raised),
        progress_percent=view.progress_percent,
        goal_met=view.goal_met,
        expired=view.expired,
        withdrawn=view.withdrawn,
        cancelled=view.cancelled,
        deadline=view.deadline,
        deadline_display=format_deadline(view.deadline),
        time_label=(
            f"Ended {format_deadline(view.deadline)}" if view.expired else view.time_remaining
        ),
    )


def fee_preview(view: CampaignView) -> FeePreviewDict:
    split: FeeSplit = fee_split(view.total_raised, view.fee_bps)
    return FeePreviewDict(
        fee_bps=view.fee_bps,
        fee_percent=format_bps(view.fee_bps),
        fee=split.fee,
        net=split.net,
        fee_display=format_amount(split.fee),
        net_display=format_amount(split.net),
    )


def describe(view: CampaignView) -> CampaignDetailDict:
    actions: ActionSet = actions_for(view)
    return CampaignDetailDict(
        campaign=summarize(view),
        actor=view.actor,
        donation=view.donation,
        donation_display=format_amount(view.donation),
        actions=ActionSetDict(
            can_donate=actions.can_donate,
            can_withdraw=actions.can_withdraw,
            can_cancel=actions.can_cancel,
            can_refund=actions.can_refund,
        ),
        fee_preview=fee_preview(view),
    )
