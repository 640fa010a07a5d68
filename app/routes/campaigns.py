"""Campaign endpoints: thin routes, logic in services."""

from fastapi import APIRouter, Depends, Query

from app.dependencies import get_api_key, get_catalog
from app.schemas.campaigns import CampaignDetailResponse, CampaignSummaryResponse
from app.schemas.common import ErrorResponse
from crowdfund.services._types import CampaignDetailDict, CampaignSummaryDict
from crowdfund.services.catalog import CampaignCatalog, describe, summarize

router: APIRouter = APIRouter(
    prefix="/api",
    tags=["campaigns"],
    dependencies=[Depends(get_api_key)],
    responses={
        502: {"model": ErrorResponse, "description": "Ledger unreachable"},
        503: {"model": ErrorResponse, "description": "No contracts deployed on the chain"},
    },
)


@router.get("/campaigns", response_model=list[CampaignSummaryResponse])
async def list_campaigns(
    actor: str | None = Query(None),
    catalog: CampaignCatalog = Depends(get_catalog),
) -> list[CampaignSummaryDict]:
    return [summarize(v) for v in await catalog.list_campaigns(actor)]


@router.get("/campaigns/{address}", response_model=CampaignDetailResponse)
async def get_campaign(
    address: str,
    actor: str | None = Query(None),
    catalog: CampaignCatalog = Depends(get_catalog),
) -> CampaignDetailDict:
    return describe(await catalog.load(address, actor))


@router.get("/donors/{actor}/campaigns", response_model=list[CampaignSummaryResponse])
async def donor_campaigns(
    actor: str,
    catalog: CampaignCatalog = Depends(get_catalog),
) -> list[CampaignSummaryDict]:
    return [summarize(v) for v in await catalog.my_donations(actor)]
