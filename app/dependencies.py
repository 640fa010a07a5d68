"""FastAPI dependencies: ledger, catalog and auth."""

from functools import lru_cache

from fastapi import Depends, Header, HTTPException

from config import get_settings
from crowdfund.services.catalog import CampaignCatalog
from crowdfund.services.deployments import DeploymentRegistry
from crowdfund.services.ledger import Ledger


def get_api_key(x_api_key: str = Header(default="")) -> str:
    """Validate API key when one is configured."""
    expected: str | None = get_settings().api_key
    if not expected:
        return ""  # auth disabled when no key configured
    if x_api_key != expected:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")
    return x_api_key


@lru_cache
def get_ledger() -> Ledger:
    from crowdfund.services.chain_client import EvmLedger

    return EvmLedger()


def get_deployments() -> DeploymentRegistry:
    return DeploymentRegistry.from_settings()


def get_catalog(
    ledger: Ledger = Depends(get_ledger),
    deployments: DeploymentRegistry = Depends(get_deployments),
) -> CampaignCatalog:
    return CampaignCatalog(ledger, deployments, get_settings().chain.chain_id)
