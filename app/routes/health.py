"""Health endpoints."""

from fastapi import APIRouter, Depends

from app.dependencies import get_deployments
from app.schemas.campaigns import DeploymentResponse
from app.schemas.common import HealthResponse
from crowdfund.services.deployments import DeploymentRegistry
from crowdfund.services.schemas.chain import DeploymentAddresses

router: APIRouter = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/deployments", response_model=list[DeploymentResponse])
def deployments(registry: DeploymentRegistry = Depends(get_deployments)) -> list[dict[str, object]]:
    """Chains with contracts configured."""
    result: list[dict[str, object]] = []
    for chain_id in registry.chains():
        addrs: DeploymentAddresses | None = registry.lookup(chain_id)
        if addrs is not None:
            result.append({"chain_id": chain_id, "registry": addrs.registry, "token": addrs.token})
    return result
