"""Per-chain contract locations."""

from collections.abc import Mapping

import structlog

from config import ZERO_ADDRESS, DeploymentEntry, get_settings
from crowdfund.services.errors import ConfigurationMissing
from crowdfund.services.schemas.chain import DeploymentAddresses

logger = structlog.get_logger(__name__)


class DeploymentRegistry:
    """Looks up the campaign registry and token addresses for a chain."""

    def __init__(self, table: Mapping[int, DeploymentAddresses]) -> None:
        self._table: dict[int, DeploymentAddresses] = dict(table)

    @classmethod
    def from_settings(cls) -> "DeploymentRegistry":
        entries: dict[int, DeploymentEntry] = get_settings().deployments
        return cls(
            {
                chain_id: DeploymentAddresses(registry=e.registry, token=e.token)
                for chain_id, e in entries.items()
            }
        )

    def lookup(self, chain_id: int | None) -> DeploymentAddresses | None:
        if chain_id is None:
            return None
        addrs: DeploymentAddresses | None = self._table.get(chain_id)
        if addrs is None or addrs.registry.lower() == ZERO_ADDRESS:
            return None
        return addrs

    def require(self, chain_id: int | None) -> DeploymentAddresses:
        addrs: DeploymentAddresses | None = self.lookup(chain_id)
        if addrs is None:
            logger.warning("No deployment configured", chain_id=chain_id)
            raise ConfigurationMissing(chain_id)
        return addrs

    def chains(self) -> list[int]:
        return sorted(c for c in self._table if self.lookup(c) is not None)
