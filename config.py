"""Application settings: single file, Pydantic-based.

Deployments:
  - CROWDFUND_DEPLOYMENTS (JSON) maps chain id -> {"registry": ..., "token": ...}
  - a chain whose registry is the zero address counts as "not deployed"
"""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def _project_root() -> Path:
    """Project root. config.py lives at the root."""
    return Path(__file__).resolve().parent


def _ensure_env_loaded() -> None:
    """Load .env from project root (then its parent). Idempotent."""
    root: Path = _project_root()
    for candidate in (root / ".env", root.parent / ".env"):
        if candidate.exists():
            load_dotenv(candidate, override=False)


_ensure_env_loaded()


class DeploymentEntry(BaseModel):
    registry: str = Field(default=ZERO_ADDRESS, description="Campaign factory address")
    token: str = Field(default=ZERO_ADDRESS, description="ERC-20 token donations are paid in")


# Sepolia testnet and Anvil local devnet. Fill in after deploying the contracts.
DEFAULT_DEPLOYMENTS: dict[int, DeploymentEntry] = {
    11155111: DeploymentEntry(),
    31337: DeploymentEntry(),
}


class ChainSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CHAIN_",
        env_file=(str(_project_root() / ".env"), ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    rpc_url: str = Field(default="http://127.0.0.1:8545")
    chain_id: int = Field(default=31337)
    retry_attempts: int = Field(default=3)
    retry_delay: float = Field(default=1.0)
    receipt_poll_interval: float = Field(default=1.0)


class WalletSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="WALLET_",
        env_file=(str(_project_root() / ".env"), ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    private_key: str | None = Field(default=None, description="Hex key used by the CLI to sign")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CROWDFUND_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: str = Field(default="development")
    debug: bool = Field(default=False)
    api_key: str | None = Field(default=None, description="API key for the HTTP API")
    deployments: dict[int, DeploymentEntry] = Field(
        default_factory=lambda: dict(DEFAULT_DEPLOYMENTS)
    )

    chain: ChainSettings = Field(default_factory=ChainSettings)
    wallet: WalletSettings = Field(default_factory=WalletSettings)


@lru_cache
def get_settings() -> Settings:
    return Settings()
