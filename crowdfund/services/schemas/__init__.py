"""Shared dataclasses for crowdfund services."""

from crowdfund.services.schemas.attempt import AttemptResult, TransactionAttempt
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

__all__ = [
    # Campaign schemas
    "ActionSet",
    "CampaignView",
    "FeeSplit",
    "RawCampaignSnapshot",
    # Attempt schemas
    "AttemptResult",
    "TransactionAttempt",
    # Chain schemas
    "DeploymentAddresses",
    "SigningSession",
    "TransactionReceipt",
]
