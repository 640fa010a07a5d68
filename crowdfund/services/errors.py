"""Shared exception hierarchy for crowdfund services."""


class CrowdfundError(Exception):
    """Base exception for all crowdfund errors."""


# ── Validation ────────────────────────────────────────────────────────────────


class ValidationError(CrowdfundError):
    """Local validation failed; nothing was sent to the ledger."""


class InvalidAmount(ValidationError):
    """Amount text is not a non-negative decimal with at most 6 fractional digits."""


class InvalidCampaignDraft(ValidationError):
    """Campaign creation input is out of bounds."""


# ── Session / configuration ───────────────────────────────────────────────────


class SessionRequired(CrowdfundError):
    """A mutating call needs a signing session with an actor address."""


class ConfigurationMissing(CrowdfundError):
    """No registry/token addresses are configured for a chain."""

    def __init__(self, chain_id: int | None) -> None:
        self.chain_id = chain_id
        super().__init__(f"No contracts deployed on chain {chain_id}.")


# ── Attempt ───────────────────────────────────────────────────────────────────


class AttemptError(CrowdfundError):
    """Base exception for attempts rejected client-side."""


class AttemptInFlight(AttemptError):
    """Another attempt for the same campaign and actor has not finished."""


class ActionNotPermitted(AttemptError):
    """The current campaign state does not allow the action for this actor."""

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"Action '{action}' is not available for this campaign")


# ── Transaction ───────────────────────────────────────────────────────────────


class TransactionError(CrowdfundError):
    """Base exception for failures of a submitted (or about to be signed) call."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class UserDeclined(TransactionError):
    """The signing step was rejected."""


class LedgerRejected(TransactionError):
    """The call reached the ledger and was refused."""


class TransportFailure(TransactionError):
    """The call could not be delivered or confirmed."""
