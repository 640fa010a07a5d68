"""Shared fixtures: in-memory fake ledger implementing the Ledger protocol."""

import asyncio
import time
from dataclasses import replace

import pytest

from crowdfund.services.deployments import DeploymentRegistry
from crowdfund.services.errors import TransactionError
from crowdfund.services.schemas.campaign import RawCampaignSnapshot
from crowdfund.services.schemas.chain import (
    DeploymentAddresses,
    SigningSession,
    TransactionReceipt,
)

NOW = int(time.time())
DAY = 86400
CHAIN_ID = 31337

REGISTRY = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
TOKEN = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"
CAMPAIGN = "0xCafac3dD18aC6c6e92c921884f9E4176737C052c"
CREATOR = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
DONOR = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
STRANGER = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"


def make_snapshot(**overrides: object) -> RawCampaignSnapshot:
    base: RawCampaignSnapshot = RawCampaignSnapshot(
        address=CAMPAIGN,
        name="Fund my open-source project",
        description="Hosting and CI for a year.",
        creator=CREATOR,
        goal_amount=1_000_000000,
        deadline=NOW + 3 * DAY,
        total_raised=0,
        withdrawn=False,
        cancelled=False,
        fee_bps=250,
        token=TOKEN,
    )
    return replace(base, **overrides)


class FakePending:
    def __init__(self, ledger: "FakeLedger", tx_hash: str, method: str, effect: object) -> None:
        self.tx_hash: str = tx_hash
        self._ledger: FakeLedger = ledger
        self._method: str = method
        self._effect = effect

    async def wait(self) -> TransactionReceipt:
        self._ledger.calls.append(("wait", self._method))
        gate: asyncio.Event | None = self._ledger.gates.get(self._method)
        if gate is not None:
            await gate.wait()
        error: TransactionError | None = self._ledger.fail_on_wait.get(self._method)
        if error is not None:
            raise error
        if self._method in self._ledger.reverted:
            return TransactionReceipt(tx_hash=self.tx_hash, block_number=1, succeeded=False)
        self._effect()
        return TransactionReceipt(tx_hash=self.tx_hash, block_number=1, succeeded=True)


class FakeLedger:
    """Authoritative in-memory ledger. Effects apply on confirmation."""

    def __init__(self) -> None:
        self.campaigns: dict[str, RawCampaignSnapshot] = {}
        self.donations: dict[tuple[str, str], int] = {}
        self.allowances: dict[tuple[str, str, str], int] = {}
        self.registries: dict[str, list[str]] = {}
        self.calls: list[tuple[str, ...]] = []
        self.fail_on_submit: dict[str, TransactionError] = {}
        self.fail_on_wait: dict[str, TransactionError] = {}
        self.fail_on_read: TransactionError | None = None
        self.reverted: set[str] = set()
        self.gates: dict[str, asyncio.Event] = {}
        self._tx_counter: int = 0

    # -- setup ------------------------------------------------------------------

    def add_campaign(self, snapshot: RawCampaignSnapshot, registry: str = REGISTRY) -> None:
        self.campaigns[snapshot.address] = snapshot
        self.registries.setdefault(registry, []).append(snapshot.address)

    def set_donation(self, campaign: str, actor: str, amount: int) -> None:
        self.donations[(campaign, actor.lower())] = amount

    def set_allowance(self, owner: str, spender: str, amount: int, token: str = TOKEN) -> None:
        self.allowances[(token, owner.lower(), spender.lower())] = amount

    def methods(self) -> list[str]:
        return [c[0] for c in self.calls]

    def submitted(self) -> list[str]:
        reads: set[str] = {"read_campaign", "allowance", "list_campaigns", "wait"}
        return [c[0] for c in self.calls if c[0] not in reads]

    # -- reads ------------------------------------------------------------------

    async def read_campaign(self, campaign: str, actor: str | None = None) -> RawCampaignSnapshot:
        self.calls.append(("read_campaign", campaign))
        if self.fail_on_read is not None:
            raise self.fail_on_read
        donation: int = self.donations.get((campaign, actor.lower()), 0) if actor else 0
        return replace(self.campaigns[campaign], actor=actor, donation=donation)

    async def allowance(self, token: str, owner: str, spender: str) -> int:
        self.calls.append(("allowance", owner))
        return self.allowances.get((token, owner.lower(), spender.lower()), 0)

    async def list_campaigns(self, registry: str) -> list[str]:
        self.calls.append(("list_campaigns", registry))
        return list(self.registries.get(registry, []))

    # -- writes -----------------------------------------------------------------

    def _pending(self, method: str, effect: object) -> FakePending:
        self.calls.append((method,))
        error: TransactionError | None = self.fail_on_submit.get(method)
        if error is not None:
            raise error
        self._tx_counter += 1
        return FakePending(self, f"0x{self._tx_counter:064x}", method, effect)

    async def approve(self, session: SigningSession, token: str, spender: str, amount: int) -> FakePending:
        def _effect() -> None:
            self.allowances[(token, str(session.address).lower(), spender.lower())] = amount

        return self._pending("approve", _effect)

    async def donate(self, session: SigningSession, campaign: str, amount: int) -> FakePending:
        def _effect() -> None:
            key: tuple[str, str] = (campaign, str(session.address).lower())
            snap: RawCampaignSnapshot = self.campaigns[campaign]
            self.campaigns[campaign] = replace(snap, total_raised=snap.total_raised + amount)
            self.donations[key] = self.donations.get(key, 0) + amount
            allowance_key: tuple[str, str, str] = (snap.token, key[1], campaign.lower())
            self.allowances[allowance_key] = self.allowances.get(allowance_key, 0) - amount

        return self._pending("donate", _effect)

    async def withdraw(self, session: SigningSession, campaign: str) -> FakePending:
        def _effect() -> None:
            self.campaigns[campaign] = replace(self.campaigns[campaign], withdrawn=True)

        return self._pending("withdraw", _effect)

    async def cancel(self, session: SigningSession, campaign: str) -> FakePending:
        def _effect() -> None:
            self.campaigns[campaign] = replace(self.campaigns[campaign], cancelled=True)

        return self._pending("cancel", _effect)

    async def claim_refund(self, session: SigningSession, campaign: str) -> FakePending:
        def _effect() -> None:
            key: tuple[str, str] = (campaign, str(session.address).lower())
            snap: RawCampaignSnapshot = self.campaigns[campaign]
            refunded: int = self.donations.pop(key, 0)
            self.campaigns[campaign] = replace(snap, total_raised=snap.total_raised - refunded)

        return self._pending("claim_refund", _effect)

    async def create_campaign(
        self,
        session: SigningSession,
        registry: str,
        name: str,
        description: str,
        goal_amount: int,
        deadline: int,
    ) -> FakePending:
        def _effect() -> None:
            address: str = f"0x{len(self.campaigns) + 1:040x}"
            self.add_campaign(
                make_snapshot(
                    address=address,
                    name=name,
                    description=description,
                    creator=str(session.address),
                    goal_amount=goal_amount,
                    deadline=deadline,
                ),
                registry,
            )

        return self._pending("create_campaign", _effect)


@pytest.fixture()
def ledger() -> FakeLedger:
    fake: FakeLedger = FakeLedger()
    fake.add_campaign(make_snapshot())
    return fake


@pytest.fixture()
def deployments() -> DeploymentRegistry:
    return DeploymentRegistry({CHAIN_ID: DeploymentAddresses(registry=REGISTRY, token=TOKEN)})


@pytest.fixture()
def donor_session() -> SigningSession:
    return SigningSession(address=DONOR, chain_id=CHAIN_ID)


@pytest.fixture()
def creator_session() -> SigningSession:
    return SigningSession(address=CREATOR, chain_id=CHAIN_ID)
