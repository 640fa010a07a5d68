"""Tests for the crowdfund CLI via Typer's CliRunner."""

import pytest
from conftest import CAMPAIGN, CHAIN_ID, CREATOR, DONOR, FakeLedger, make_snapshot
from rich.console import Console
from typer.testing import CliRunner

from config import ChainSettings, Settings
from crowdfund.cli import main
from crowdfund.services.deployments import DeploymentRegistry
from crowdfund.services.schemas.chain import SigningSession

runner: CliRunner = CliRunner()


@pytest.fixture()
def cli_ledger(
    monkeypatch: pytest.MonkeyPatch,
    ledger: FakeLedger,
    deployments: DeploymentRegistry,
) -> FakeLedger:
    monkeypatch.setattr(main, "_build_ledger", lambda: ledger)
    monkeypatch.setattr(main, "_deployments", lambda: deployments)
    monkeypatch.setattr(main, "get_settings", lambda: Settings(chain=ChainSettings(chain_id=CHAIN_ID)))
    monkeypatch.setattr(main, "console", Console(width=200))
    return ledger


def _connect_as(monkeypatch: pytest.MonkeyPatch, address: str | None) -> None:
    session: SigningSession = SigningSession(address=address, chain_id=CHAIN_ID)
    monkeypatch.setattr(main, "_connect", lambda yes: session)


class TestParseDeadline:
    def test_midnight_utc(self) -> None:
        assert main.parse_deadline("2023-11-14") == 1_699_920_000


class TestReadCommands:
    def test_campaigns(self, cli_ledger: FakeLedger) -> None:
        result = runner.invoke(main.app, ["campaigns"])
        assert result.exit_code == 0
        assert "Fund my open-source project" in result.output
        assert "active" in result.output

    def test_campaigns_empty(self, monkeypatch: pytest.MonkeyPatch, cli_ledger: FakeLedger) -> None:
        monkeypatch.setattr(main, "_build_ledger", lambda: FakeLedger())
        result = runner.invoke(main.app, ["campaigns"])
        assert result.exit_code == 0
        assert "No campaigns yet" in result.output

    def test_my_donations_empty(self, cli_ledger: FakeLedger) -> None:
        result = runner.invoke(main.app, ["my-donations", DONOR])
        assert result.exit_code == 0
        assert "haven't donated" in result.output

    def test_show_with_actor(self, cli_ledger: FakeLedger) -> None:
        cli_ledger.campaigns[CAMPAIGN] = make_snapshot(total_raised=1_000_000000)
        result = runner.invoke(main.app, ["show", CAMPAIGN, "--actor", CREATOR])
        assert result.exit_code == 0
        assert "withdraw" in result.output
        assert "Creator receives" in result.output
        assert "975.00" in result.output

    def test_missing_deployment(self, monkeypatch: pytest.MonkeyPatch, cli_ledger: FakeLedger) -> None:
        monkeypatch.setattr(main, "_deployments", lambda: DeploymentRegistry({}))
        result = runner.invoke(main.app, ["campaigns"])
        assert result.exit_code == 1
        assert "No contracts deployed" in result.output


class TestWriteCommands:
    def test_donate(self, monkeypatch: pytest.MonkeyPatch, cli_ledger: FakeLedger) -> None:
        _connect_as(monkeypatch, DONOR)
        result = runner.invoke(main.app, ["donate", CAMPAIGN, "12.5", "--yes"])
        assert result.exit_code == 0
        assert "Approving token spend..." in result.output
        assert "Donation successful!" in result.output
        assert cli_ledger.submitted() == ["approve", "donate"]

    def test_donate_invalid_amount(self, monkeypatch: pytest.MonkeyPatch, cli_ledger: FakeLedger) -> None:
        _connect_as(monkeypatch, DONOR)
        result = runner.invoke(main.app, ["donate", CAMPAIGN, "1.1234567", "--yes"])
        assert result.exit_code == 1
        assert cli_ledger.submitted() == []

    def test_withdraw_not_permitted(self, monkeypatch: pytest.MonkeyPatch, cli_ledger: FakeLedger) -> None:
        _connect_as(monkeypatch, DONOR)
        result = runner.invoke(main.app, ["withdraw", CAMPAIGN, "--yes"])
        assert result.exit_code == 1
        assert "not available" in result.output

    def test_refund_requires_wallet(self, monkeypatch: pytest.MonkeyPatch, cli_ledger: FakeLedger) -> None:
        _connect_as(monkeypatch, None)
        result = runner.invoke(main.app, ["refund", CAMPAIGN, "--yes"])
        assert result.exit_code == 1

    def test_cancel(self, monkeypatch: pytest.MonkeyPatch, cli_ledger: FakeLedger) -> None:
        _connect_as(monkeypatch, CREATOR)
        result = runner.invoke(main.app, ["cancel", CAMPAIGN, "--yes"])
        assert result.exit_code == 0
        assert "Donors can now claim refunds" in result.output
        assert cli_ledger.campaigns[CAMPAIGN].cancelled is True

    def test_create(self, monkeypatch: pytest.MonkeyPatch, cli_ledger: FakeLedger) -> None:
        _connect_as(monkeypatch, CREATOR)
        result = runner.invoke(
            main.app,
            [
                "create",
                "--name", "Roof repair",
                "--description", "New tiles",
                "--goal", "500",
                "--deadline", "2999-12-31",
                "--yes",
            ],
        )
        assert result.exit_code == 0
        assert "Campaign created" in result.output
        assert cli_ledger.submitted() == ["create_campaign"]

    def test_create_bad_deadline(self, monkeypatch: pytest.MonkeyPatch, cli_ledger: FakeLedger) -> None:
        _connect_as(monkeypatch, CREATOR)
        result = runner.invoke(
            main.app,
            ["create", "-n", "Roof", "-d", "Tiles", "-g", "500", "--deadline", "31/12/2999"],
        )
        assert result.exit_code == 2
        assert cli_ledger.calls == []
