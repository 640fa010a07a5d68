"""Main CLI entry point."""

import asyncio
from datetime import UTC, date, datetime
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from config import get_settings
from crowdfund.services.catalog import CampaignCatalog, describe, summarize
from crowdfund.services.deployments import DeploymentRegistry
from crowdfund.services.errors import CrowdfundError
from crowdfund.services.ledger import Ledger
from crowdfund.services.orchestrator import TransactionOrchestrator
from crowdfund.services.schemas.attempt import AttemptResult, TransactionAttempt
from crowdfund.services.schemas.campaign import CampaignView
from crowdfund.services.schemas.chain import SigningSession

app = typer.Typer(
    name="crowdfund",
    help="Token crowdfunding campaign client",
    add_completion=False
)

console = Console()

STATUS_STYLES = {
    "active": "green",
    "goal_met": "bright_green",
    "expired": "yellow",
    "withdrawn": "dim",
    "cancelled": "red",
}


def _build_ledger() -> Ledger:
    from crowdfund.services.chain_client import EvmLedger

    return EvmLedger()


def _deployments() -> DeploymentRegistry:
    return DeploymentRegistry.from_settings()


def _confirm(description: str) -> bool:
    return typer.confirm(f"Sign: {description}?", default=True)


def _connect(yes: bool) -> SigningSession:
    from crowdfund.services.chain_client import LocalAccountProvider

    provider = LocalAccountProvider(authorize=None if yes else _confirm)
    return asyncio.run(provider.connect())


def _catalog(ledger: Ledger) -> CampaignCatalog:
    return CampaignCatalog(ledger, _deployments(), get_settings().chain.chain_id)


def parse_deadline(raw: str) -> int:
    """Parse a date like '2026-12-31' into a unix timestamp at 00:00 UTC."""
    try:
        day = date.fromisoformat(raw)
    except ValueError:
        raise typer.BadParameter(
            f"Invalid deadline '{raw}'. Expected format: YYYY-MM-DD (e.g., 2026-12-31)"
        )
    return int(datetime(day.year, day.month, day.day, tzinfo=UTC).timestamp())


def _fail(exc: CrowdfundError) -> None:
    console.print(f"[red]{exc}[/red]")
    raise typer.Exit(code=1)


def _print_campaigns(views: list[CampaignView], title: str, empty: str) -> None:
    if not views:
        console.print(f"[dim]{empty}[/dim]")
        return

    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("Status")
    table.add_column("Raised", justify="right")
    table.add_column("Goal", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Time")
    table.add_column("Address", style="dim")

    for view in views:
        s = summarize(view)
        style = STATUS_STYLES.get(s["status"], "white")
        table.add_row(
            s["name"],
            f"[{style}]{s['status']}[/{style}]",
            f"${s['raised_display']}",
            f"${s['goal_display']}",
            f"{s['progress_percent']}%",
            s["time_label"],
            s["address"],
        )

    console.print(table)


def _print_result(result: AttemptResult) -> None:
    if result.succeeded:
        console.print(f"[green]{result.message}[/green]")
    else:
        console.print(f"[red]{result.message}[/red]")
    for tx_hash in result.tx_hashes:
        console.print(f"  tx {tx_hash}")
    if not result.succeeded:
        raise typer.Exit(code=1)


def _on_transition(attempt: TransactionAttempt, message: str) -> None:
    if message and attempt.in_flight:
        console.print(f"[cyan]{message}[/cyan]")


def _run_action(address: str, yes: bool, action: str, amount: Optional[str] = None) -> None:
    ledger = _build_ledger()
    session = _connect(yes)
    orchestrator = TransactionOrchestrator(ledger, session, address, listener=_on_transition)

    async def _go() -> AttemptResult:
        await orchestrator.refresh()
        if action == "donate":
            return await orchestrator.donate(amount or "")
        if action == "withdraw":
            return await orchestrator.withdraw()
        if action == "cancel":
            return await orchestrator.cancel()
        return await orchestrator.claim_refund()

    try:
        result = asyncio.run(_go())
    except CrowdfundError as exc:
        _fail(exc)
    else:
        _print_result(result)


@app.command()
def campaigns(
    actor: Optional[str] = typer.Option(None, "--actor", "-a", help="Read donations for this address")
):
    """List all campaigns, newest first."""
    catalog = _catalog(_build_ledger())
    try:
        views = asyncio.run(catalog.list_campaigns(actor))
    except CrowdfundError as exc:
        _fail(exc)
    else:
        _print_campaigns(views, "Campaigns", "No campaigns yet. Be the first to create one!")


@app.command("my-donations")
def my_donations(
    actor: str = typer.Argument(..., help="Donor address")
):
    """List campaigns the actor has donated to."""
    catalog = _catalog(_build_ledger())
    try:
        views = asyncio.run(catalog.my_donations(actor))
    except CrowdfundError as exc:
        _fail(exc)
    else:
        _print_campaigns(views, "My Donations", "You haven't donated to any campaigns yet.")


@app.command()
def show(
    address: str = typer.Argument(..., help="Campaign address"),
    actor: Optional[str] = typer.Option(None, "--actor", "-a", help="Evaluate actions for this address")
):
    """Show one campaign with the actions available to an actor."""
    catalog = _catalog(_build_ledger())
    try:
        view = asyncio.run(catalog.load(address, actor))
    except CrowdfundError as exc:
        _fail(exc)
        return

    detail = describe(view)
    s = detail["campaign"]
    console.print(f"[bold]{s['name']}[/bold] by {s['creator_short']}")
    console.print(s["description"])

    table = Table(show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Status", s["status"])
    table.add_row("Raised", f"${s['raised_display']} of ${s['goal_display']} ({s['progress_percent']}%)")
    table.add_row("Deadline", s["deadline_display"])
    table.add_row("Time", s["time_label"])
    if actor:
        table.add_row("Your donation", f"${detail['donation_display']}")
    actions = [name.removeprefix("can_") for name, allowed in detail["actions"].items() if allowed]
    table.add_row("Actions", ", ".join(actions) or "none")
    if detail["actions"]["can_withdraw"]:
        fee = detail["fee_preview"]
        table.add_row(f"Platform fee ({fee['fee_percent']})", f"-${fee['fee_display']}")
        table.add_row("Creator receives", f"${fee['net_display']}")
    console.print(table)


@app.command()
def donate(
    address: str = typer.Argument(..., help="Campaign address"),
    amount: str = typer.Argument(..., help="Amount in tokens, up to 6 decimals"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Sign without asking")
):
    """Donate to a campaign (approves the token first when needed)."""
    _run_action(address, yes, "donate", amount)


@app.command()
def withdraw(
    address: str = typer.Argument(..., help="Campaign address"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Sign without asking")
):
    """Withdraw the raised funds (creator only, goal met)."""
    _run_action(address, yes, "withdraw")


@app.command()
def cancel(
    address: str = typer.Argument(..., help="Campaign address"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Sign without asking")
):
    """Cancel a campaign (creator only)."""
    _run_action(address, yes, "cancel")


@app.command()
def refund(
    address: str = typer.Argument(..., help="Campaign address"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Sign without asking")
):
    """Claim back a donation from a cancelled or failed campaign."""
    _run_action(address, yes, "refund")


@app.command()
def create(
    name: str = typer.Option(..., "--name", "-n", help="Campaign name (max 80 chars)"),
    description: str = typer.Option(..., "--description", "-d", help="Description (max 500 chars)"),
    goal: str = typer.Option(..., "--goal", "-g", help="Goal amount in tokens"),
    deadline: str = typer.Option(..., "--deadline", help="Deadline date (YYYY-MM-DD)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Sign without asking")
):
    """Create a new campaign through the registry."""
    ts = parse_deadline(deadline)
    session = _connect(yes)
    catalog = CampaignCatalog(_build_ledger(), _deployments(), session.chain_id)

    try:
        receipt = asyncio.run(catalog.create_campaign(session, name, description, goal, ts))
    except CrowdfundError as exc:
        _fail(exc)
        return

    console.print(f"[green]Campaign created[/green] (tx {receipt.tx_hash})")


if __name__ == "__main__":
    app()
