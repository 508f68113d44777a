"""CodeMarket CLI for fee previews, demos and replaying settlement scripts."""

import asyncio
import json
from pathlib import Path
from typing import Optional
import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from .config import CustodyMode, Settings, get_settings
from .engine import SettlementEngine
from .errors import SettlementError
from .ledger.memory import InMemoryHost
from .log import configure_logging
from .settlement.fees import (
    PLATFORM_FEE_PERCENT,
    TIP_FEE_PERCENT,
    breakdown,
    tip_breakdown,
)

app = typer.Typer(name="codemarket", help="CodeMarket - escrow for coding sessions and reviews")
console = Console()

# op name -> argument names, in call order
OPERATIONS: dict[str, tuple[str, ...]] = {
    "create_session": ("provider", "amount"),
    "confirm_session_completion": ("session_id",),
    "cancel_session": ("session_id",),
    "create_review_request": ("reviewer", "bounty"),
    "complete_review": ("review_id",),
    "cancel_review": ("review_id",),
    "send_tip": ("recipient", "amount"),
    "withdraw_platform_earnings": ("amount",),
}

# Arguments that must be JSON integers; the rest are account names
INTEGER_ARGUMENTS = {"amount", "bounty", "session_id", "review_id"}


def run_async(coro):
    """Run async function in sync context."""
    return asyncio.run(coro)


def _fmt(amount: int) -> str:
    return f"{amount:,}"


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, help="Log level (defaults to settings)"),
    log_json: bool = typer.Option(False, "--log-json", help="Emit JSON log lines"),
):
    """Configure logging before any command runs."""
    settings = get_settings()
    try:
        configure_logging(
            level=log_level or settings.log_level,
            json=log_json or settings.log_json,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-level")


# ============================================================
# Fee Commands
# ============================================================

@app.command()
def fees(amount: int = typer.Argument(..., help="Amount in base units")):
    """Show how an amount splits between payee and platform."""
    table = Table(title=f"Fee breakdown for {_fmt(amount)}")
    table.add_column("Kind", style="cyan")
    table.add_column("Rate", justify="right")
    table.add_column("Fee", justify="right")
    table.add_column("Payee receives", justify="right", style="green")

    session = breakdown(amount)
    tip = tip_breakdown(amount)
    table.add_row("session / review", f"{PLATFORM_FEE_PERCENT}%", _fmt(session.fee), _fmt(session.payout))
    table.add_row("tip", f"{TIP_FEE_PERCENT}%", _fmt(tip.fee), _fmt(tip.payout))

    console.print(table)


# ============================================================
# Demo
# ============================================================

@app.command()
def demo():
    """Run a session settlement and a review cancellation end to end."""

    async def _demo():
        settings = Settings(custody_mode=CustodyMode.ESCROWED)
        host = InMemoryHost(
            balances={"requester": 5_000_000},
            escrow_account=settings.escrow_account,
        )
        with host.acting_as("platform"):
            engine = SettlementEngine(host, settings)

        console.print("[bold blue]Running CodeMarket settlement demo...[/]")

        # Session
        console.print("\n[bold]Step 1: Open a coding session[/]")
        with host.acting_as("requester"):
            session_id = await engine.create_session("provider", 2_000_000)
        session = engine.get_session(session_id)
        console.print(f"  [green]Session {session_id}:[/] amount {_fmt(session.amount)}, fee {_fmt(session.platform_fee)}")

        console.print("\n[bold]Step 2: Provider confirms[/]")
        with host.acting_as("provider"):
            await engine.confirm_session_completion(session_id)
        console.print(f"  Status: [yellow]{engine.get_session(session_id).status.value}[/]")

        console.print("\n[bold]Step 3: Requester confirms[/]")
        with host.acting_as("requester"):
            await engine.confirm_session_completion(session_id)
        console.print(f"  Status: [green]{engine.get_session(session_id).status.value}[/]")
        console.print(f"  Provider balance: {_fmt(host.balance_of('provider'))}")

        # Review
        console.print("\n[bold]Step 4: Post and cancel a review bounty[/]")
        with host.acting_as("requester"):
            review_id = await engine.create_review_request("reviewer", 500_000)
            await engine.cancel_review(review_id)
        console.print(f"  Review {review_id}: [yellow]{engine.get_review(review_id).status.value}[/]")

        console.print("\n" + "=" * 50)
        console.print(Panel.fit(
            f"[bold green]Demo Complete![/]\n\n"
            f"Requester balance: [cyan]{_fmt(host.balance_of('requester'))}[/]\n"
            f"Provider balance: [cyan]{_fmt(host.balance_of('provider'))}[/]\n"
            f"Escrow balance: [cyan]{_fmt(host.balance_of(settings.escrow_account))}[/]\n"
            f"Platform earnings: [green]{_fmt(engine.get_platform_earnings())}[/]",
            title="Summary",
            border_style="green",
        ))

    run_async(_demo())


# ============================================================
# Replay
# ============================================================

async def replay_script(
    script: dict,
    settings: Settings,
    stop_on_error: bool = False,
) -> tuple[list[dict], SettlementEngine, InMemoryHost]:
    """Replay a settlement script against a fresh in-memory deployment.

    Script shape:
        {
            "owner": "platform",
            "balances": {"alice": 3000000},
            "steps": [{"as": "alice", "op": "create_session",
                       "args": {"provider": "bob", "amount": 2000000}}]
        }

    Returns one outcome dict per executed step, plus the engine and host
    so callers can inspect the final state.
    """
    host = InMemoryHost(
        balances=script.get("balances", {}),
        escrow_account=settings.escrow_account,
    )
    with host.acting_as(script.get("owner", "platform")):
        engine = SettlementEngine(host, settings)

    outcomes = []
    for index, step in enumerate(script.get("steps", []), start=1):
        op = step.get("op")
        if not step.get("as"):
            raise typer.BadParameter(f"Step {index}: missing caller ('as')")
        if op not in OPERATIONS:
            raise typer.BadParameter(f"Step {index}: unknown operation {op!r}")

        args = step.get("args", {})
        try:
            call_args = [args[name] for name in OPERATIONS[op]]
        except KeyError as e:
            raise typer.BadParameter(f"Step {index}: missing argument {e.args[0]!r} for {op}")

        for name, value in zip(OPERATIONS[op], call_args):
            if name in INTEGER_ARGUMENTS:
                valid = isinstance(value, int) and not isinstance(value, bool)
                expected = "an integer"
            else:
                valid = isinstance(value, str)
                expected = "an account name"
            if not valid:
                raise typer.BadParameter(
                    f"Step {index}: {name!r} for {op} must be {expected}, got {value!r}"
                )

        outcome = {"step": index, "as": step.get("as"), "op": op}
        with host.acting_as(step.get("as")):
            try:
                outcome["result"] = await getattr(engine, op)(*call_args)
                outcome["ok"] = True
            except SettlementError as e:
                outcome["ok"] = False
                outcome["error"] = e.code

        outcomes.append(outcome)
        if stop_on_error and not outcome["ok"]:
            break

    return outcomes, engine, host


@app.command()
def replay(
    script_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON script"),
    stop_on_error: bool = typer.Option(False, help="Abort at the first failed step"),
    fee_accounting: bool = typer.Option(False, help="Skip deposits and tip transfers"),
):
    """Replay a JSON script of settlement operations."""
    script = json.loads(script_path.read_text())
    settings = Settings(
        custody_mode=CustodyMode.FEE_ACCOUNTING if fee_accounting else CustodyMode.ESCROWED,
    )

    outcomes, engine, host = run_async(replay_script(script, settings, stop_on_error))

    table = Table(title=f"Replay of {script_path.name}")
    table.add_column("#", justify="right")
    table.add_column("Caller", style="cyan")
    table.add_column("Operation")
    table.add_column("Outcome")

    for o in outcomes:
        if o["ok"]:
            result = "" if o["result"] is None else f" -> {o['result']}"
            table.add_row(str(o["step"]), str(o["as"]), o["op"], f"[green]ok{result}[/]")
        else:
            table.add_row(str(o["step"]), str(o["as"]), o["op"], f"[red]{o['error']}[/]")

    console.print(table)

    balances = Table(title="Balances")
    balances.add_column("Account", style="cyan")
    balances.add_column("Balance", justify="right")
    for account in sorted(host.balances):
        balances.add_row(account, _fmt(host.balances[account]))
    console.print(balances)

    console.print(f"[bold]Platform earnings:[/] {_fmt(engine.get_platform_earnings())}")

    if stop_on_error and outcomes and not outcomes[-1]["ok"]:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
