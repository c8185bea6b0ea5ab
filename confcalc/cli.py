"""confcalc CLI.

Commands:
- tier: Show the pricing tier in effect
- quote: Show every configured fee with net, VAT and gross
- charge: Compute the chargeable amount for a fee selector
- verify: Check a client-displayed amount against the server computation
- audit: Report pricing configuration gaps
- margin-vat: Margin-scheme VAT for a resale
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from confcalc.config import get_config
from confcalc.core.logging import configure_logging
from confcalc.flags.engine import compute_pricing_flags
from confcalc.models import Conference, FlagSeverity, Registration, to_instant
from confcalc.pricing.charge import compute_charge, resolve_fee, verify_client_amount
from confcalc.pricing.exceptions import ConfigurationError, PricingError, TamperedAmount
from confcalc.pricing.loader import load_conference
from confcalc.pricing.quote import current_pricing
from confcalc.pricing.tiers import resolve_tier
from confcalc.pricing.vat import margin_vat, round_amount
from confcalc.reporting.formatting import format_price, tier_display_name

app = typer.Typer(
    name="confcalc",
    help="confcalc - conference registration pricing engine",
    no_args_is_help=True,
)

console = Console()

_NOW_HELP = "Instant to price at (ISO date/datetime, default: now, UTC)"
_START_HELP = "Conference start date (overrides the config file)"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Price conference registrations from a pricing settings file."""
    config = get_config()
    configure_logging(
        level="DEBUG" if verbose else config.log_level,
        json_logs=config.log_format == "json",
    )


def _load(config_file: Path, conference_start: Optional[str]) -> Conference:
    try:
        conference = load_conference(config_file)
    except ConfigurationError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=2)
    if conference_start:
        conference = conference.model_copy(update={"start_date": _instant(conference_start)})
    return conference


def _pricing_failed(error: PricingError) -> typer.Exit:
    console.print(f"[red]✗[/red] {error}")
    return typer.Exit(code=2)


def _instant(value: Optional[str]) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    try:
        return to_instant(value)
    except ValueError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=2)


def _fee_selectors(conference: Conference) -> list[tuple[str, str]]:
    pricing = conference.pricing
    selectors = [
        ("early_bird", "Early Bird"),
        ("regular", "Regular"),
        ("late", "Late Registration"),
        ("student", "Student"),
        ("accompanying_person", "Accompanying person"),
    ]
    selectors += [(f"fee_type_{f.id}", f.name or f.id) for f in pricing.custom_fee_types]
    selectors += [(f"custom_{c.id}", c.name or c.id) for c in pricing.custom_fields]
    return selectors


@app.command()
def tier(
    config_file: Path = typer.Argument(..., help="Pricing config (YAML/JSON)"),
    now: Optional[str] = typer.Option(None, "--now", help=_NOW_HELP),
    conference_start: Optional[str] = typer.Option(None, "--conference-start", help=_START_HELP),
):
    """Show the pricing tier in effect."""
    conference = _load(config_file, conference_start)
    active = resolve_tier(conference.pricing, _instant(now), conference.start_date)
    console.print(f"[bold]Tier:[/bold] {tier_display_name(active)} ({active.value})")


@app.command()
def quote(
    config_file: Path = typer.Argument(..., help="Pricing config (YAML/JSON)"),
    now: Optional[str] = typer.Option(None, "--now", help=_NOW_HELP),
    conference_start: Optional[str] = typer.Option(None, "--conference-start", help=_START_HELP),
    currency: Optional[str] = typer.Option(None, "--currency", help="Price list to use"),
):
    """Show every configured fee with net, VAT and gross."""
    conference = _load(config_file, conference_start)
    at = _instant(now)
    try:
        summary = current_pricing(conference.pricing, at, conference.start_date, currency)
        rows = [
            (
                selector,
                label,
                resolve_fee(conference.pricing, selector, at, conference.start_date, currency),
            )
            for selector, label in _fee_selectors(conference)
        ]
    except PricingError as e:
        raise _pricing_failed(e)

    console.print(
        f"[bold]Tier:[/bold] {tier_display_name(summary.tier)}  "
        f"[bold]Currency:[/bold] {summary.currency}"
    )
    if summary.next_tier and summary.next_tier_date:
        console.print(
            f"  {tier_display_name(summary.next_tier)} from "
            f"{summary.next_tier_date.date().isoformat()}",
            style="dim",
        )

    table = Table(title="Registration fees")
    table.add_column("Selector", style="cyan")
    table.add_column("Fee")
    table.add_column("Net", justify="right")
    table.add_column("VAT", justify="right")
    table.add_column("Gross", justify="right", style="green")

    for selector, label, resolved in rows:
        table.add_row(
            selector,
            label,
            format_price(resolved.net_amount, resolved.currency),
            format_price(resolved.vat_amount, resolved.currency),
            format_price(resolved.gross_amount, resolved.currency),
        )
    console.print(table)


@app.command()
def charge(
    config_file: Path = typer.Argument(..., help="Pricing config (YAML/JSON)"),
    fee_selector: str = typer.Argument(..., help="Fee selector, e.g. regular or fee_type_vip"),
    now: Optional[str] = typer.Option(None, "--now", help=_NOW_HELP),
    conference_start: Optional[str] = typer.Option(None, "--conference-start", help=_START_HELP),
    as_json: bool = typer.Option(False, "--json", help="Print JSON"),
):
    """Compute the chargeable amount for a fee selector."""
    conference = _load(config_file, conference_start)
    at = _instant(now)
    try:
        result = compute_charge(Registration(fee_selector=fee_selector), conference, at)
    except PricingError as e:
        raise _pricing_failed(e)
    if as_json:
        typer.echo(json.dumps(result.model_dump()))
        return
    console.print(f"[bold]Charge:[/bold] {format_price(result.amount, result.currency)}")


@app.command()
def verify(
    config_file: Path = typer.Argument(..., help="Pricing config (YAML/JSON)"),
    fee_selector: str = typer.Argument(..., help="Fee selector persisted on the registration"),
    amount: float = typer.Argument(..., help="Amount the client displayed"),
    now: Optional[str] = typer.Option(None, "--now", help=_NOW_HELP),
    conference_start: Optional[str] = typer.Option(None, "--conference-start", help=_START_HELP),
):
    """Check a client-displayed amount against the server computation."""
    conference = _load(config_file, conference_start)
    try:
        result = verify_client_amount(
            amount, Registration(fee_selector=fee_selector), conference, _instant(now)
        )
    except TamperedAmount as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)
    except PricingError as e:
        raise _pricing_failed(e)
    console.print(
        f"[bold green]✓[/bold green] Amount matches: {format_price(result.amount, result.currency)}"
    )


@app.command()
def audit(
    config_file: Path = typer.Argument(..., help="Pricing config (YAML/JSON)"),
    now: Optional[str] = typer.Option(None, "--now", help=_NOW_HELP),
):
    """Report pricing configuration gaps (exit 1 on critical flags)."""
    conference = _load(config_file, None)
    flags = compute_pricing_flags(conference.pricing, _instant(now))
    if not flags:
        console.print("[bold green]✓[/bold green] No pricing issues found")
        return

    table = Table(title="Pricing flags")
    table.add_column("Severity")
    table.add_column("Type", style="cyan")
    table.add_column("Message")
    for item in flags:
        style = "red" if item.severity == FlagSeverity.CRITICAL else "yellow"
        table.add_row(f"[{style}]{item.severity.value}[/{style}]", item.type, item.message)
    console.print(table)

    if any(item.severity == FlagSeverity.CRITICAL for item in flags):
        raise typer.Exit(code=1)


@app.command(name="margin-vat")
def margin_vat_cmd(
    selling_gross: float = typer.Argument(..., help="Selling price (gross)"),
    cost_gross: float = typer.Argument(..., help="Cost price (gross)"),
    currency: str = typer.Option("EUR", "--currency"),
):
    """Margin-scheme VAT for a resale."""
    result = margin_vat(selling_gross, cost_gross)
    console.print(f"[bold]Margin:[/bold] {format_price(round_amount(result.margin), currency)}")
    console.print(
        f"[bold]VAT ({result.vat_rate}%):[/bold] "
        f"{format_price(round_amount(result.vat_amount), currency)}"
    )


if __name__ == "__main__":
    app()
