"""CLI error handling and argument parsing helpers."""

from datetime import date
from decimal import Decimal
from typing import Callable, TypeVar

import click

from coopbook.domain.errors import DomainError
from coopbook.utils.amount_parser import parse_amount
from coopbook.utils.date_parser import parse_date

T = TypeVar("T")


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def resolve_or_exit(ctx: click.Context, resolver: Callable[..., T], *args) -> T:
    """Run a name-or-ID resolver, or exit with a CLI error."""
    try:
        return resolver(*args)
    except ValueError as e:
        handle_domain_error(ctx, e)


def parse_amount_or_exit(ctx: click.Context, value: str) -> Decimal:
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


def parse_date_or_exit(ctx: click.Context, value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


def format_amount(amount: Decimal | None) -> str:
    """Format a rupiah amount for display ("Rp 1.500.000")."""
    if amount is None:
        return "-"
    whole = f"{amount:,.0f}" if amount == amount.to_integral_value() else f"{amount:,.2f}"
    return "Rp " + whole.replace(",", "_").replace(".", ",").replace("_", ".")
