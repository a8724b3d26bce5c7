"""Transaction viewing commands."""

import click
from coopbook.cli.error_handling import (
    format_amount,
    parse_date_or_exit,
    resolve_or_exit,
)
from coopbook.domain.category import CategoryService
from coopbook.domain.transaction import TransactionEntryService
from coopbook.utils.resolver import resolve_category


@click.group()
def transaction_group():
    """View transactions."""
    pass


@transaction_group.command("list")
@click.option("--start-date", help="Earliest transaction date (inclusive)")
@click.option("--end-date", help="Latest transaction date (inclusive)")
@click.option("--category", help="Category name or ID")
@click.pass_context
def list_transactions(ctx, start_date: str | None, end_date: str | None, category: str | None):
    """List transactions, newest first.

    Examples:
        coopbook transaction list --start-date "30 days ago"
        coopbook transaction list --category "Penarikan Operasional"
    """
    db = ctx.obj["db"]
    category_service = CategoryService(db)
    category_id = None
    if category is not None:
        category_id = resolve_or_exit(ctx, resolve_category, category_service, category)

    transactions = TransactionEntryService(db).list_transactions(
        start_date=parse_date_or_exit(ctx, start_date),
        end_date=parse_date_or_exit(ctx, end_date),
        category_id=category_id,
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    category_names = {c.id: c.name for c in category_service.list_categories()}
    click.echo(f"\n{'ID':<6} {'Date':<12} {'Amount':>18}  {'Category':<26} Description")
    click.echo("-" * 100)
    for txn in transactions:
        name = category_names.get(txn.category_id, str(txn.category_id))
        click.echo(
            f"{txn.id:<6} {txn.transaction_date.isoformat():<12} {format_amount(txn.amount):>18}  "
            f"{name:<26} {txn.description}"
        )


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
