"""Category management commands."""

from decimal import Decimal

import click
from coopbook.cli.error_handling import (
    format_amount,
    handle_domain_error,
    parse_amount_or_exit,
    resolve_or_exit,
)
from coopbook.domain.category import CategoryService
from coopbook.domain.entities import Category, TransactionType, ValidationRules
from coopbook.utils.resolver import resolve_category


def print_validation_rules(rules: ValidationRules, indent: str = "  ") -> None:
    """Print the spending policy of a category."""
    if rules.is_empty:
        click.echo(f"{indent}No validation rules")
        return
    if rules.min_transaction_amount is not None:
        click.echo(f"{indent}Min per transaction: {format_amount(rules.min_transaction_amount)}")
    if rules.max_transaction_amount is not None:
        click.echo(f"{indent}Max per transaction: {format_amount(rules.max_transaction_amount)}")
    if rules.max_daily_amount is not None:
        click.echo(f"{indent}Max per day: {format_amount(rules.max_daily_amount)}")
    if rules.max_monthly_amount is not None:
        click.echo(f"{indent}Max per month: {format_amount(rules.max_monthly_amount)}")
    if rules.max_daily_count is not None:
        click.echo(f"{indent}Max transactions per day: {rules.max_daily_count}")
    if rules.requires_approval:
        click.echo(f"{indent}Always requires approval")
    if rules.approval_threshold is not None:
        click.echo(f"{indent}Approval from: {format_amount(rules.approval_threshold)}")


def print_category(category: Category) -> None:
    click.echo(f"Category {category.id}: {category.name}")
    click.echo(f"  Type: {category.transaction_type.value}")
    if category.color:
        click.echo(f"  Color: {category.color}")

    auto_rules = category.auto_classification_rules
    if auto_rules.keywords:
        click.echo(f"  Keywords: {', '.join(auto_rules.keywords)}")
    if auto_rules.amount_range is not None:
        amount_range = auto_rules.amount_range
        click.echo(
            f"  Typical amount: {format_amount(amount_range.min)} - {format_amount(amount_range.max)}"
        )
    if auto_rules.frequency is not None:
        click.echo(f"  Frequency: {auto_rules.frequency.value}")

    click.echo("  Validation:")
    print_validation_rules(category.validation_rules, indent="    ")


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option(
    "--type",
    "transaction_type",
    type=click.Choice([t.value for t in TransactionType], case_sensitive=False),
    help="Only categories usable for this transaction type",
)
@click.pass_context
def list_categories(ctx, transaction_type: str | None):
    """List all categories."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    categories = service.list_categories(
        transaction_type=TransactionType(transaction_type.lower()) if transaction_type else None
    )
    if not categories:
        click.echo("No categories found. Run 'init-categories' to create default categories.")
        return

    click.echo(f"\n{'ID':<5} {'Name':<30} {'Type':<8} {'Approval':<10}")
    click.echo("-" * 56)
    for category in categories:
        rules = category.validation_rules
        if rules.requires_approval:
            approval = "always"
        elif rules.approval_threshold is not None:
            approval = "threshold"
        else:
            approval = "-"
        click.echo(
            f"{category.id:<5} {category.name:<30} {category.transaction_type.value:<8} {approval:<10}"
        )


@category_group.command("show")
@click.argument("category")
@click.pass_context
def show_category(ctx, category: str):
    """Show a category and its rules (by name or ID)."""
    db = ctx.obj["db"]
    service = CategoryService(db)
    category_id = resolve_or_exit(ctx, resolve_category, service, category)
    print_category(service.require_category(category_id))


def _optional_amount(ctx, value: str | None) -> Decimal | None:
    return parse_amount_or_exit(ctx, value) if value is not None else None


@category_group.command("create")
@click.argument("name")
@click.option(
    "--type",
    "transaction_type",
    type=click.Choice([t.value for t in TransactionType], case_sensitive=False),
    default="expense",
    help="Transaction type the category applies to (default: expense)",
)
@click.option("--color", help="Display color (e.g., '#1e40af')")
@click.option("--max-transaction", help="Maximum amount per transaction")
@click.option("--min-transaction", help="Minimum amount per transaction")
@click.option("--max-daily", help="Maximum total per day")
@click.option("--max-monthly", help="Maximum total per calendar month")
@click.option("--max-daily-count", type=int, help="Maximum number of transactions per day")
@click.option("--requires-approval", is_flag=True, help="Every transaction needs approval")
@click.option("--approval-threshold", help="Amount from which approval is needed")
@click.pass_context
def create_category(
    ctx,
    name: str,
    transaction_type: str,
    color: str | None,
    max_transaction: str | None,
    min_transaction: str | None,
    max_daily: str | None,
    max_monthly: str | None,
    max_daily_count: int | None,
    requires_approval: bool,
    approval_threshold: str | None,
):
    """Create a new category.

    Examples:
        coopbook category create "Penarikan ATK" --max-transaction 2000000
        coopbook category create "Penarikan Sewa" --max-monthly 15000000 --requires-approval
    """
    db = ctx.obj["db"]
    service = CategoryService(db)

    rules = ValidationRules(
        max_transaction_amount=_optional_amount(ctx, max_transaction),
        min_transaction_amount=_optional_amount(ctx, min_transaction),
        max_daily_amount=_optional_amount(ctx, max_daily),
        max_monthly_amount=_optional_amount(ctx, max_monthly),
        max_daily_count=max_daily_count,
        requires_approval=requires_approval,
        approval_threshold=_optional_amount(ctx, approval_threshold),
    )

    try:
        category_id = service.create_category(
            name=name,
            transaction_type=TransactionType(transaction_type.lower()),
            color=color,
            validation_rules=rules,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created category '{name}' (ID: {category_id})")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
