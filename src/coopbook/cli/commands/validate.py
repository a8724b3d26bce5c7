"""Check a transaction against its category's spending policy."""

import click
from coopbook.cli.error_handling import parse_date_or_exit, resolve_or_exit
from coopbook.domain.category import CategoryService
from coopbook.domain.entities import TransactionDraft, TransactionType, ValidationResult
from coopbook.domain.payment_method import PaymentMethodService
from coopbook.domain.validator import ValidationService
from coopbook.utils.amount_parser import parse_amount
from coopbook.utils.resolver import resolve_category, resolve_payment_method


def print_validation(result: ValidationResult) -> None:
    """Print errors, warnings and the approval requirement."""
    for error in result.errors:
        click.echo(f"  Error: {error.message}")
    for warning in result.warnings:
        click.echo(f"  Warning: {warning.message}")
    if result.requires_approval:
        click.echo(f"  Requires approval: {result.approval_reason}")


@click.command("validate")
@click.option("--amount", required=True, help="Transaction amount")
@click.option("--description", required=True, help="Transaction description")
@click.option("--category", required=True, help="Category name or ID")
@click.option("--payment-method", help="Payment method name or ID")
@click.option("--date", "date_str", help="Transaction date (defaults to today)")
@click.option(
    "--type",
    "transaction_type",
    type=click.Choice([TransactionType.EXPENSE.value, TransactionType.INCOME.value], case_sensitive=False),
    default="expense",
    help="Transaction type (default: expense)",
)
@click.option("--transaction-id", type=int, help="ID of the transaction being edited")
@click.pass_context
def validate_transaction(
    ctx,
    amount: str,
    description: str,
    category: str,
    payment_method: str | None,
    date_str: str | None,
    transaction_type: str,
    transaction_id: int | None,
):
    """Validate a transaction without saving it.

    Exits with status 1 when the transaction has blocking errors.
    """
    db = ctx.obj["db"]
    category_id = resolve_or_exit(ctx, resolve_category, CategoryService(db), category)
    payment_method_id = None
    if payment_method:
        payment_method_id = resolve_or_exit(
            ctx, resolve_payment_method, PaymentMethodService(db), payment_method
        )

    # Unparseable amounts are reported by the validator itself
    try:
        parsed_amount = parse_amount(amount)
    except ValueError:
        parsed_amount = amount

    draft = TransactionDraft(
        amount=parsed_amount,
        description=description,
        payment_method_id=payment_method_id,
        transaction_date=parse_date_or_exit(ctx, date_str),
        category_id=category_id,
        transaction_type=TransactionType(transaction_type.lower()),
        transaction_id=transaction_id,
    )
    result = ValidationService(db).validate(draft)

    click.echo("Valid" if result.is_valid else "Invalid")
    print_validation(result)
    if not result.is_valid:
        ctx.exit(1)


def register_commands(cli):
    """Register validate command with main CLI."""
    cli.add_command(validate_transaction)
