"""Add transaction command."""

import click
from coopbook.cli.commands.classify import print_suggestion
from coopbook.cli.commands.validate import print_validation
from coopbook.cli.error_handling import (
    format_amount,
    handle_domain_error,
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_or_exit,
)
from coopbook.domain.category import CategoryService
from coopbook.domain.classifier import DEFAULT_SCORING_POLICY, ScoringPolicy
from coopbook.domain.entities import TransactionDraft, TransactionType
from coopbook.domain.payment_method import PaymentMethodService
from coopbook.domain.transaction import TransactionEntryService
from coopbook.utils.resolver import resolve_category, resolve_payment_method


@click.command("add")
@click.option("--amount", required=True, help="Transaction amount (e.g., 2500000 or 'Rp 2.500.000')")
@click.option("--description", required=True, help="Transaction description")
@click.option("--payment-method", required=True, help="Payment method name or ID")
@click.option(
    "--date",
    "date_str",
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday'; defaults to today)",
)
@click.option("--category", help="Category name or ID (defaults to a confident suggestion)")
@click.option(
    "--type",
    "transaction_type",
    type=click.Choice([TransactionType.EXPENSE.value, TransactionType.INCOME.value], case_sensitive=False),
    default="expense",
    help="Transaction type (default: expense)",
)
@click.option("--reason", help="Why the suggested category was not used")
@click.option("--force", is_flag=True, help="Save even if category limits are exceeded")
@click.option(
    "--auto-apply-threshold",
    type=click.FloatRange(0, 100),
    default=DEFAULT_SCORING_POLICY.auto_apply_threshold,
    show_default=True,
    help="Confidence from which a suggestion is used when --category is omitted",
)
@click.pass_context
def add_transaction(
    ctx,
    amount: str,
    description: str,
    payment_method: str,
    date_str: str | None,
    category: str | None,
    transaction_type: str,
    reason: str | None,
    force: bool,
    auto_apply_threshold: float,
):
    """Add a transaction.

    Bank-transfer withdrawals get a category suggestion; the outcome is
    logged so suggestion accuracy can be tracked with 'analytics'.

    Examples:
        coopbook add --amount 15000000 --description "Gaji karyawan Januari" --payment-method "Transfer Bank"
        coopbook add --amount 750000 --description "Beli ATK" --payment-method Tunai --category "Penarikan Operasional"
    """
    db = ctx.obj["db"]
    category_service = CategoryService(db)
    policy = ScoringPolicy(auto_apply_threshold=auto_apply_threshold)
    service = TransactionEntryService(db, scoring_policy=policy)

    payment_method_id = resolve_or_exit(
        ctx, resolve_payment_method, PaymentMethodService(db), payment_method
    )
    draft = TransactionDraft(
        amount=parse_amount_or_exit(ctx, amount),
        description=description,
        payment_method_id=payment_method_id,
        transaction_date=parse_date_or_exit(ctx, date_str),
        transaction_type=TransactionType(transaction_type.lower()),
    )

    category_names = {c.id: c.name for c in category_service.list_categories()}
    suggestion = service.suggest_category(draft)
    if suggestion is not None:
        print_suggestion(suggestion, category_names)

    if category is not None:
        category_id = resolve_or_exit(ctx, resolve_category, category_service, category)
    elif suggestion is not None and suggestion.should_auto_apply(auto_apply_threshold):
        category_id = suggestion.suggested_category_id
        click.echo("Using suggested category.")
    else:
        click.echo("Error: No confident category suggestion; use --category to choose one.", err=True)
        ctx.exit(1)
        return

    try:
        result = service.submit(
            draft.with_category(category_id),
            suggestion=suggestion,
            override_reason=reason,
            block_invalid=not force,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created transaction {result.transaction_id}")
    click.echo(f"  Amount: {format_amount(draft.amount)}")
    click.echo(f"  Category: {category_names.get(category_id, category_id)}")
    print_validation(result.validation)
    if result.ledger_error:
        click.echo(f"Warning: {result.ledger_error}", err=True)


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
