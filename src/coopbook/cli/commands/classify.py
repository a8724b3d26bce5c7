"""Suggest a category for a bank withdrawal."""

import click
from coopbook.cli.error_handling import format_amount, parse_amount_or_exit, parse_date_or_exit
from coopbook.domain.category import CategoryService
from coopbook.domain.classifier import ClassificationService
from coopbook.domain.entities import ClassificationResult, TransactionDraft


def print_suggestion(result: ClassificationResult, category_names: dict[int, str]) -> None:
    """Print a classifier result with the runner-up matches."""
    if not result.has_suggestion:
        click.echo(f"No suggestion ({result.reasoning})")
        return

    name = category_names.get(result.suggested_category_id, f"Category {result.suggested_category_id}")
    click.echo(f"Suggested category: {name} (ID: {result.suggested_category_id})")
    click.echo(f"  Confidence: {result.confidence_score:.2f}")
    click.echo(f"  Pattern: {result.pattern_matched}")
    click.echo(f"  Reasoning: {result.reasoning}")
    if len(result.pattern_matches) > 1:
        click.echo("  Other matches:")
        for match in result.pattern_matches[1:]:
            click.echo(f"    {match.pattern_name}: {match.score:.2f}")


@click.command("classify")
@click.option("--amount", required=True, help="Withdrawal amount (e.g., 2500000 or 'Rp 2.500.000')")
@click.option("--description", required=True, help="Withdrawal description")
@click.option("--date", "date_str", help="Transaction date (YYYY-MM-DD or relative like 'today')")
@click.pass_context
def classify_withdrawal(ctx, amount: str, description: str, date_str: str | None):
    """Suggest a category for a bank withdrawal.

    Examples:
        coopbook classify --amount 15000000 --description "Gaji karyawan Januari"
    """
    db = ctx.obj["db"]
    draft = TransactionDraft(
        amount=parse_amount_or_exit(ctx, amount),
        description=description,
        transaction_date=parse_date_or_exit(ctx, date_str),
    )
    result = ClassificationService(db).classify(draft)
    category_names = {c.id: c.name for c in CategoryService(db).list_categories()}

    click.echo(f"Withdrawal of {format_amount(draft.amount)}: {description}")
    print_suggestion(result, category_names)


def register_commands(cli):
    """Register classify command with main CLI."""
    cli.add_command(classify_withdrawal)
