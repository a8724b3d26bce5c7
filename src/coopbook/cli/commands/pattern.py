"""Classification pattern management commands."""

import click
from coopbook.cli.error_handling import (
    format_amount,
    handle_domain_error,
    parse_amount_or_exit,
    resolve_or_exit,
)
from coopbook.domain.category import CategoryService
from coopbook.domain.entities import Frequency
from coopbook.domain.patterns import PatternService
from coopbook.utils.resolver import resolve_category, resolve_pattern

FREQUENCY_CHOICE = click.Choice([f.value for f in Frequency], case_sensitive=False)


@click.group()
def pattern_group():
    """Manage withdrawal classification patterns."""
    pass


@pattern_group.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include disabled patterns")
@click.pass_context
def list_patterns(ctx, show_all: bool):
    """List classification patterns, highest confidence first."""
    db = ctx.obj["db"]
    service = PatternService(db)
    category_names = {c.id: c.name for c in CategoryService(db).list_categories()}

    patterns = service.list_patterns(active_only=not show_all)
    if not patterns:
        click.echo("No patterns found.")
        return

    click.echo(f"\n{'ID':<5} {'Name':<22} {'Keywords':<32} {'Amount range':<34} {'Conf':>4}  Category")
    click.echo("-" * 125)
    for pattern in patterns:
        amount_range = f"{format_amount(pattern.amount_range_min)} - {format_amount(pattern.amount_range_max)}"
        status = "" if pattern.is_active else " (disabled)"
        category = category_names.get(pattern.category_id, f"Category {pattern.category_id}")
        click.echo(
            f"{pattern.id:<5} {pattern.name:<22} {pattern.description_pattern:<32} "
            f"{amount_range:<34} {pattern.confidence_score:>4}  {category}{status}"
        )


@pattern_group.command("create")
@click.argument("name")
@click.option("--keywords", required=True, help="Pipe-delimited keywords (e.g., 'gaji|salary|payroll')")
@click.option("--category", required=True, help="Category name or ID to suggest")
@click.option("--min", "amount_min", help="Lowest matching amount (inclusive)")
@click.option("--max", "amount_max", help="Highest matching amount (inclusive)")
@click.option("--frequency", type=FREQUENCY_CHOICE, default="irregular", help="How often such withdrawals occur")
@click.option("--confidence", type=int, default=80, help="Base confidence, 0-100 (default: 80)")
@click.pass_context
def create_pattern(
    ctx,
    name: str,
    keywords: str,
    category: str,
    amount_min: str | None,
    amount_max: str | None,
    frequency: str,
    confidence: int,
):
    """Create a classification pattern.

    Examples:
        coopbook pattern create "ATK Pattern" --keywords "atk|alat tulis" --min 50000 --max 2000000 --category "Penarikan ATK"
    """
    db = ctx.obj["db"]
    service = PatternService(db)
    category_id = resolve_or_exit(ctx, resolve_category, CategoryService(db), category)

    try:
        pattern_id = service.create_pattern(
            name=name,
            description_pattern=keywords,
            category_id=category_id,
            amount_range_min=parse_amount_or_exit(ctx, amount_min) if amount_min else None,
            amount_range_max=parse_amount_or_exit(ctx, amount_max) if amount_max else None,
            frequency=Frequency(frequency.lower()),
            confidence_score=confidence,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created pattern '{name}' (ID: {pattern_id})")


@pattern_group.command("update")
@click.argument("pattern")
@click.option("--name", help="New pattern name")
@click.option("--keywords", help="New pipe-delimited keywords")
@click.option("--category", help="New category name or ID")
@click.option("--min", "amount_min", help="New lowest matching amount")
@click.option("--max", "amount_max", help="New highest matching amount")
@click.option("--frequency", type=FREQUENCY_CHOICE, help="New frequency")
@click.option("--confidence", type=int, help="New base confidence, 0-100")
@click.pass_context
def update_pattern(
    ctx,
    pattern: str,
    name: str | None,
    keywords: str | None,
    category: str | None,
    amount_min: str | None,
    amount_max: str | None,
    frequency: str | None,
    confidence: int | None,
):
    """Update a pattern (by name or ID). Only the given fields change."""
    db = ctx.obj["db"]
    service = PatternService(db)
    pattern_id = resolve_or_exit(ctx, resolve_pattern, service, pattern)
    category_id = None
    if category is not None:
        category_id = resolve_or_exit(ctx, resolve_category, CategoryService(db), category)

    try:
        service.update_pattern(
            pattern_id,
            name=name,
            description_pattern=keywords,
            category_id=category_id,
            amount_range_min=parse_amount_or_exit(ctx, amount_min) if amount_min else None,
            amount_range_max=parse_amount_or_exit(ctx, amount_max) if amount_max else None,
            frequency=Frequency(frequency.lower()) if frequency else None,
            confidence_score=confidence,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Updated pattern {pattern_id}")


def _set_active(ctx, pattern: str, is_active: bool) -> None:
    service = PatternService(ctx.obj["db"])
    pattern_id = resolve_or_exit(ctx, resolve_pattern, service, pattern)
    try:
        service.set_active(pattern_id, is_active)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"{'Enabled' if is_active else 'Disabled'} pattern {pattern_id}")


@pattern_group.command("enable")
@click.argument("pattern")
@click.pass_context
def enable_pattern(ctx, pattern: str):
    """Enable a pattern."""
    _set_active(ctx, pattern, True)


@pattern_group.command("disable")
@click.argument("pattern")
@click.pass_context
def disable_pattern(ctx, pattern: str):
    """Disable a pattern without deleting it."""
    _set_active(ctx, pattern, False)


@pattern_group.command("delete")
@click.argument("pattern")
@click.pass_context
def delete_pattern(ctx, pattern: str):
    """Delete a pattern."""
    service = PatternService(ctx.obj["db"])
    pattern_id = resolve_or_exit(ctx, resolve_pattern, service, pattern)
    try:
        service.delete_pattern(pattern_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted pattern {pattern_id}")


def register_commands(cli):
    """Register pattern commands with main CLI."""
    cli.add_command(pattern_group, name="pattern")
