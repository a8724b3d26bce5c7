"""Initialize default withdrawal categories, patterns and payment methods."""

import logging
from decimal import Decimal

import click
from coopbook.database.base import Database
from coopbook.domain.category import CategoryService
from coopbook.domain.entities import (
    AmountRange,
    AutoClassificationRules,
    Frequency,
    PaymentMethodType,
    TransactionType,
    ValidationRules,
)
from coopbook.domain.patterns import PatternService
from coopbook.domain.payment_method import PaymentMethodService

logger = logging.getLogger(__name__)


# (name, color, (min, max), keywords, frequency, validation rules)
INITIAL_CATEGORIES = [
    (
        "Penarikan Operasional",
        "#1e40af",
        ("100000", "5000000"),
        ("operasional", "operational", "ops"),
        Frequency.DAILY,
        ValidationRules(
            max_daily_amount=Decimal("10000000"),
            approval_threshold=Decimal("5000000"),
        ),
    ),
    (
        "Penarikan Gaji Karyawan",
        "#059669",
        ("1000000", "50000000"),
        ("gaji", "salary", "payroll"),
        Frequency.MONTHLY,
        ValidationRules(
            max_monthly_amount=Decimal("100000000"),
            requires_approval=True,
            approval_threshold=Decimal("1000000"),
        ),
    ),
    (
        "Penarikan Investasi",
        "#7c3aed",
        ("5000000", "100000000"),
        ("investasi", "investment", "pengembangan"),
        Frequency.IRREGULAR,
        ValidationRules(
            max_transaction_amount=Decimal("200000000"),
            requires_approval=True,
            approval_threshold=Decimal("5000000"),
        ),
    ),
    (
        "Penarikan Darurat",
        "#ef4444",
        ("500000", "20000000"),
        ("darurat", "emergency", "urgent"),
        Frequency.IRREGULAR,
        ValidationRules(
            max_transaction_amount=Decimal("50000000"),
            requires_approval=True,
            approval_threshold=Decimal("1000000"),
        ),
    ),
    (
        "Penarikan Rutin Bulanan",
        "#f59e0b",
        ("1000000", "10000000"),
        ("rutin", "routine", "bulanan"),
        Frequency.MONTHLY,
        ValidationRules(
            max_monthly_amount=Decimal("50000000"),
            approval_threshold=Decimal("10000000"),
        ),
    ),
]

# (pattern name, category name, base confidence)
INITIAL_PATTERNS = [
    ("Operational Pattern", "Penarikan Operasional", 85),
    ("Payroll Pattern", "Penarikan Gaji Karyawan", 90),
    ("Emergency Pattern", "Penarikan Darurat", 80),
    ("Investment Pattern", "Penarikan Investasi", 85),
    ("Routine Pattern", "Penarikan Rutin Bulanan", 80),
]

INITIAL_PAYMENT_METHODS = [
    ("Tunai", PaymentMethodType.CASH),
    ("Transfer Bank", PaymentMethodType.BANK_TRANSFER),
]


def create_default_data(db: Database) -> tuple[int, int]:
    """Create the default categories, patterns and payment methods.

    Entries that already exist (by name) are left untouched.

    Returns:
        Tuple of (created, skipped) counts
    """
    category_service = CategoryService(db)
    pattern_service = PatternService(db)
    payment_method_service = PaymentMethodService(db)

    created = 0
    skipped = 0
    rules_by_category = {}

    for name, color, (low, high), keywords, frequency, validation_rules in INITIAL_CATEGORIES:
        auto_rules = AutoClassificationRules(
            amount_range=AmountRange(min=Decimal(low), max=Decimal(high)),
            keywords=keywords,
            frequency=frequency,
        )
        rules_by_category[name] = auto_rules
        if category_service.get_category_by_name(name) is not None:
            skipped += 1
            continue
        category_service.create_category(
            name=name,
            transaction_type=TransactionType.EXPENSE,
            color=color,
            auto_classification_rules=auto_rules,
            validation_rules=validation_rules,
        )
        created += 1

    for pattern_name, category_name, confidence in INITIAL_PATTERNS:
        if pattern_service.get_pattern_by_name(pattern_name) is not None:
            skipped += 1
            continue
        category = category_service.require_category_by_name(category_name)
        auto_rules = rules_by_category[category_name]
        pattern_service.create_pattern(
            name=pattern_name,
            description_pattern="|".join(auto_rules.keywords),
            category_id=category.id,
            amount_range_min=auto_rules.amount_range.min,
            amount_range_max=auto_rules.amount_range.max,
            frequency=auto_rules.frequency,
            confidence_score=confidence,
        )
        created += 1

    existing_methods = {m.name for m in payment_method_service.list_payment_methods()}
    for name, method_type in INITIAL_PAYMENT_METHODS:
        if name in existing_methods:
            skipped += 1
            continue
        payment_method_service.create_payment_method(name, method_type)
        created += 1

    logger.info("Default data: %d created, %d already present", created, skipped)
    return created, skipped


@click.command("init-categories")
@click.option("--force", is_flag=True, help="Add missing defaults even if categories already exist")
@click.pass_context
def init_categories(ctx, force: bool):
    """Initialize database with the default withdrawal categories and patterns."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    existing = service.list_categories()
    if existing and not force:
        click.echo("Categories already exist. Use --force to add any missing defaults.")
        return

    click.echo("Creating default withdrawal categories...")
    try:
        created, skipped = create_default_data(db)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    if skipped == 0:
        click.echo(f"Successfully created {created} entries.")
    else:
        click.echo(f"Created {created} entries, {skipped} already existed.")


def register_commands(cli):
    """Register init-categories command with main CLI."""
    cli.add_command(init_categories)
