"""Shared pytest fixtures for coopbook tests."""

import os
import tempfile
from datetime import datetime, UTC
from decimal import Decimal

import pytest

from coopbook.database.factories import create_sqlite_database
from coopbook.domain.category import CategoryService
from coopbook.domain.entities import (
    Category,
    Frequency,
    Pattern,
    PaymentMethodType,
    TransactionType,
    ValidationRules,
)
from coopbook.domain.patterns import PatternService
from coopbook.domain.payment_method import PaymentMethodService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def pattern_service(temp_db):
    """Create a PatternService with a temporary database."""
    return PatternService(temp_db)


@pytest.fixture
def payment_method_service(temp_db):
    """Create a PaymentMethodService with a temporary database."""
    return PaymentMethodService(temp_db)


@pytest.fixture
def sample_payment_methods(payment_method_service):
    """Create a cash and a bank-transfer payment method."""
    return {
        "cash": payment_method_service.create_payment_method("Tunai", PaymentMethodType.CASH),
        "bank": payment_method_service.create_payment_method(
            "Transfer Bank", PaymentMethodType.BANK_TRANSFER
        ),
    }


@pytest.fixture
def payroll_category(category_service):
    """Create a payroll category with a per-transaction cap and mandatory approval."""
    category_id = category_service.create_category(
        name="Payroll",
        validation_rules=ValidationRules(
            max_transaction_amount=Decimal("10000000"),
            requires_approval=True,
        ),
    )
    return category_service.get_category(category_id)


@pytest.fixture
def operational_category(category_service):
    """Create an operational category with daily limits."""
    category_id = category_service.create_category(
        name="Operational",
        validation_rules=ValidationRules(
            max_daily_amount=Decimal("10000000"),
            approval_threshold=Decimal("5000000"),
        ),
    )
    return category_service.get_category(category_id)


@pytest.fixture
def payroll_pattern(pattern_service, payroll_category):
    """Create the payroll pattern used by most classification tests."""
    pattern_id = pattern_service.create_pattern(
        name="Payroll Pattern",
        description_pattern="gaji|payroll",
        category_id=payroll_category.id,
        amount_range_min=Decimal("1000000"),
        amount_range_max=Decimal("10000000"),
        frequency=Frequency.MONTHLY,
        confidence_score=90,
    )
    return pattern_service.get_pattern(pattern_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def make_pattern():
    """Return a builder for Pattern entities that never touch the database."""

    def build(
        id=1,
        name="Payroll Pattern",
        keywords="gaji|payroll",
        amount_min="1000000",
        amount_max="10000000",
        category_id=1,
        confidence=90,
        is_active=True,
        updated_at=None,
        frequency=Frequency.MONTHLY,
    ):
        return Pattern(
            id=id,
            name=name,
            description_pattern=keywords,
            amount_range_min=Decimal(amount_min) if amount_min is not None else None,
            amount_range_max=Decimal(amount_max) if amount_max is not None else None,
            frequency=frequency,
            category_id=category_id,
            confidence_score=confidence,
            is_active=is_active,
            created_at=datetime(2025, 1, 1, tzinfo=UTC),
            updated_at=updated_at or datetime(2025, 1, 1, tzinfo=UTC),
        )

    return build


@pytest.fixture
def make_category():
    """Return a builder for Category entities that never touch the database."""

    def build(id=1, name="Payroll", rules=None, transaction_type=TransactionType.EXPENSE):
        return Category(
            id=id,
            name=name,
            transaction_type=transaction_type,
            created_at=datetime(2025, 1, 1, tzinfo=UTC),
            validation_rules=rules or ValidationRules(),
        )

    return build
