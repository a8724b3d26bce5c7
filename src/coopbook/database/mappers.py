"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, including the JSON rule blobs on
categories and the UTC handling of timestamps (SQLite stores them naive).
"""

import logging
from datetime import datetime, UTC
from typing import Optional

from coopbook.domain import entities as domain
from coopbook.domain.errors import MalformedRecordError
from coopbook.domain.rules import parse_auto_classification_rules, parse_validation_rules
from coopbook.database.models import (
    Category as ORMCategory,
    ClassificationLog as ORMClassificationLog,
    ManualOverrideLog as ORMManualOverrideLog,
    Pattern as ORMPattern,
    PaymentMethod as ORMPaymentMethod,
    Transaction as ORMTransaction,
)

logger = logging.getLogger(__name__)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to a naive stored timestamp, or convert an aware one."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_storage_time(value: datetime) -> datetime:
    """Convert a timestamp to the naive UTC form the database stores."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def payment_method_to_domain(orm_method: ORMPaymentMethod) -> domain.PaymentMethod:
    """Convert SQLAlchemy PaymentMethod model to domain PaymentMethod entity."""
    return domain.PaymentMethod(
        id=orm_method.id,
        name=orm_method.name,
        method_type=domain.PaymentMethodType(orm_method.method_type),
        created_at=as_utc(orm_method.created_at),
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity.

    An unreadable rule blob is logged and treated as "no rules" so the
    category stays usable.
    """
    try:
        auto_rules = parse_auto_classification_rules(orm_category.auto_classification_rules)
    except MalformedRecordError as e:
        logger.warning("Ignoring auto-classification rules of category %s: %s", orm_category.id, e)
        auto_rules = domain.AutoClassificationRules()

    try:
        validation_rules = parse_validation_rules(orm_category.validation_rules)
    except MalformedRecordError as e:
        logger.warning("Ignoring validation rules of category %s: %s", orm_category.id, e)
        validation_rules = domain.ValidationRules()

    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        transaction_type=domain.TransactionType(orm_category.transaction_type),
        created_at=as_utc(orm_category.created_at),
        color=orm_category.color,
        auto_classification_rules=auto_rules,
        validation_rules=validation_rules,
    )


def pattern_to_domain(orm_pattern: ORMPattern) -> domain.Pattern:
    """Convert SQLAlchemy Pattern model to domain Pattern entity."""
    try:
        frequency = domain.Frequency(orm_pattern.frequency)
    except ValueError:
        logger.warning(
            "Pattern %s has unknown frequency %r, treating it as irregular",
            orm_pattern.id,
            orm_pattern.frequency,
        )
        frequency = domain.Frequency.IRREGULAR

    return domain.Pattern(
        id=orm_pattern.id,
        name=orm_pattern.name,
        description_pattern=orm_pattern.description_pattern,
        amount_range_min=orm_pattern.amount_range_min,
        amount_range_max=orm_pattern.amount_range_max,
        frequency=frequency,
        category_id=orm_pattern.category_id,
        confidence_score=orm_pattern.confidence_score,
        is_active=orm_pattern.is_active,
        created_at=as_utc(orm_pattern.created_at),
        updated_at=as_utc(orm_pattern.updated_at),
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        amount=orm_transaction.amount,
        description=orm_transaction.description,
        transaction_type=domain.TransactionType(orm_transaction.transaction_type),
        transaction_date=orm_transaction.transaction_date,
        category_id=orm_transaction.category_id,
        payment_method_id=orm_transaction.payment_method_id,
        created_at=as_utc(orm_transaction.created_at),
    )


def classification_log_to_domain(orm_log: ORMClassificationLog) -> domain.ClassificationLogEntry:
    """Convert SQLAlchemy ClassificationLog model to domain entry."""
    return domain.ClassificationLogEntry(
        id=orm_log.id,
        transaction_id=orm_log.transaction_id,
        suggested_category_id=orm_log.suggested_category_id,
        actual_category_id=orm_log.actual_category_id,
        confidence_score=orm_log.confidence_score,
        pattern_matched=orm_log.pattern_matched,
        is_manual_override=orm_log.is_manual_override,
        timestamp=as_utc(orm_log.timestamp),
    )


def manual_override_log_to_domain(orm_log: ORMManualOverrideLog) -> domain.ManualOverrideLogEntry:
    """Convert SQLAlchemy ManualOverrideLog model to domain entry."""
    return domain.ManualOverrideLogEntry(
        id=orm_log.id,
        transaction_id=orm_log.transaction_id,
        original_category_id=orm_log.original_category_id,
        new_category_id=orm_log.new_category_id,
        reason=orm_log.reason,
        confidence_score=orm_log.confidence_score,
        pattern_matched=orm_log.pattern_matched,
        timestamp=as_utc(orm_log.timestamp),
    )
