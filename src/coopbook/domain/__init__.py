"""Domain layer for coopbook application."""

from coopbook.domain.transaction import TransactionEntryService
from coopbook.domain.category import CategoryService
from coopbook.domain.payment_method import PaymentMethodService
from coopbook.domain.patterns import PatternService
from coopbook.domain.classifier import ClassificationService
from coopbook.domain.validator import ValidationService
from coopbook.domain.ledger import ClassificationLedger
from coopbook.domain.analytics import AnalyticsService

__all__ = [
    "TransactionEntryService",
    "CategoryService",
    "PaymentMethodService",
    "PatternService",
    "ClassificationService",
    "ValidationService",
    "ClassificationLedger",
    "AnalyticsService",
]
