"""Domain model entities for coopbook.

These are pure data classes representing business concepts, independent of
database schema. Rule blobs that the store keeps as JSON are exposed here as
tagged structures with one explicit optional field per rule kind, so that
rule dispatch in the validator is exhaustive.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Direction of a transaction, or the directions a category applies to."""

    INCOME = "income"
    EXPENSE = "expense"
    BOTH = "both"


class Frequency(str, Enum):
    """Frequency class of a classification pattern."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    IRREGULAR = "irregular"


class PaymentMethodType(str, Enum):
    """Channel a payment method uses."""

    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    OTHER = "other"


@dataclass(frozen=True)
class AmountRange:
    """Inclusive amount range. A missing bound is open."""

    min: Optional[Decimal] = None
    max: Optional[Decimal] = None

    def contains(self, amount: Decimal) -> bool:
        if self.min is not None and amount < self.min:
            return False
        if self.max is not None and amount > self.max:
            return False
        return True


@dataclass(frozen=True)
class AutoClassificationRules:
    """Classification hints stored on a category."""

    amount_range: Optional[AmountRange] = None
    keywords: tuple[str, ...] = ()
    frequency: Optional[Frequency] = None


@dataclass(frozen=True)
class ValidationRules:
    """Spending policy stored on a category. Unset fields are not checked."""

    max_transaction_amount: Optional[Decimal] = None
    min_transaction_amount: Optional[Decimal] = None
    max_daily_amount: Optional[Decimal] = None
    max_monthly_amount: Optional[Decimal] = None
    max_daily_count: Optional[int] = None
    requires_approval: bool = False
    approval_threshold: Optional[Decimal] = None

    @property
    def is_empty(self) -> bool:
        return self == ValidationRules()


@dataclass(frozen=True)
class PaymentMethod:
    """Payment method domain entity."""

    id: int
    name: str
    method_type: PaymentMethodType
    created_at: datetime

    @property
    def is_bank_transfer(self) -> bool:
        return self.method_type == PaymentMethodType.BANK_TRANSFER


@dataclass(frozen=True)
class Category:
    """Transaction category with its classification and validation rules."""

    id: int
    name: str
    transaction_type: TransactionType
    created_at: datetime
    color: Optional[str] = None
    auto_classification_rules: AutoClassificationRules = field(
        default_factory=AutoClassificationRules
    )
    validation_rules: ValidationRules = field(default_factory=ValidationRules)

    def applies_to(self, transaction_type: TransactionType) -> bool:
        """Return True if this category may be used for the given direction."""
        return self.transaction_type in (TransactionType.BOTH, transaction_type)


@dataclass(frozen=True)
class Pattern:
    """Administrator-authored classification rule.

    The keyword expression holds pipe-delimited alternatives
    (e.g. ``"gaji|salary|payroll"``). Values are kept as stored so that a
    malformed record can be detected and skipped instead of rejected on load.
    """

    id: int
    name: str
    description_pattern: str
    amount_range_min: Optional[Decimal]
    amount_range_max: Optional[Decimal]
    frequency: Frequency
    category_id: int
    confidence_score: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @property
    def amount_range(self) -> AmountRange:
        return AmountRange(min=self.amount_range_min, max=self.amount_range_max)


@dataclass(frozen=True)
class TransactionDraft:
    """A transaction as entered on the form, before it is saved.

    ``amount`` is not coerced here: the validator reports a missing or
    non-numeric amount as an input error instead of failing construction.
    """

    amount: Optional[Decimal]
    description: Optional[str]
    payment_method_id: Optional[int] = None
    transaction_date: Optional[date] = None
    category_id: Optional[int] = None
    transaction_type: TransactionType = TransactionType.EXPENSE
    transaction_id: Optional[int] = None

    def with_category(self, category_id: int) -> "TransactionDraft":
        return replace(self, category_id=category_id)


@dataclass(frozen=True)
class Transaction:
    """Saved transaction domain entity."""

    id: int
    amount: Decimal
    description: str
    transaction_type: TransactionType
    transaction_date: date
    category_id: int
    payment_method_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class PatternMatch:
    """One pattern whose keywords hit the description, with its score."""

    pattern_id: int
    pattern_name: str
    category_id: int
    keywords: tuple[str, ...]
    score: float


@dataclass(frozen=True)
class ClassificationResult:
    """Category suggestion for a withdrawal.

    With no match, ``suggested_category_id`` is None and the confidence is 0.
    """

    suggested_category_id: Optional[int]
    confidence_score: float
    reasoning: str
    pattern_id: Optional[int] = None
    pattern_matched: Optional[str] = None
    pattern_matches: tuple[PatternMatch, ...] = ()

    @property
    def has_suggestion(self) -> bool:
        return self.suggested_category_id is not None

    def should_auto_apply(self, threshold: float) -> bool:
        """Return True if the suggestion is confident enough to pre-fill the form."""
        return self.has_suggestion and self.confidence_score >= threshold


@dataclass(frozen=True)
class ValidationIssue:
    """A single blocking error or non-blocking advisory."""

    code: str
    message: str
    field: Optional[str] = None


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of policy checks on a transaction."""

    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationIssue, ...] = ()
    requires_approval: bool = False
    approval_reason: Optional[str] = None

    def __post_init__(self):
        if self.requires_approval != bool(self.approval_reason):
            raise ValueError("approval_reason must be set exactly when approval is required")

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class ClassificationLogEntry:
    """Ledger row for a submission that went through the classifier."""

    transaction_id: int
    suggested_category_id: Optional[int]
    actual_category_id: int
    confidence_score: float
    pattern_matched: Optional[str]
    is_manual_override: bool
    timestamp: datetime
    id: Optional[int] = None


@dataclass(frozen=True)
class ManualOverrideLogEntry:
    """Ledger row for a submission whose category differs from the suggestion.

    ``confidence_score`` and ``pattern_matched`` describe the rejected
    suggestion.
    """

    transaction_id: int
    original_category_id: Optional[int]
    new_category_id: int
    reason: str
    timestamp: datetime
    confidence_score: float = 0.0
    pattern_matched: Optional[str] = None
    id: Optional[int] = None


@dataclass(frozen=True)
class DailyStat:
    """Ledger counts for one calendar day."""

    day: date
    classifications: int
    accurate: int
    overrides: int
    accuracy_rate: float


@dataclass(frozen=True)
class CategoryAccuracy:
    """Suggestions made for one category and how many were kept."""

    category_id: Optional[int]
    category_name: str
    total_suggestions: int
    accurate_suggestions: int
    accuracy_rate: float


@dataclass(frozen=True)
class PatternPerformance:
    """Usage and accuracy of one pattern."""

    pattern_name: str
    usage_count: int
    accurate_count: int
    accuracy_rate: float


@dataclass(frozen=True)
class ConfidenceBucket:
    """Ledger entries whose confidence falls in ``[lower, upper)``."""

    label: str
    lower: float
    upper: float
    count: int
    accuracy_rate: float


@dataclass(frozen=True)
class ClassificationAnalytics:
    """Accuracy, override and confidence metrics over a time window."""

    start_date: date
    end_date: date
    total_classifications: int
    accurate_classifications: int
    accuracy_rate: float
    manual_overrides: int
    override_rate: float
    avg_confidence_score: float
    daily_stats: tuple[DailyStat, ...]
    category_accuracy: tuple[CategoryAccuracy, ...]
    top_patterns: tuple[PatternPerformance, ...]
    confidence_distribution: tuple[ConfidenceBucket, ...]
    alerts: tuple[str, ...] = ()

    def as_dict(self) -> dict:
        """Return the metrics in the dashboard's camelCase shape."""
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "totalClassifications": self.total_classifications,
            "accurateClassifications": self.accurate_classifications,
            "accuracyRate": self.accuracy_rate,
            "manualOverrides": self.manual_overrides,
            "overrideRate": self.override_rate,
            "avgConfidenceScore": self.avg_confidence_score,
            "dailyStats": [
                {
                    "date": stat.day.isoformat(),
                    "classifications": stat.classifications,
                    "accurate": stat.accurate,
                    "overrides": stat.overrides,
                    "accuracy_rate": stat.accuracy_rate,
                }
                for stat in self.daily_stats
            ],
            "categoryAccuracy": [
                {
                    "category_id": item.category_id,
                    "category_name": item.category_name,
                    "total_suggestions": item.total_suggestions,
                    "accurate_suggestions": item.accurate_suggestions,
                    "accuracy_rate": item.accuracy_rate,
                }
                for item in self.category_accuracy
            ],
            "topPatterns": [
                {
                    "pattern_name": item.pattern_name,
                    "usage_count": item.usage_count,
                    "accurate_count": item.accurate_count,
                    "accuracy_rate": item.accuracy_rate,
                }
                for item in self.top_patterns
            ],
            "confidenceDistribution": [
                {
                    "range": bucket.label,
                    "count": bucket.count,
                    "accuracy_rate": bucket.accuracy_rate,
                }
                for bucket in self.confidence_distribution
            ],
            "alerts": list(self.alerts),
        }
