"""Spending-policy validation for transactions.

Checks run against the resolved category's validation rules:

- ``max_transaction_amount`` / ``min_transaction_amount``: error when the
  amount is strictly above / below the limit.
- ``max_daily_amount`` / ``max_monthly_amount``: the other recorded
  transactions of the category for the same day or month plus this one.
  Strictly above the cap is a warning while under ``cap_error_ratio`` times
  the cap, an error from there on.
- ``max_daily_count``: error when the category already has that many
  transactions on the same day.
- ``requires_approval``: always requires approval.
- ``approval_threshold``: requires approval at or above the threshold, for
  categories that do not already require it.

Input problems (missing description, missing category, non-positive or
non-numeric amount) are reported as errors, never raised.
"""

import re
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from dateutil.relativedelta import relativedelta

from coopbook.database.base import Database
from coopbook.domain.entities import (
    Category,
    TransactionDraft,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)

APPROVAL_BY_POLICY = "category requires approval by policy"
APPROVAL_BY_THRESHOLD = "amount exceeds approval threshold"

DEFAULT_FLAGGED_KEYWORDS = (
    "test",
    "testing",
    "coba",
    "dummy",
    "fake",
    "pinjam",
    "hutang",
    "utang",
    "bon",
)


@dataclass(frozen=True)
class ValidationPolicy:
    """Tunable validation parameters."""

    cap_error_ratio: Decimal = Decimal("1.5")
    flagged_keywords: tuple[str, ...] = DEFAULT_FLAGGED_KEYWORDS
    # Advisories that only apply to bank-transfer withdrawals
    min_bank_description_length: int = 10
    warn_on_weekend: bool = True


DEFAULT_VALIDATION_POLICY = ValidationPolicy()


@dataclass(frozen=True)
class CategoryTotals:
    """Other recorded transactions of a category on the draft's day and month."""

    daily_amount: Decimal = Decimal("0")
    monthly_amount: Decimal = Decimal("0")
    daily_count: int = 0


@dataclass
class _Findings:
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    def error(self, code: str, message: str, field_name: Optional[str] = None) -> None:
        self.errors.append(ValidationIssue(code=code, message=message, field=field_name))

    def warning(self, code: str, message: str, field_name: Optional[str] = None) -> None:
        self.warnings.append(ValidationIssue(code=code, message=message, field=field_name))


def _fmt(amount: Decimal) -> str:
    return f"{amount:,}"


def _check_amount(raw, findings: _Findings) -> Optional[Decimal]:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        findings.error("amount_required", "amount is required", "amount")
        return None
    if isinstance(raw, bool):
        findings.error("amount_invalid", f"amount must be a number, got {raw!r}", "amount")
        return None
    try:
        amount = Decimal(str(raw))
    except InvalidOperation:
        findings.error("amount_invalid", f"amount must be a number, got {raw!r}", "amount")
        return None
    if not amount.is_finite():
        findings.error("amount_invalid", f"amount must be a number, got {raw!r}", "amount")
        return None
    if amount <= 0:
        findings.error("amount_not_positive", "amount must be greater than zero", "amount")
        return None
    return amount


def _check_cap(
    findings: _Findings,
    period: str,
    total: Decimal,
    cap: Decimal,
    category_name: str,
    policy: ValidationPolicy,
) -> None:
    if total <= cap:
        return
    message = (
        f"{period} total {_fmt(total)} exceeds {period} limit of {_fmt(cap)} "
        f"for category '{category_name}'"
    )
    code = f"exceeds_{period}_limit"
    if total >= cap * policy.cap_error_ratio:
        findings.error(code, message, "amount")
    else:
        findings.warning(code, message, "amount")


def _check_flagged_keywords(description: str, findings: _Findings, policy: ValidationPolicy) -> None:
    for keyword in policy.flagged_keywords:
        if re.search(rf"\b{re.escape(keyword)}\b", description, re.IGNORECASE):
            findings.warning(
                "flagged_keyword",
                f"description contains flagged word '{keyword}', please double-check it",
                "description",
            )


def _check_bank_withdrawal(
    description: str,
    day: Optional[date],
    findings: _Findings,
    policy: ValidationPolicy,
) -> None:
    if description and len(description) < policy.min_bank_description_length:
        findings.warning(
            "description_too_short",
            f"bank withdrawals need a description of at least "
            f"{policy.min_bank_description_length} characters",
            "description",
        )
    if policy.warn_on_weekend and day is not None and day.weekday() >= 5:
        findings.warning(
            "outside_business_days",
            f"{day.isoformat()} is a weekend, make sure the withdrawal was approved",
            "transaction_date",
        )


def evaluate(
    draft: TransactionDraft,
    category: Optional[Category],
    totals: CategoryTotals = CategoryTotals(),
    policy: ValidationPolicy = DEFAULT_VALIDATION_POLICY,
    bank_transfer: bool = False,
) -> ValidationResult:
    """Validate a draft against its category's rules.

    Pure function: history totals are passed in.

    Args:
        draft: Transaction being entered or edited
        category: Category resolved from ``draft.category_id``, or None if it
            doesn't exist
        totals: Other recorded transactions of the category for the draft's
            day and month
        policy: Validation parameters
        bank_transfer: Whether the draft is a bank-transfer withdrawal, which
            adds the description-length and weekend advisories

    Returns:
        ValidationResult
    """
    findings = _Findings()

    amount = _check_amount(draft.amount, findings)

    description = (draft.description or "").strip()
    if not description:
        findings.error("description_required", "description is required", "description")
    else:
        _check_flagged_keywords(description, findings, policy)
    if bank_transfer:
        _check_bank_withdrawal(description, draft.transaction_date, findings, policy)

    requires_approval = False
    approval_reason = None

    if draft.category_id is None:
        findings.error("category_required", "category is required", "category_id")
    elif category is None:
        findings.error(
            "category_not_found", f"category {draft.category_id} not found", "category_id"
        )
    else:
        if not category.applies_to(draft.transaction_type):
            findings.error(
                "category_type_mismatch",
                f"category '{category.name}' does not apply to "
                f"{draft.transaction_type.value} transactions",
                "category_id",
            )

        rules = category.validation_rules
        if amount is not None:
            if rules.max_transaction_amount is not None and amount > rules.max_transaction_amount:
                findings.error(
                    "exceeds_transaction_limit",
                    f"transaction exceeds per-transaction limit for category '{category.name}' "
                    f"({_fmt(amount)} > {_fmt(rules.max_transaction_amount)})",
                    "amount",
                )
            if rules.min_transaction_amount is not None and amount < rules.min_transaction_amount:
                findings.error(
                    "below_transaction_minimum",
                    f"transaction is below the minimum of {_fmt(rules.min_transaction_amount)} "
                    f"for category '{category.name}'",
                    "amount",
                )
            if rules.max_daily_amount is not None:
                _check_cap(
                    findings, "daily", totals.daily_amount + amount,
                    rules.max_daily_amount, category.name, policy,
                )
            if rules.max_monthly_amount is not None:
                _check_cap(
                    findings, "monthly", totals.monthly_amount + amount,
                    rules.max_monthly_amount, category.name, policy,
                )

        if rules.max_daily_count is not None and totals.daily_count >= rules.max_daily_count:
            findings.error(
                "exceeds_daily_count",
                f"category '{category.name}' already has {totals.daily_count} transaction(s) "
                f"on this day (limit {rules.max_daily_count})",
                "transaction_date",
            )

        if rules.requires_approval:
            requires_approval = True
            approval_reason = APPROVAL_BY_POLICY
        elif (
            rules.approval_threshold is not None
            and amount is not None
            and amount >= rules.approval_threshold
        ):
            requires_approval = True
            approval_reason = APPROVAL_BY_THRESHOLD

    return ValidationResult(
        errors=tuple(findings.errors),
        warnings=tuple(findings.warnings),
        requires_approval=requires_approval,
        approval_reason=approval_reason,
    )


def month_bounds(day: date) -> tuple[date, date]:
    """Return the first and last day of the month containing ``day``."""
    first = day.replace(day=1)
    last = first + relativedelta(months=1) - timedelta(days=1)
    return first, last


class ValidationService:
    """Service that validates drafts against stored categories and history."""

    def __init__(
        self,
        db: Database,
        policy: ValidationPolicy = DEFAULT_VALIDATION_POLICY,
        today: Callable[[], date] = date.today,
    ):
        """Initialize validation service.

        Args:
            db: Database instance
            policy: Validation parameters
            today: Date used when a draft carries no transaction date
        """
        self.db = db
        self.policy = policy
        self.today = today

    def get_category_totals(self, category: Category, draft: TransactionDraft) -> CategoryTotals:
        """Sum the other recorded transactions of a category around the draft's date."""
        rules = category.validation_rules
        day = draft.transaction_date or self.today()
        exclude = draft.transaction_id

        daily_amount = Decimal("0")
        monthly_amount = Decimal("0")
        daily_count = 0
        if rules.max_daily_amount is not None:
            daily_amount = self.db.sum_transaction_amounts(
                category.id, day, day, exclude_transaction_id=exclude
            )
        if rules.max_monthly_amount is not None:
            first, last = month_bounds(day)
            monthly_amount = self.db.sum_transaction_amounts(
                category.id, first, last, exclude_transaction_id=exclude
            )
        if rules.max_daily_count is not None:
            daily_count = self.db.count_transactions(
                category.id, day, day, exclude_transaction_id=exclude
            )
        return CategoryTotals(
            daily_amount=daily_amount,
            monthly_amount=monthly_amount,
            daily_count=daily_count,
        )

    def is_bank_withdrawal(self, draft: TransactionDraft) -> bool:
        """Return True for expense drafts paid by bank transfer."""
        if draft.transaction_type != TransactionType.EXPENSE or draft.payment_method_id is None:
            return False
        payment_method = self.db.get_payment_method(draft.payment_method_id)
        return payment_method is not None and payment_method.is_bank_transfer

    def validate(self, draft: TransactionDraft) -> ValidationResult:
        """Validate a draft. Has no side effects."""
        if draft.transaction_date is None:
            draft = replace(draft, transaction_date=self.today())
        category = None
        totals = CategoryTotals()
        if draft.category_id is not None:
            category = self.db.get_category(draft.category_id)
            if category is not None:
                totals = self.get_category_totals(category, draft)
        return evaluate(
            draft, category, totals, self.policy, bank_transfer=self.is_bank_withdrawal(draft)
        )
