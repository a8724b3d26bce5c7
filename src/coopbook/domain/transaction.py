"""Transaction entry service.

Follows the entry form: a bank-transfer withdrawal gets a category
suggestion, every transaction is validated, the transaction is saved, and
the classification outcome is logged. Ledger failures never undo a save.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional

from coopbook.database.base import Database
from coopbook.domain.classifier import (
    DEFAULT_SCORING_POLICY,
    ClassificationService,
    ScoringPolicy,
)
from coopbook.domain.entities import (
    ClassificationResult,
    Transaction,
    TransactionDraft,
    TransactionType,
    ValidationResult,
)
from coopbook.domain.errors import (
    LedgerError,
    NotFoundError,
    ValidationError,
    payment_method_not_found,
)
from coopbook.domain.ledger import ClassificationLedger, LedgerEntry, utc_now
from coopbook.domain.validator import (
    DEFAULT_VALIDATION_POLICY,
    ValidationPolicy,
    ValidationService,
)

logger = logging.getLogger(__name__)

# Errors that leave the transaction unsavable, even when forced.
INPUT_ERROR_CODES = frozenset(
    {
        "amount_required",
        "amount_invalid",
        "amount_not_positive",
        "description_required",
        "category_required",
        "category_not_found",
    }
)


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of saving a transaction."""

    transaction_id: int
    validation: ValidationResult
    ledger_entry: Optional[LedgerEntry] = None
    ledger_error: Optional[str] = None


class TransactionEntryService:
    """Service backing the transaction entry form."""

    def __init__(
        self,
        db: Database,
        scoring_policy: ScoringPolicy = DEFAULT_SCORING_POLICY,
        validation_policy: ValidationPolicy = DEFAULT_VALIDATION_POLICY,
        clock: Callable[[], datetime] = utc_now,
        today: Callable[[], date] = date.today,
    ):
        """Initialize transaction entry service.

        Args:
            db: Database instance
            scoring_policy: Classifier parameters
            validation_policy: Validator parameters
            clock: Source of ledger timestamps
            today: Date used when a draft carries no transaction date
        """
        self.db = db
        self.today = today
        self.classification = ClassificationService(db, scoring_policy)
        self.validation = ValidationService(db, validation_policy, today)
        self.ledger = ClassificationLedger(db, clock)

    def should_classify(self, draft: TransactionDraft) -> bool:
        """Return True for expense drafts paid by bank transfer."""
        if draft.transaction_type != TransactionType.EXPENSE or draft.payment_method_id is None:
            return False
        payment_method = self.db.get_payment_method(draft.payment_method_id)
        return payment_method is not None and payment_method.is_bank_transfer

    def suggest_category(self, draft: TransactionDraft) -> Optional[ClassificationResult]:
        """Classify a draft, or return None when it is not a bank-transfer withdrawal."""
        if not self.should_classify(draft):
            return None
        return self.classification.classify(draft)

    def validate(self, draft: TransactionDraft) -> ValidationResult:
        """Validate a draft against its category's policy."""
        return self.validation.validate(draft)

    def submit(
        self,
        draft: TransactionDraft,
        suggestion: Optional[ClassificationResult] = None,
        override_reason: Optional[str] = None,
        block_invalid: bool = True,
    ) -> SubmissionResult:
        """Validate, save, and log a transaction.

        Args:
            draft: Transaction with its final category
            suggestion: Classifier output shown for this draft, if any; when
                given, exactly one ledger entry is written
            override_reason: Reason recorded if the category differs from
                the suggestion
            block_invalid: If False, policy errors (limits, applicability)
                are reported but the transaction is saved anyway. Missing or
                invalid fields always block.

        Returns:
            SubmissionResult

        Raises:
            ValidationError: If the draft cannot be saved
            NotFoundError: If the payment method doesn't exist
        """
        validation = self.validate(draft)
        blocking = [
            e for e in validation.errors if block_invalid or e.code in INPUT_ERROR_CODES
        ]
        if blocking:
            raise ValidationError("; ".join(e.message for e in blocking))

        if draft.payment_method_id is not None and self.db.get_payment_method(draft.payment_method_id) is None:
            raise NotFoundError(payment_method_not_found(draft.payment_method_id))

        transaction_id = self.db.create_transaction(
            amount=Decimal(str(draft.amount)),
            description=draft.description.strip(),
            transaction_type=draft.transaction_type,
            transaction_date=draft.transaction_date or self.today(),
            category_id=draft.category_id,
            payment_method_id=draft.payment_method_id,
        )

        if suggestion is None:
            return SubmissionResult(transaction_id=transaction_id, validation=validation)

        try:
            entry = self.ledger.record_submission(
                transaction_id, suggestion, draft.category_id, reason=override_reason
            )
        except LedgerError as e:
            logger.warning("Transaction %s saved but not logged: %s", transaction_id, e)
            return SubmissionResult(
                transaction_id=transaction_id, validation=validation, ledger_error=str(e)
            )
        return SubmissionResult(transaction_id=transaction_id, validation=validation, ledger_entry=entry)

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category_id: Optional[int] = None,
    ) -> list[Transaction]:
        """List saved transactions, newest first."""
        return self.db.list_transactions(
            start_date=start_date, end_date=end_date, category_id=category_id
        )
