"""Abstract database interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from coopbook.domain.entities import (
        AutoClassificationRules,
        Category,
        ClassificationLogEntry,
        Frequency,
        ManualOverrideLogEntry,
        Pattern,
        PaymentMethod,
        PaymentMethodType,
        Transaction,
        TransactionType,
        ValidationRules,
    )


class Database(ABC):
    """Abstract database interface for coopbook.

    Covers the collaborators the domain relies on: the pattern and category
    repository, payment methods, transaction history lookups and the
    classification ledger.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Payment method operations
    @abstractmethod
    def create_payment_method(self, name: str, method_type: PaymentMethodType) -> int:
        """Create a payment method. Returns payment method ID."""
        pass

    @abstractmethod
    def get_payment_method(self, payment_method_id: int) -> Optional[PaymentMethod]:
        """Get payment method by ID."""
        pass

    @abstractmethod
    def list_payment_methods(self) -> list[PaymentMethod]:
        """List all payment methods."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        name: str,
        transaction_type: TransactionType,
        color: Optional[str],
        auto_classification_rules: AutoClassificationRules,
        validation_rules: ValidationRules,
    ) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by name."""
        pass

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """List all categories."""
        pass

    @abstractmethod
    def update_category_rules(
        self,
        category_id: int,
        auto_classification_rules: Optional[AutoClassificationRules] = None,
        validation_rules: Optional[ValidationRules] = None,
    ) -> None:
        """Replace the rule sets that are given; the others are kept."""
        pass

    # Pattern operations
    @abstractmethod
    def create_pattern(
        self,
        name: str,
        description_pattern: str,
        amount_range_min: Optional[Decimal],
        amount_range_max: Optional[Decimal],
        frequency: Frequency,
        category_id: int,
        confidence_score: int,
        is_active: bool = True,
    ) -> int:
        """Create a pattern. Returns pattern ID."""
        pass

    @abstractmethod
    def get_pattern(self, pattern_id: int) -> Optional[Pattern]:
        """Get pattern by ID."""
        pass

    @abstractmethod
    def get_pattern_by_name(self, name: str) -> Optional[Pattern]:
        """Get pattern by name."""
        pass

    @abstractmethod
    def list_patterns(self, active_only: bool = False) -> list[Pattern]:
        """List patterns, highest base confidence first."""
        pass

    @abstractmethod
    def update_pattern(self, pattern_id: int, **fields) -> None:
        """Update pattern fields and bump its ``updated_at``."""
        pass

    @abstractmethod
    def set_pattern_active(self, pattern_id: int, is_active: bool) -> None:
        """Enable or disable a pattern and bump its ``updated_at``."""
        pass

    @abstractmethod
    def delete_pattern(self, pattern_id: int) -> None:
        """Delete a pattern."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        amount: Decimal,
        description: str,
        transaction_type: TransactionType,
        transaction_date: date,
        category_id: int,
        payment_method_id: Optional[int] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category_id: Optional[int] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters, newest first."""
        pass

    @abstractmethod
    def sum_transaction_amounts(
        self,
        category_id: int,
        start_date: date,
        end_date: date,
        exclude_transaction_id: Optional[int] = None,
    ) -> Decimal:
        """Sum amounts of a category's transactions dated within the range (inclusive)."""
        pass

    @abstractmethod
    def count_transactions(
        self,
        category_id: int,
        start_date: date,
        end_date: date,
        exclude_transaction_id: Optional[int] = None,
    ) -> int:
        """Count a category's transactions dated within the range (inclusive)."""
        pass

    # Ledger operations
    @abstractmethod
    def add_classification_log(self, entry: ClassificationLogEntry) -> int:
        """Append a classification entry. Returns entry ID.

        Raises LedgerError if the write fails; nothing is written in that case.
        """
        pass

    @abstractmethod
    def add_manual_override_log(self, entry: ManualOverrideLogEntry) -> int:
        """Append a manual-override entry. Returns entry ID.

        Raises LedgerError if the write fails; nothing is written in that case.
        """
        pass

    @abstractmethod
    def list_classification_logs(
        self, since: Optional[datetime] = None, until: Optional[datetime] = None
    ) -> list[ClassificationLogEntry]:
        """List classification entries by timestamp, newest first."""
        pass

    @abstractmethod
    def list_manual_override_logs(
        self, since: Optional[datetime] = None, until: Optional[datetime] = None
    ) -> list[ManualOverrideLogEntry]:
        """List manual-override entries by timestamp, newest first."""
        pass
