"""Category domain service."""

from typing import Optional

from coopbook.database.base import Database
from coopbook.domain.entities import (
    AutoClassificationRules,
    Category,
    TransactionType,
    ValidationRules,
)
from coopbook.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    category_name_not_found,
    category_not_found,
    duplicate_name,
    invalid_amount_range,
)


def check_validation_rules(rules: ValidationRules) -> None:
    """Raise ValidationError if a rule set contradicts itself."""
    low, high = rules.min_transaction_amount, rules.max_transaction_amount
    if low is not None and high is not None and low > high:
        raise ValidationError(invalid_amount_range(low, high))
    for name in ("max_transaction_amount", "max_daily_amount", "max_monthly_amount", "approval_threshold"):
        value = getattr(rules, name)
        if value is not None and value <= 0:
            raise ValidationError(f"{name} must be greater than zero")
    if rules.max_daily_count is not None and rules.max_daily_count < 1:
        raise ValidationError("max_daily_count must be at least 1")


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self,
        name: str,
        transaction_type: TransactionType = TransactionType.EXPENSE,
        color: Optional[str] = None,
        auto_classification_rules: Optional[AutoClassificationRules] = None,
        validation_rules: Optional[ValidationRules] = None,
    ) -> int:
        """Create a category.

        Args:
            name: Unique category name
            transaction_type: Transactions the category applies to
            color: Optional display color (e.g., "#1e40af")
            auto_classification_rules: Optional classification hints
            validation_rules: Optional spending policy

        Returns:
            Category ID

        Raises:
            ValidationError: If the name is empty or the rules contradict themselves
            ConflictError: If the name is taken
        """
        if not name or not name.strip():
            raise ValidationError("Category name is required")
        if self.db.get_category_by_name(name.strip()) is not None:
            raise ConflictError(duplicate_name("Category", name))

        validation_rules = validation_rules or ValidationRules()
        check_validation_rules(validation_rules)

        return self.db.create_category(
            name=name.strip(),
            transaction_type=TransactionType(transaction_type),
            color=color,
            auto_classification_rules=auto_classification_rules or AutoClassificationRules(),
            validation_rules=validation_rules,
        )

    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID.

        Args:
            category_id: Category ID

        Returns:
            Category entity or None if not found
        """
        return self.db.get_category(category_id)

    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by name."""
        return self.db.get_category_by_name(name)

    def require_category(self, category_id: int) -> Category:
        """Get category by ID or raise NotFoundError."""
        category = self.db.get_category(category_id)
        if category is None:
            raise NotFoundError(category_not_found(category_id))
        return category

    def require_category_by_name(self, name: str) -> Category:
        """Get category by name or raise NotFoundError."""
        category = self.db.get_category_by_name(name)
        if category is None:
            raise NotFoundError(category_name_not_found(name))
        return category

    def list_categories(self, transaction_type: Optional[TransactionType] = None) -> list[Category]:
        """List categories.

        Args:
            transaction_type: If given, only categories usable for this
                direction (including ``both``)

        Returns:
            List of category entities
        """
        categories = self.db.list_categories()
        if transaction_type is None:
            return categories
        return [c for c in categories if c.applies_to(TransactionType(transaction_type))]

    def update_validation_rules(self, category_id: int, rules: ValidationRules) -> None:
        """Replace a category's spending policy."""
        self.require_category(category_id)
        check_validation_rules(rules)
        self.db.update_category_rules(category_id, validation_rules=rules)

    def update_auto_classification_rules(self, category_id: int, rules: AutoClassificationRules) -> None:
        """Replace a category's classification hints."""
        self.require_category(category_id)
        self.db.update_category_rules(category_id, auto_classification_rules=rules)
