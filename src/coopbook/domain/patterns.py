"""Pattern store and pattern administration service."""

import logging
from decimal import Decimal, InvalidOperation
from typing import Iterable, Iterator, Optional

from coopbook.database.base import Database
from coopbook.domain.entities import Frequency, Pattern
from coopbook.domain.errors import (
    ConflictError,
    MalformedRecordError,
    NotFoundError,
    ValidationError,
    category_not_found,
    duplicate_name,
    invalid_amount_range,
    invalid_confidence,
    pattern_not_found,
)

logger = logging.getLogger(__name__)

KEYWORD_SEPARATOR = "|"


def parse_keywords(expression: Optional[str]) -> tuple[str, ...]:
    """Split a pipe-delimited keyword expression into lowercase alternatives.

    Blank alternatives are dropped and duplicates collapse to one entry,
    keeping first-seen order.

    Args:
        expression: Keyword expression such as ``"gaji|salary|payroll"``

    Returns:
        Tuple of distinct lowercase keywords
    """
    if not expression:
        return ()

    keywords: list[str] = []
    for part in expression.split(KEYWORD_SEPARATOR):
        keyword = part.strip().lower()
        if keyword and keyword not in keywords:
            keywords.append(keyword)
    return tuple(keywords)


def check_pattern(pattern: Pattern) -> None:
    """Raise MalformedRecordError if a stored pattern cannot be used."""
    if not parse_keywords(pattern.description_pattern):
        raise MalformedRecordError(f"Pattern '{pattern.name}' has no keywords")

    low, high = pattern.amount_range_min, pattern.amount_range_max
    if low is not None and high is not None and low > high:
        raise MalformedRecordError(
            f"Pattern '{pattern.name}': {invalid_amount_range(low, high)}"
        )

    if pattern.confidence_score is None or not 0 <= pattern.confidence_score <= 100:
        raise MalformedRecordError(
            f"Pattern '{pattern.name}': {invalid_confidence(pattern.confidence_score)}"
        )


class PatternStore:
    """Immutable snapshot of the classification patterns for one request.

    Malformed patterns are dropped with a warning when the snapshot is
    built, so the classifier only ever sees usable rules.
    """

    def __init__(self, patterns: Iterable[Pattern]):
        usable = []
        for pattern in patterns:
            try:
                check_pattern(pattern)
            except MalformedRecordError as e:
                logger.warning("Skipping pattern %s: %s", pattern.id, e)
                continue
            usable.append(pattern)
        self._patterns = tuple(usable)

    @classmethod
    def load(cls, db: Database) -> "PatternStore":
        """Build a snapshot from every pattern currently in the store."""
        return cls(db.list_patterns(active_only=False))

    def __iter__(self) -> Iterator[Pattern]:
        return iter(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)

    def active(self) -> tuple[Pattern, ...]:
        """Return active patterns only."""
        return tuple(p for p in self._patterns if p.is_active)

    def candidates_for(self, amount: Decimal) -> tuple[Pattern, ...]:
        """Return active patterns whose amount range contains ``amount``."""
        return tuple(p for p in self.active() if p.amount_range.contains(amount))


def _to_decimal(value, label: str) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"Invalid {label}: {value!r}")


class PatternService:
    """Service for administering classification patterns."""

    def __init__(self, db: Database):
        """Initialize pattern service.

        Args:
            db: Database instance
        """
        self.db = db

    def _check_fields(
        self,
        name: str,
        description_pattern: str,
        amount_range_min: Optional[Decimal],
        amount_range_max: Optional[Decimal],
        confidence_score: int,
        category_id: int,
    ) -> None:
        if not name or not name.strip():
            raise ValidationError("Pattern name is required")
        if not parse_keywords(description_pattern):
            raise ValidationError("Pattern needs at least one keyword")
        if (
            amount_range_min is not None
            and amount_range_max is not None
            and amount_range_min > amount_range_max
        ):
            raise ValidationError(invalid_amount_range(amount_range_min, amount_range_max))
        if not 0 <= confidence_score <= 100:
            raise ValidationError(invalid_confidence(confidence_score))
        if self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

    def create_pattern(
        self,
        name: str,
        description_pattern: str,
        category_id: int,
        amount_range_min=None,
        amount_range_max=None,
        frequency: Frequency = Frequency.IRREGULAR,
        confidence_score: int = 80,
        is_active: bool = True,
    ) -> int:
        """Create a classification pattern.

        Args:
            name: Unique pattern name
            description_pattern: Pipe-delimited keyword alternatives
            category_id: Category suggested when the pattern matches
            amount_range_min: Optional inclusive lower bound
            amount_range_max: Optional inclusive upper bound
            frequency: Frequency class of the withdrawals it describes
            confidence_score: Base confidence, 0-100
            is_active: Whether the classifier should consider it

        Returns:
            Pattern ID

        Raises:
            ValidationError: If the fields are inconsistent
            NotFoundError: If the category doesn't exist
            ConflictError: If the name is taken
        """
        low = _to_decimal(amount_range_min, "minimum amount")
        high = _to_decimal(amount_range_max, "maximum amount")
        self._check_fields(name, description_pattern, low, high, confidence_score, category_id)
        if self.db.get_pattern_by_name(name) is not None:
            raise ConflictError(duplicate_name("Pattern", name))

        return self.db.create_pattern(
            name=name.strip(),
            description_pattern=description_pattern,
            amount_range_min=low,
            amount_range_max=high,
            frequency=Frequency(frequency),
            category_id=category_id,
            confidence_score=confidence_score,
            is_active=is_active,
        )

    def get_pattern(self, pattern_id: int) -> Optional[Pattern]:
        """Get pattern by ID."""
        return self.db.get_pattern(pattern_id)

    def get_pattern_by_name(self, name: str) -> Optional[Pattern]:
        """Get pattern by its exact name."""
        return self.db.get_pattern_by_name(name)

    def require_pattern(self, pattern_id: int) -> Pattern:
        """Get pattern by ID or raise NotFoundError."""
        pattern = self.db.get_pattern(pattern_id)
        if pattern is None:
            raise NotFoundError(pattern_not_found(pattern_id))
        return pattern

    def list_patterns(self, active_only: bool = False) -> list[Pattern]:
        """List patterns, optionally only the active ones."""
        return self.db.list_patterns(active_only=active_only)

    def update_pattern(
        self,
        pattern_id: int,
        name: Optional[str] = None,
        description_pattern: Optional[str] = None,
        category_id: Optional[int] = None,
        amount_range_min=None,
        amount_range_max=None,
        frequency: Optional[Frequency] = None,
        confidence_score: Optional[int] = None,
    ) -> None:
        """Update pattern fields. Fields left as None keep their value.

        Raises:
            NotFoundError: If the pattern or new category doesn't exist
            ValidationError: If the merged pattern would be inconsistent
            ConflictError: If the new name is taken by another pattern
        """
        current = self.require_pattern(pattern_id)

        merged_name = name if name is not None else current.name
        merged_keywords = (
            description_pattern if description_pattern is not None else current.description_pattern
        )
        merged_category = category_id if category_id is not None else current.category_id
        low = _to_decimal(amount_range_min, "minimum amount")
        high = _to_decimal(amount_range_max, "maximum amount")
        merged_min = low if low is not None else current.amount_range_min
        merged_max = high if high is not None else current.amount_range_max
        merged_confidence = (
            confidence_score if confidence_score is not None else current.confidence_score
        )
        self._check_fields(
            merged_name, merged_keywords, merged_min, merged_max, merged_confidence, merged_category
        )

        if name is not None:
            existing = self.db.get_pattern_by_name(name)
            if existing is not None and existing.id != pattern_id:
                raise ConflictError(duplicate_name("Pattern", name))

        self.db.update_pattern(
            pattern_id,
            name=merged_name.strip(),
            description_pattern=merged_keywords,
            category_id=merged_category,
            amount_range_min=merged_min,
            amount_range_max=merged_max,
            frequency=Frequency(frequency) if frequency is not None else current.frequency,
            confidence_score=merged_confidence,
        )

    def set_active(self, pattern_id: int, is_active: bool) -> None:
        """Enable or disable a pattern without deleting it."""
        self.require_pattern(pattern_id)
        self.db.set_pattern_active(pattern_id, is_active)

    def delete_pattern(self, pattern_id: int) -> None:
        """Delete a pattern."""
        self.require_pattern(pattern_id)
        self.db.delete_pattern(pattern_id)
