"""Utilities for resolving entity names to IDs."""

from typing import Callable, Optional, Protocol

from coopbook.domain.category import CategoryService
from coopbook.domain.errors import NotFoundError
from coopbook.domain.patterns import PatternService
from coopbook.domain.payment_method import PaymentMethodService


class _Named(Protocol):
    id: int
    name: str


def _resolve(
    kind: str,
    value: str | int,
    get_by_id: Callable[[int], Optional[_Named]],
    list_all: Callable[[], list],
) -> int:
    """Resolve a name or ID (int or numeric string) to an ID.

    Raises:
        NotFoundError: If nothing matches
    """
    if isinstance(value, int):
        if get_by_id(value) is None:
            raise NotFoundError(f"{kind} ID {value} not found")
        return value

    text = str(value).strip()
    if text.isdigit():
        entity_id = int(text)
        if get_by_id(entity_id) is None:
            raise NotFoundError(f"{kind} ID {entity_id} not found")
        return entity_id

    for entity in list_all():
        if entity.name == text:
            return entity.id
    lowered = text.lower()
    matches = [e for e in list_all() if e.name.lower() == lowered]
    if len(matches) == 1:
        return matches[0].id

    raise NotFoundError(f"{kind} '{text}' not found")


def resolve_category(category_service: CategoryService, category: str | int) -> int:
    """Resolve category name or ID to category ID."""
    return _resolve("Category", category, category_service.get_category, category_service.list_categories)


def resolve_pattern(pattern_service: PatternService, pattern: str | int) -> int:
    """Resolve pattern name or ID to pattern ID."""
    return _resolve("Pattern", pattern, pattern_service.get_pattern, pattern_service.list_patterns)


def resolve_payment_method(payment_method_service: PaymentMethodService, payment_method: str | int) -> int:
    """Resolve payment method name or ID to payment method ID."""
    return _resolve(
        "Payment method",
        payment_method,
        payment_method_service.get_payment_method,
        payment_method_service.list_payment_methods,
    )
