"""Conversion between stored category rule blobs and tagged rule structures.

Categories keep their rules as JSON objects. Parsing is strict: an unknown
key or a value of the wrong shape raises MalformedRecordError so the caller
can log and skip the record.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from coopbook.domain.entities import (
    AmountRange,
    AutoClassificationRules,
    Frequency,
    ValidationRules,
)
from coopbook.domain.errors import MalformedRecordError

_AMOUNT_FIELDS = (
    "max_transaction_amount",
    "min_transaction_amount",
    "max_daily_amount",
    "max_monthly_amount",
    "approval_threshold",
)


def _decimal(raw: dict[str, Any], key: str) -> Optional[Decimal]:
    value = raw.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise MalformedRecordError(f"'{key}' must be a number, got {value!r}")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise MalformedRecordError(f"'{key}' must be a number, got {value!r}")
    if not amount.is_finite():
        raise MalformedRecordError(f"'{key}' must be a finite number, got {value!r}")
    if amount < 0:
        raise MalformedRecordError(f"'{key}' must not be negative")
    return amount


def parse_validation_rules(raw: Optional[dict[str, Any]]) -> ValidationRules:
    """Parse a stored validation rule blob.

    Raises:
        MalformedRecordError: If the blob has unknown keys or bad values
    """
    if not raw:
        return ValidationRules()
    if not isinstance(raw, dict):
        raise MalformedRecordError(f"Validation rules must be an object, got {type(raw).__name__}")

    known = set(_AMOUNT_FIELDS) | {"max_daily_count", "requires_approval"}
    unknown = set(raw) - known
    if unknown:
        raise MalformedRecordError(f"Unknown validation rule(s): {', '.join(sorted(unknown))}")

    amounts = {key: _decimal(raw, key) for key in _AMOUNT_FIELDS}

    daily_count = raw.get("max_daily_count")
    if daily_count is not None and (
        isinstance(daily_count, bool) or not isinstance(daily_count, int) or daily_count < 0
    ):
        raise MalformedRecordError(f"'max_daily_count' must be a non-negative integer, got {daily_count!r}")

    requires_approval = raw.get("requires_approval", False)
    if not isinstance(requires_approval, bool):
        raise MalformedRecordError(f"'requires_approval' must be true or false, got {requires_approval!r}")

    low, high = amounts["min_transaction_amount"], amounts["max_transaction_amount"]
    if low is not None and high is not None and low > high:
        raise MalformedRecordError("'min_transaction_amount' is greater than 'max_transaction_amount'")

    return ValidationRules(
        max_daily_count=daily_count,
        requires_approval=requires_approval,
        **amounts,
    )


def validation_rules_to_dict(rules: ValidationRules) -> Optional[dict[str, Any]]:
    """Serialize validation rules for storage. Empty rules become None."""
    if rules.is_empty:
        return None

    data: dict[str, Any] = {}
    for key in _AMOUNT_FIELDS:
        value = getattr(rules, key)
        if value is not None:
            data[key] = str(value)
    if rules.max_daily_count is not None:
        data["max_daily_count"] = rules.max_daily_count
    data["requires_approval"] = rules.requires_approval
    return data


def parse_auto_classification_rules(raw: Optional[dict[str, Any]]) -> AutoClassificationRules:
    """Parse a stored auto-classification rule blob.

    Raises:
        MalformedRecordError: If the blob has bad values
    """
    if not raw:
        return AutoClassificationRules()
    if not isinstance(raw, dict):
        raise MalformedRecordError(
            f"Auto-classification rules must be an object, got {type(raw).__name__}"
        )

    amount_range = None
    raw_range = raw.get("amount_range")
    if raw_range is not None:
        if not isinstance(raw_range, dict):
            raise MalformedRecordError("'amount_range' must be an object with 'min' and 'max'")
        low, high = _decimal(raw_range, "min"), _decimal(raw_range, "max")
        if low is not None and high is not None and low > high:
            raise MalformedRecordError(f"'amount_range' minimum {low} is greater than maximum {high}")
        amount_range = AmountRange(min=low, max=high)

    keywords = raw.get("keywords") or []
    if not isinstance(keywords, list) or not all(isinstance(k, str) for k in keywords):
        raise MalformedRecordError("'keywords' must be a list of strings")

    frequency = raw.get("frequency")
    if frequency is not None:
        try:
            frequency = Frequency(frequency)
        except ValueError:
            raise MalformedRecordError(f"Unknown frequency '{frequency}'")

    return AutoClassificationRules(
        amount_range=amount_range,
        keywords=tuple(k.strip().lower() for k in keywords if k.strip()),
        frequency=frequency,
    )


def auto_classification_rules_to_dict(rules: AutoClassificationRules) -> Optional[dict[str, Any]]:
    """Serialize auto-classification rules for storage. Empty rules become None."""
    if rules == AutoClassificationRules():
        return None

    data: dict[str, Any] = {}
    if rules.amount_range is not None:
        data["amount_range"] = {
            "min": str(rules.amount_range.min) if rules.amount_range.min is not None else None,
            "max": str(rules.amount_range.max) if rules.amount_range.max is not None else None,
        }
    if rules.keywords:
        data["keywords"] = list(rules.keywords)
    if rules.frequency is not None:
        data["frequency"] = rules.frequency.value
    return data
