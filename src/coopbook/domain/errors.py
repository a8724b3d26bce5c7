"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class MalformedRecordError(DomainError):
    """A stored pattern or category rule record cannot be interpreted."""


class LedgerError(DomainError):
    """Classification ledger could not be written or read."""


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def category_name_not_found(name: str) -> str:
    """Return message for missing category by name."""
    return f"Category '{name}' not found"


def pattern_not_found(pattern_id: int) -> str:
    """Return message for missing pattern by ID."""
    return f"Pattern {pattern_id} not found"


def payment_method_not_found(payment_method_id: int) -> str:
    """Return message for missing payment method by ID."""
    return f"Payment method {payment_method_id} not found"


def duplicate_name(kind: str, name: str) -> str:
    """Return message for a name that is already taken."""
    return f"{kind} with name '{name}' already exists"


def invalid_amount_range(amount_min, amount_max) -> str:
    """Return message for an inverted amount range."""
    return f"Invalid amount range: minimum {amount_min} is greater than maximum {amount_max}"


def invalid_confidence(confidence) -> str:
    """Return message for a confidence outside 0-100."""
    return f"Confidence score must be between 0 and 100, got {confidence}"


def ledger_write_failed(kind: str, transaction_id: int) -> str:
    """Return message for a failed ledger append."""
    return f"Could not write {kind} log entry for transaction {transaction_id}"
