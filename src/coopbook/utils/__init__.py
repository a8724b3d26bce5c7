"""Utility functions for coopbook."""

from coopbook.utils.date_parser import parse_date
from coopbook.utils.amount_parser import parse_amount
from coopbook.utils.resolver import resolve_category, resolve_pattern, resolve_payment_method

__all__ = [
    "parse_date",
    "parse_amount",
    "resolve_category",
    "resolve_pattern",
    "resolve_payment_method",
]
