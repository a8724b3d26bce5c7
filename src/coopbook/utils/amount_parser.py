"""Amount parsing utilities."""

import re
from decimal import Decimal, InvalidOperation

_CURRENCY = re.compile(r"^(rp\.?|idr)\s*|[$€£¥]", re.IGNORECASE)
_DOT_THOUSANDS = re.compile(r"^\d{1,3}(\.\d{3})+$")
_COMMA_THOUSANDS = re.compile(r"^\d{1,3}(,\d{3})+$")


def _normalize_separators(text: str) -> str:
    """Reduce grouping and decimal separators to a plain decimal string.

    Rupiah amounts are usually written "1.500.000,50"; amounts typed in
    English style ("1,500,000.50") are accepted too.
    """
    if "." in text and "," in text:
        if text.rfind(",") > text.rfind("."):
            return text.replace(".", "").replace(",", ".")
        return text.replace(",", "")
    if _DOT_THOUSANDS.match(text):
        return text.replace(".", "")
    if _COMMA_THOUSANDS.match(text):
        return text.replace(",", "")
    return text.replace(",", ".")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "1500000"
    - "Rp 1.500.000"
    - "Rp1.500.000,50"
    - "1,500,000.50"
    - "-250000" or "(250000)" (negative)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = amount_str.strip()

    is_negative = False
    if text.startswith("(") and text.endswith(")"):
        is_negative = True
        text = text[1:-1].strip()
    if text.startswith("-"):
        is_negative = not is_negative
        text = text[1:].strip()

    text = _CURRENCY.sub("", text).replace(" ", "")

    try:
        amount = Decimal(_normalize_separators(text))
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str.strip()}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str.strip()}'")
    return -amount if is_negative else amount
