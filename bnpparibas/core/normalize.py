"""
Normalization of the date, amount and text fields found in export files.
"""
import re
from decimal import Decimal, InvalidOperation
import logging

from .errors import ParseError

logger = logging.getLogger(__name__)

DATE_RE = re.compile(r'^(\d{2})/(\d{2})/(\d{2})$')
AMOUNT_RE = re.compile(r'^-?\d+,\d+$')
WHITESPACE_RE = re.compile(r'\s+')

# Two-digit years starting with one of these belong to the 1900s.
LAST_CENTURY_DIGITS = ('7', '8', '9')


def normalize_date(value: str) -> str:
    """
    Convert a DD/MM/YY date into ISO YYYY-MM-DD.

    Years 70-99 map to 19YY, everything else to 20YY. Day and month are
    copied through without range checks.

    Args:
        value: Raw date string

    Returns:
        ISO formatted date string

    Raises:
        ParseError: if the value is not three two-digit groups
    """
    if value is None:
        raise ParseError("Missing date", field="date", line=value)

    match = DATE_RE.match(value.strip())
    if not match:
        raise ParseError("Invalid date", field="date", line=value)

    day, month, year = match.groups()
    century = '19' if year[0] in LAST_CENTURY_DIGITS else '20'

    return f"{century}{year}-{month}-{day}"


def normalize_amount(value: str) -> Decimal:
    """
    Convert a comma-decimal amount ("1234,56", "-12,00") into a Decimal.

    Args:
        value: Raw amount string

    Returns:
        Decimal value

    Raises:
        ParseError: if the value has no comma or is not numeric
    """
    if value is None:
        raise ParseError("Missing amount", field="amount", line=value)

    cleaned = value.strip()
    if not AMOUNT_RE.match(cleaned):
        raise ParseError("Invalid amount", field="amount", line=value)

    try:
        return Decimal(cleaned.replace(',', '.', 1))
    except InvalidOperation as e:
        raise ParseError("Invalid amount", field="amount", line=value) from e


def collapse_whitespace(value: str) -> str:
    """Collapse every run of whitespace into a single space."""
    return WHITESPACE_RE.sub(' ', value)
