# ledger_recon/core/normalizers.py

"""
Data normalization utilities for transactions.

Every place that derives a key from a transaction (duplicate hash, candidate
index, match gates) goes through these helpers so the rules stay identical.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any
import re

CENT = Decimal("0.01")


def normalize_amount(amount: Any) -> Decimal | None:
    """
    Normalize amount to Decimal.

    Handles:
    - Decimals, integers and floats
    - Strings with currency symbols and thousands separators
    - Parenthesized negatives, e.g. "(12.50)"
    """
    if amount is None or isinstance(amount, bool):
        return None

    if isinstance(amount, Decimal):
        return amount

    if isinstance(amount, int):
        return Decimal(amount)

    if isinstance(amount, float):
        # repr keeps 330.1 as 330.1 instead of the binary expansion
        return Decimal(repr(amount))

    if isinstance(amount, str):
        s = amount.strip()
        negative = s.startswith("(") and s.endswith(")")
        cleaned = re.sub(r'[^\d.-]', '', s)
        if not cleaned:
            return None
        try:
            value = Decimal(cleaned)
        except InvalidOperation:
            return None
        return -abs(value) if negative else value

    return None


def normalize_date(d: Any) -> date | None:
    """
    Normalize date to a calendar date.

    The day is taken as written: time of day and UTC offset are dropped,
    never converted, so "2025-10-16T23:30:00-05:00" stays on the 16th.
    """
    if d is None:
        return None

    # datetime is a subclass of date, check it first
    if isinstance(d, datetime):
        return d.date()

    if isinstance(d, date):
        return d

    if isinstance(d, str):
        s = d.strip()
        if not s:
            return None

        try:
            return datetime.fromisoformat(s.replace('Z', '+00:00')).date()
        except ValueError:
            pass

        formats = [
            '%Y-%m-%d',
            '%m/%d/%Y',
            '%Y/%m/%d',
        ]
        for fmt in formats:
            try:
                return datetime.strptime(s, fmt).date()
            except ValueError:
                continue

        # Anything longer with a leading ISO day, e.g. "2025-10-16 08:00:00.123+0000"
        m = re.match(r'^(\d{4})-(\d{2})-(\d{2})', s)
        if m:
            try:
                return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
            except ValueError:
                return None

    return None


def date_label(d: date) -> str:
    """ISO calendar-day label used in keys."""
    return d.isoformat()


def normalize_text(s: str | None) -> str:
    """
    Normalize free text for key building.

    - Lowercase
    - Trim
    - Collapse internal whitespace
    Missing text becomes "" so keys stay well-defined.
    """
    if not s:
        return ""
    return re.sub(r'\s+', ' ', s.strip().lower())


def normalize_name(s: str | None) -> str:
    """Normalize a party name for similarity scoring (punctuation removed)."""
    s = normalize_text(s)
    s = re.sub(r'[^\w\s]', '', s)
    return re.sub(r'\s+', ' ', s).strip()


def normalize_method(method: str | None) -> str:
    """Payment method as compared by the match gates and the index."""
    if not method:
        return ""
    return method.strip().lower()


def round_abs_value(value: Decimal) -> Decimal:
    """|value| rounded half-up to 2 decimal places."""
    return abs(value).quantize(CENT, rounding=ROUND_HALF_UP)


def value_cents(value: Decimal) -> int:
    """|value| as an integer count of cents."""
    return int(round_abs_value(value) * 100)
