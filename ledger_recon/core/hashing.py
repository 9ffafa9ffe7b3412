# ledger_recon/core/hashing.py

"""
Canonical key builder.

The key is built from a transaction's defining attributes (date, value,
name, depositor, car, payment_method) after normalization, and the stored
duplicate_check_hash is its SHA-256 digest.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Mapping
import hashlib

from ledger_recon.core.normalizers import (
    date_label,
    normalize_amount,
    normalize_date,
    normalize_text,
    round_abs_value,
)


def build_duplicate_key(
    date: date | str,
    value: Decimal | float | int | str,
    name: str | None = None,
    depositor: str | None = None,
    car: str | None = None,
    payment_method: str | None = None,
) -> str:
    """
    Build the canonical key, e.g. "2025-10-16|330.00|jeremias arias mendez co|||zelle".

    Raises ValueError when the date or value cannot be parsed.
    """
    day = normalize_date(date)
    if day is None:
        raise ValueError(f"Cannot build duplicate key without a date: {date!r}")

    amount = normalize_amount(value)
    if amount is None:
        raise ValueError(f"Cannot build duplicate key without a value: {value!r}")

    parts = [
        date_label(day),
        f"{round_abs_value(amount):.2f}",
        normalize_text(name),
        normalize_text(depositor),
        normalize_text(car),
        normalize_text(payment_method),
    ]
    return "|".join(parts)


def key_for(record: Any) -> str:
    """Canonical key for a model instance or a row mapping."""
    if isinstance(record, Mapping):
        get = record.get
    else:
        def get(field):
            return getattr(record, field, None)

    return build_duplicate_key(
        get("date"),
        get("value"),
        name=get("name"),
        depositor=get("depositor"),
        car=get("car"),
        payment_method=get("payment_method"),
    )


def duplicate_check_hash(record: Any) -> str:
    """SHA-256 hex digest of the canonical key."""
    return hashlib.sha256(key_for(record).encode("utf-8")).hexdigest()
