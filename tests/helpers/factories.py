# tests/helpers/factories.py

import uuid
from datetime import date
from decimal import Decimal

from ledger_recon.models import Transaction, TransactionCreate


def make_ledger_txn(
    value: float | str = "100.00",
    txn_date: date = date(2025, 10, 16),
    name: str | None = "John Doe",
    payment_method: str | None = "Zelle",
    id: str | None = None,
    **extra,
) -> Transaction:
    return Transaction(
        id=id or f"led_{uuid.uuid4().hex[:8]}",
        date=txn_date,
        value=Decimal(str(value)),
        name=name,
        payment_method=payment_method,
        source=extra.pop("source", "Google Sheets"),
        status=extra.pop("status", "pending-ledger"),
        **extra,
    )


def make_statement_txn(
    value: float | str = "100.00",
    txn_date: date = date(2025, 10, 16),
    depositor: str | None = "JOHN DOE",
    payment_method: str | None = "Zelle",
    id: str | None = None,
    **extra,
) -> Transaction:
    return Transaction(
        id=id or f"stm_{uuid.uuid4().hex[:8]}",
        date=txn_date,
        value=Decimal(str(value)),
        depositor=depositor,
        payment_method=payment_method,
        source=extra.pop("source", "bank_wells_fargo"),
        status=extra.pop("status", "pending-statement"),
        **extra,
    )


def make_import_txn(
    value: float | str = "100.00",
    txn_date: date | str = date(2025, 10, 16),
    name: str | None = None,
    depositor: str | None = "JOHN DOE",
    payment_method: str | None = "Zelle",
    **extra,
) -> TransactionCreate:
    return TransactionCreate(
        date=txn_date,
        value=value,
        name=name,
        depositor=depositor,
        payment_method=payment_method,
        source=extra.pop("source", "bank_wells_fargo"),
        status=extra.pop("status", "pending-statement"),
        **extra,
    )
