# ledger_recon/models/transaction.py

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Literal
from pydantic import BaseModel, Field, field_validator

from ledger_recon.core.normalizers import normalize_amount, normalize_date

TransactionStatus = Literal["pending-ledger", "pending-statement", "reconciled", "deleted"]

PENDING_LEDGER = "pending-ledger"
PENDING_STATEMENT = "pending-statement"
RECONCILED = "reconciled"
DELETED = "deleted"

# Columns that define a transaction for duplicate detection
KEY_FIELDS = ("date", "value", "name", "depositor", "car", "payment_method")


class TransactionCreate(BaseModel):
    """Transaction as handed over by an upstream importer."""

    date: date
    value: Decimal
    name: Optional[str] = None
    depositor: Optional[str] = None
    car: Optional[str] = None
    payment_method: Optional[str] = None
    historical_text: Optional[str] = None
    source: str
    status: Literal["pending-ledger", "pending-statement"] = PENDING_LEDGER
    sheet_order: Optional[int] = None

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, v: Any) -> date:
        parsed = normalize_date(v)
        if parsed is None:
            raise ValueError(f"Unrecognized date: {v!r}")
        return parsed

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, v: Any) -> Decimal:
        parsed = normalize_amount(v)
        if parsed is None:
            raise ValueError(f"Unrecognized amount: {v!r}")
        return parsed


class Transaction(TransactionCreate):
    """A persisted transaction row."""

    id: str
    status: TransactionStatus = PENDING_LEDGER
    confidence: Optional[int] = Field(default=None, ge=0, le=100)
    matched_transaction_id: Optional[str] = None
    duplicate_check_hash: Optional[str] = None
    deleted_reason: Optional[str] = None
    previous_status: Optional[TransactionStatus] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def label(self) -> str:
        """Short description used in log lines and failure reports."""
        who = self.name or self.depositor or "(no name)"
        return f"{who} - ${self.value} - {self.date.isoformat()}"
