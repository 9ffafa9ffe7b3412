# ledger_recon/core/__init__.py

# Only leaf modules here: ledger_recon.models imports the normalizers, so
# re-exporting the engine from this package would be circular.
from ledger_recon.core.hashing import build_duplicate_key, duplicate_check_hash
from ledger_recon.core.normalizers import (
    normalize_amount,
    normalize_date,
    normalize_method,
    normalize_name,
    normalize_text,
    value_cents,
)
from ledger_recon.core.similarity import dice_coefficient

__all__ = [
    "build_duplicate_key",
    "duplicate_check_hash",
    "normalize_amount",
    "normalize_date",
    "normalize_method",
    "normalize_name",
    "normalize_text",
    "value_cents",
    "dice_coefficient",
]
