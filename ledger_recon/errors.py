# ledger_recon/errors.py

"""
Storage errors raised by the transaction store.

The engine only needs to tell a uniqueness violation apart from everything
else, so the hierarchy stays flat under StorageError.
"""

from typing import Optional

UNIQUE_VIOLATION = "23505"


class StorageError(Exception):
    """A storage call failed."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class DuplicateRecordError(StorageError):
    """The write would violate the duplicate_check_hash unique constraint."""

    def __init__(self, message: str = "Duplicate transaction", code: Optional[str] = UNIQUE_VIOLATION):
        super().__init__(message, code)


class MatchConflictError(StorageError):
    """The row was claimed by another reconciliation before this update landed."""


class RecordNotFoundError(StorageError):
    """No row exists with the requested id."""
