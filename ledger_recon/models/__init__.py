# ledger_recon/models/__init__.py

from ledger_recon.models.transaction import (
    Transaction,
    TransactionCreate,
    TransactionStatus,
    KEY_FIELDS,
    PENDING_LEDGER,
    PENDING_STATEMENT,
    RECONCILED,
    DELETED,
)
from ledger_recon.models.match import (
    MatchCriteria,
    MatchEvaluation,
    MatchDetail,
    MatchPair,
    MatchStatus,
    SearchOutcome,
    SelectionPolicy,
)
from ledger_recon.models.reconciliation import (
    CommitResult,
    DuplicateFilterResult,
    ImportResult,
    ImportRun,
    ImportRunStatus,
    IMPORT_FAILED,
    IMPORT_IN_PROGRESS,
    IMPORT_SUCCESS,
    ReconciliationSummary,
)

__all__ = [
    # Transaction
    "Transaction",
    "TransactionCreate",
    "TransactionStatus",
    "KEY_FIELDS",
    "PENDING_LEDGER",
    "PENDING_STATEMENT",
    "RECONCILED",
    "DELETED",
    # Match
    "MatchCriteria",
    "MatchEvaluation",
    "MatchDetail",
    "MatchPair",
    "MatchStatus",
    "SearchOutcome",
    "SelectionPolicy",
    # Reconciliation
    "CommitResult",
    "DuplicateFilterResult",
    "ImportResult",
    "ImportRun",
    "ImportRunStatus",
    "IMPORT_FAILED",
    "IMPORT_IN_PROGRESS",
    "IMPORT_SUCCESS",
    "ReconciliationSummary",
]
