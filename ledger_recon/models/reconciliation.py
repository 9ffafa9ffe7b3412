# ledger_recon/models/reconciliation.py

from datetime import date, datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

from ledger_recon.models.transaction import TransactionCreate


# ============================================
# Import
# ============================================

class DuplicateFilterResult(BaseModel):
    """Unique subset of an import batch plus why the rest was dropped."""

    unique: list[TransactionCreate] = Field(default_factory=list)
    persisted_duplicates: int = 0
    intra_batch_duplicates: int = 0

    @property
    def dropped(self) -> int:
        return self.persisted_duplicates + self.intra_batch_duplicates


class ImportResult(BaseModel):
    """Outcome of one import."""

    total: int = 0
    inserted: int = 0
    duplicates: int = 0
    intra_batch_duplicates: int = 0
    errors: int = 0
    import_id: Optional[str] = None


ImportRunStatus = Literal["in_progress", "success", "failed"]

IMPORT_IN_PROGRESS = "in_progress"
IMPORT_SUCCESS = "success"
IMPORT_FAILED = "failed"


class ImportRun(BaseModel):
    """One row of the import history log."""

    id: Optional[str] = None
    source: str
    table_name: Optional[str] = None
    status: ImportRunStatus = IMPORT_IN_PROGRESS
    total_records_processed: int = 0
    records_imported: int = 0
    duplicates_skipped: int = 0
    intra_batch_duplicates: int = 0
    errors: int = 0
    error_message: Optional[str] = None
    import_started_at: Optional[datetime] = None
    import_completed_at: Optional[datetime] = None


# ============================================
# Reconciliation Run
# ============================================

class CommitResult(BaseModel):
    """Tally of the commit phase."""

    matched: int = 0
    duplicates: int = 0
    conflicts: int = 0
    errors: int = 0
    failed_batches: int = 0


class ReconciliationSummary(BaseModel):
    """Summary of a reconciliation run."""

    total_processed: int
    total_candidates: int
    matched: int
    unmatched: int
    duplicates: int
    conflicts: int
    errors: int
    match_rate: float
    cutoff_date: Optional[date] = None
    duration_ms: int = 0
