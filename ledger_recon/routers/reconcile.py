# ledger_recon/routers/reconcile.py

"""
Reconciliation routes.

The main endpoint that runs the matching engine.
"""

import logging
from datetime import date
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import Optional

from ledger_recon.config import Settings
from ledger_recon.core.reconciliation import ReconciliationResult, reconcile
from ledger_recon.database import TransactionStore
from ledger_recon.dependencies import get_app_settings, get_stores, select_store
from ledger_recon.errors import StorageError
from ledger_recon.models import MatchDetail, MatchPair, ReconciliationSummary, SelectionPolicy

logger = logging.getLogger(__name__)
router = APIRouter()


class ReconcileRequest(BaseModel):
    table: Optional[str] = None
    cutoff_date: Optional[date] = None
    use_default_cutoff: bool = True
    selection: Optional[SelectionPolicy] = None
    include_details: bool = False


class ReconcileResponse(BaseModel):
    success: bool
    table: str
    summary: ReconciliationSummary
    pairs: list[MatchPair]
    details: Optional[list[MatchDetail]] = None


async def run_reconciliation_for(
    store: TransactionStore,
    settings: Settings,
    *,
    cutoff_date: Optional[date] = None,
    use_default_cutoff: bool = True,
    selection: Optional[SelectionPolicy] = None,
) -> ReconciliationResult:
    """Run the engine on one store with the configured thresholds and batching."""
    criteria = settings.match_criteria()
    if selection:
        criteria = criteria.model_copy(update={"selection": selection})

    cutoff = cutoff_date
    if cutoff is None and use_default_cutoff:
        cutoff = settings.min_transaction_date

    return await reconcile(
        store,
        criteria=criteria,
        cutoff_date=cutoff,
        page_size=settings.fetch_page_size,
        batch_size=settings.commit_batch_size,
        progress_interval=settings.progress_interval,
    )


# ============================================
# Main Reconciliation Endpoint
# ============================================

@router.post("/reconcile", response_model=ReconcileResponse)
async def run_reconciliation(
    request: ReconcileRequest,
    stores: dict[str, TransactionStore] = Depends(get_stores),
    settings: Settings = Depends(get_app_settings),
):
    """
    Run automatic reconciliation over all pending transactions of one table.

    1. Fetches pending-ledger and pending-statement records
    2. Runs the matching engine
    3. Commits matched pairs and returns the run summary
    """
    table, store = select_store(stores, request.table, settings)

    try:
        result = await run_reconciliation_for(
            store,
            settings,
            cutoff_date=request.cutoff_date,
            use_default_cutoff=request.use_default_cutoff,
            selection=request.selection,
        )
    except StorageError as e:
        logger.error("Reconciliation of %s aborted: %s", table, e)
        raise HTTPException(status_code=503, detail=f"Storage unavailable: {e.message}")

    return ReconcileResponse(
        success=True,
        table=table,
        summary=result.summary,
        pairs=result.pairs,
        details=result.details if request.include_details else None,
    )
