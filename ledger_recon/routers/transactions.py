# ledger_recon/routers/transactions.py

"""
Transaction routes.

Import of already-parsed records, the import history, soft delete and
restore.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from typing import Optional

from ledger_recon.config import Settings
from ledger_recon.core.importer import import_transactions
from ledger_recon.core.lifecycle import restore, soft_delete
from ledger_recon.database import ImportHistoryStore, TransactionStore
from ledger_recon.dependencies import get_app_settings, get_import_history, get_stores, select_store
from ledger_recon.errors import RecordNotFoundError, StorageError
from ledger_recon.models import (
    ImportResult,
    ImportRun,
    ReconciliationSummary,
    Transaction,
    TransactionCreate,
)
from ledger_recon.routers.reconcile import run_reconciliation_for

logger = logging.getLogger(__name__)
router = APIRouter()


# ============================================
# Request/Response Models
# ============================================

class ImportRequest(BaseModel):
    transactions: list[TransactionCreate] = Field(default_factory=list)
    table: Optional[str] = None
    source: Optional[str] = None
    reconcile_after: bool = False


class ImportResponse(BaseModel):
    success: bool
    table: str
    result: ImportResult
    reconciliation: Optional[ReconciliationSummary] = None


class ImportHistoryResponse(BaseModel):
    imports: list[ImportRun]


class DeleteRequest(BaseModel):
    reason: str


class TransactionResponse(BaseModel):
    success: bool
    transaction: Transaction


# ============================================
# Import
# ============================================

@router.post("/import", response_model=ImportResponse)
async def import_batch(
    request: ImportRequest,
    stores: dict[str, TransactionStore] = Depends(get_stores),
    history: Optional[ImportHistoryStore] = Depends(get_import_history),
    settings: Settings = Depends(get_app_settings),
):
    """
    Import parsed transactions, skipping duplicates.

    With ``reconcile_after`` a reconciliation run over the same table follows
    the import, using the default cutoff.
    """
    table, store = select_store(stores, request.table, settings)

    try:
        result = await import_transactions(
            store,
            request.transactions,
            batch_size=settings.insert_batch_size,
            page_size=settings.fetch_page_size,
            history=history,
            source=request.source,
            table=table,
        )
    except StorageError as e:
        logger.error("Import into %s aborted: %s", table, e)
        raise HTTPException(status_code=503, detail=f"Storage unavailable: {e.message}")

    summary = None
    if request.reconcile_after:
        try:
            reconciliation = await run_reconciliation_for(store, settings)
        except StorageError as e:
            logger.error("Reconciliation after import into %s aborted: %s", table, e)
            raise HTTPException(status_code=503, detail=f"Storage unavailable: {e.message}")
        summary = reconciliation.summary

    return ImportResponse(success=True, table=table, result=result, reconciliation=summary)


@router.get("/imports", response_model=ImportHistoryResponse)
async def list_imports(
    limit: int = Query(default=20, ge=1, le=100),
    history: Optional[ImportHistoryStore] = Depends(get_import_history),
):
    """
    Most recent import runs, newest first.
    """
    if history is None:
        raise HTTPException(status_code=503, detail="Import history is not configured")
    try:
        runs = await history.recent(limit)
    except StorageError as e:
        raise HTTPException(status_code=503, detail=f"Storage unavailable: {e.message}")

    return ImportHistoryResponse(imports=runs)


# ============================================
# Soft Delete / Restore
# ============================================

@router.post("/{transaction_id}/delete", response_model=TransactionResponse)
async def delete_transaction(
    transaction_id: str,
    request: DeleteRequest,
    table: Optional[str] = None,
    stores: dict[str, TransactionStore] = Depends(get_stores),
    settings: Settings = Depends(get_app_settings),
):
    """
    Soft-delete a transaction with a reason.
    """
    _, store = select_store(stores, table, settings)
    try:
        transaction = await soft_delete(store, transaction_id, request.reason)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Transaction not found")
    except StorageError as e:
        raise HTTPException(status_code=503, detail=f"Storage unavailable: {e.message}")

    return TransactionResponse(success=True, transaction=transaction)


@router.post("/{transaction_id}/restore", response_model=TransactionResponse)
async def restore_transaction(
    transaction_id: str,
    table: Optional[str] = None,
    stores: dict[str, TransactionStore] = Depends(get_stores),
    settings: Settings = Depends(get_app_settings),
):
    """
    Restore a deleted transaction to pending-ledger.
    """
    _, store = select_store(stores, table, settings)
    try:
        transaction = await restore(store, transaction_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Transaction not found")
    except StorageError as e:
        raise HTTPException(status_code=503, detail=f"Storage unavailable: {e.message}")

    return TransactionResponse(success=True, transaction=transaction)
