# ledger_recon/core/importer.py

"""
Import path for parsed transactions.

Filters the batch against a snapshot of stored keys, then inserts what is
left in batches. The storage unique constraint has the final word: a batch it
rejects is replayed row by row so only the real duplicates are dropped.

When an ImportHistoryStore is given, every import is logged as a run that is
opened before the snapshot and closed with the final counts. Failing to write
the log never fails the import itself.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from ledger_recon.core.duplicates import filter_duplicates
from ledger_recon.core.pagination import collect_pages
from ledger_recon.database import ImportHistoryStore, TransactionStore
from ledger_recon.errors import DuplicateRecordError, StorageError
from ledger_recon.models import (
    ImportResult,
    ImportRun,
    TransactionCreate,
    IMPORT_FAILED,
    IMPORT_SUCCESS,
)

logger = logging.getLogger(__name__)


async def fetch_snapshot(store: TransactionStore, page_size: int = 1000) -> list[dict]:
    """Defining attributes of every stored transaction."""
    return await collect_pages(store.fetch_snapshot, page_size, label="stored keys")


async def import_transactions(
    store: TransactionStore,
    records: list[TransactionCreate],
    *,
    batch_size: int = 500,
    page_size: int = 1000,
    history: Optional[ImportHistoryStore] = None,
    source: Optional[str] = None,
    table: Optional[str] = None,
) -> ImportResult:
    """
    Import records, skipping anything already stored or repeated in the batch.

    Re-importing the same records is a no-op that reports them all as
    duplicates. A StorageError while taking the snapshot aborts the import;
    the history run is closed as failed before it propagates.
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")

    result = ImportResult(total=len(records))
    run = await _start_run(history, ImportRun(
        source=source or _batch_source(records),
        table_name=table,
        import_started_at=datetime.now(timezone.utc),
    ))
    if run is not None:
        result.import_id = run.id

    try:
        await _insert_batches(store, records, result, batch_size, page_size)
    except StorageError as exc:
        await _finish_run(history, run, result, IMPORT_FAILED, str(exc))
        raise

    error_message = f"{result.errors} records failed to insert" if result.errors else None
    await _finish_run(history, run, result, IMPORT_SUCCESS, error_message)

    logger.info(
        "Import complete: %d total, %d inserted, %d duplicates, %d repeated in batch, %d errors",
        result.total, result.inserted, result.duplicates,
        result.intra_batch_duplicates, result.errors,
    )
    return result


async def _insert_batches(
    store: TransactionStore,
    records: list[TransactionCreate],
    result: ImportResult,
    batch_size: int,
    page_size: int,
) -> None:
    if not records:
        return

    snapshot = await fetch_snapshot(store, page_size)
    filtered = filter_duplicates(records, snapshot)
    result.duplicates = filtered.persisted_duplicates
    result.intra_batch_duplicates = filtered.intra_batch_duplicates

    unique = filtered.unique
    total_batches = (len(unique) + batch_size - 1) // batch_size

    for start in range(0, len(unique), batch_size):
        batch = unique[start:start + batch_size]
        batch_number = start // batch_size + 1

        try:
            inserted = await store.insert_many(batch)
            result.inserted += len(inserted)
        except DuplicateRecordError:
            logger.warning(
                "Batch %d/%d: duplicate detected by storage, inserting individually",
                batch_number, total_batches,
            )
            await _insert_one_by_one(store, batch, result)
        except StorageError as exc:
            logger.error("Batch %d/%d: insert failed: %s", batch_number, total_batches, exc)
            result.errors += len(batch)


async def _insert_one_by_one(
    store: TransactionStore,
    batch: list[TransactionCreate],
    result: ImportResult,
) -> None:
    for record in batch:
        try:
            await store.insert(record)
            result.inserted += 1
        except DuplicateRecordError:
            result.duplicates += 1
        except StorageError as exc:
            result.errors += 1
            logger.error("Insert error: %s", exc)


# ============================================
# Import history
# ============================================

def _batch_source(records: list[TransactionCreate]) -> str:
    sources = {r.source for r in records}
    if len(sources) == 1:
        return sources.pop()
    return "mixed" if sources else "empty"


async def _start_run(history: Optional[ImportHistoryStore], run: ImportRun) -> Optional[ImportRun]:
    if history is None:
        return None
    try:
        return await history.start(run)
    except StorageError as exc:
        logger.error("Could not record import start: %s", exc)
        return None


async def _finish_run(
    history: Optional[ImportHistoryStore],
    run: Optional[ImportRun],
    result: ImportResult,
    status: str,
    error_message: Optional[str],
) -> None:
    if history is None or run is None:
        return

    finished = run.model_copy(update={
        "status": status,
        "total_records_processed": result.total,
        "records_imported": result.inserted,
        "duplicates_skipped": result.duplicates,
        "intra_batch_duplicates": result.intra_batch_duplicates,
        "errors": result.errors,
        "error_message": error_message,
        "import_completed_at": datetime.now(timezone.utc),
    })
    try:
        await history.finish(finished)
    except StorageError as exc:
        logger.error("Could not record import %s completion: %s", run.id, exc)
