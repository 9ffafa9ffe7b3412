# ledger_recon/core/reconciliation.py

"""
Reconciliation coordinator.

Runs one reconciliation pass against a TransactionStore:
1. Fetch every unmatched pending-ledger and pending-statement record (paginated)
2. Index the statement side
3. Search a statement match for each ledger record, consuming matched candidates
4. Commit the pairs in bounded batches
5. Report totals and per-record diagnostics

Commits are batch by batch, not one transaction for the whole run. A run
that dies halfway leaves whole pairs reconciled and the rest untouched, and
running again only sees what is still unmatched.
"""

import asyncio
import logging
from datetime import date, datetime
from typing import Optional

from ledger_recon.core.criteria import DEFAULT_CRITERIA
from ledger_recon.core.index import CandidateIndex
from ledger_recon.core.matching import find_match
from ledger_recon.core.pagination import collect_pages
from ledger_recon.database import TransactionStore
from ledger_recon.errors import DuplicateRecordError, MatchConflictError, StorageError
from ledger_recon.models import (
    CommitResult,
    MatchCriteria,
    MatchDetail,
    MatchPair,
    ReconciliationSummary,
    Transaction,
    TransactionStatus,
    PENDING_LEDGER,
    PENDING_STATEMENT,
    RECONCILED,
)

logger = logging.getLogger(__name__)

NO_STATEMENTS = "No pending-statement transactions available"
FAILURE_LOG_LIMIT = 10


class ReconciliationResult:
    """Result of a reconciliation run."""

    def __init__(self):
        self.total_processed: int = 0
        self.total_candidates: int = 0
        self.details: list[MatchDetail] = []
        self.pairs: list[MatchPair] = []
        self.commit = CommitResult()
        self.cutoff_date: Optional[date] = None
        self.duration_ms: int = 0

    @property
    def matched(self) -> int:
        """Pairs actually committed on both sides."""
        return self.commit.matched

    @property
    def failed_details(self) -> list[MatchDetail]:
        return [d for d in self.details if d.overall_status == "INCORRECT"]

    @property
    def summary(self) -> ReconciliationSummary:
        return ReconciliationSummary(
            total_processed=self.total_processed,
            total_candidates=self.total_candidates,
            matched=self.matched,
            unmatched=self.total_processed - self.matched,
            duplicates=self.commit.duplicates,
            conflicts=self.commit.conflicts,
            errors=self.commit.errors,
            match_rate=(self.matched / self.total_processed * 100) if self.total_processed else 0,
            cutoff_date=self.cutoff_date,
            duration_ms=self.duration_ms,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "summary": self.summary.model_dump(mode="json"),
            "pairs": [p.model_dump() for p in self.pairs],
            "details": [d.model_dump(mode="json") for d in self.details],
        }


async def fetch_pending(
    store: TransactionStore,
    status: TransactionStatus,
    cutoff_date: Optional[date],
    page_size: int,
) -> list[Transaction]:
    """Every unmatched record in a pending status, across all pages."""

    async def fetch_page(offset: int, limit: int) -> list[Transaction]:
        return await store.fetch_by_status(status, cutoff_date, offset, limit)

    return await collect_pages(fetch_page, page_size, label=status)


async def reconcile(
    store: TransactionStore,
    *,
    criteria: MatchCriteria = DEFAULT_CRITERIA,
    cutoff_date: Optional[date] = None,
    page_size: int = 1000,
    batch_size: int = 50,
    progress_interval: int = 500,
) -> ReconciliationResult:
    """
    Main reconciliation function.

    Raises StorageError when fetching fails; nothing has been committed by
    this run at that point. Commit failures never raise, they are counted
    on the result.
    """
    start_time = datetime.now()
    result = ReconciliationResult()
    result.cutoff_date = cutoff_date

    logger.info(
        "Starting reconciliation (date ±%d days, exact value, exact method, name ≥%d%% unless credit card, %s, cutoff %s)",
        criteria.date_tolerance_days,
        round(criteria.name_similarity_threshold * 100),
        criteria.selection,
        cutoff_date.isoformat() if cutoff_date else "none",
    )

    # ============================================
    # Fetch
    # ============================================
    ledger_records = await fetch_pending(store, PENDING_LEDGER, cutoff_date, page_size)
    statement_records = await fetch_pending(store, PENDING_STATEMENT, cutoff_date, page_size)

    result.total_processed = len(ledger_records)
    result.total_candidates = len(statement_records)
    logger.info(
        "Fetched %d ledger and %d statement transactions",
        len(ledger_records), len(statement_records),
    )

    if not ledger_records:
        logger.info("No pending-ledger transactions to process")
        result.duration_ms = _elapsed_ms(start_time)
        return result

    if not statement_records:
        logger.info("No pending-statement transactions available for matching")
        result.details = [
            MatchDetail(ledger_transaction=t, overall_status="INCORRECT", failures=[NO_STATEMENTS])
            for t in ledger_records
        ]
        result.duration_ms = _elapsed_ms(start_time)
        return result

    # ============================================
    # Index
    # ============================================
    index = CandidateIndex(statement_records)
    logger.info("Indexed %d candidates into %d buckets", len(index), index.bucket_count)

    # ============================================
    # Match loop
    # ============================================
    for processed, ledger in enumerate(ledger_records, start=1):
        if ledger.matched_transaction_id:
            continue

        outcome = find_match(ledger, index, criteria)

        if outcome.matched is not None:
            index.remove(outcome.matched.id)
            result.pairs.append(MatchPair(ledger_id=ledger.id, statement_id=outcome.matched.id))
            result.details.append(MatchDetail(
                ledger_transaction=ledger,
                statement_transaction=outcome.matched,
                evaluation=outcome.evaluation,
                overall_status="CORRECT",
            ))
            logger.debug("Match found: %s <-> %s", ledger.label, outcome.matched.label)
        else:
            failures = [outcome.reason] if outcome.reason else []
            if outcome.evaluation is not None:
                failures += outcome.evaluation.failures
            result.details.append(MatchDetail(
                ledger_transaction=ledger,
                statement_transaction=outcome.attempted,
                evaluation=outcome.evaluation,
                overall_status="INCORRECT",
                failures=failures,
            ))

        if progress_interval and (processed % progress_interval == 0 or processed == len(ledger_records)):
            logger.info(
                "Progress: %d/%d (%d%%) - Matches found: %d",
                processed, len(ledger_records),
                round(processed / len(ledger_records) * 100), len(result.pairs),
            )

    # ============================================
    # Commit
    # ============================================
    if result.pairs:
        logger.info("Committing %d matches in batches of %d", len(result.pairs), batch_size)
        result.commit = await commit_pairs(store, result.pairs, batch_size)

    result.duration_ms = _elapsed_ms(start_time)
    _log_report(result)
    return result


# ============================================
# Commit
# ============================================

def reconciled_fields(partner_id: str, previous_status: TransactionStatus) -> dict:
    return {
        "status": RECONCILED,
        "matched_transaction_id": partner_id,
        "confidence": 100,
        "previous_status": previous_status,
    }


def unmatched_fields(status: TransactionStatus) -> dict:
    return {
        "status": status,
        "matched_transaction_id": None,
        "confidence": None,
        "previous_status": None,
    }


async def commit_pairs(
    store: TransactionStore,
    pairs: list[MatchPair],
    batch_size: int = 50,
) -> CommitResult:
    """
    Write matched pairs in batches of ``batch_size``.

    A pair is counted as matched only when both sides were updated. A pair
    with one side written and the other rejected gets the written side
    reverted, so no record is left pointing at a partner that does not
    point back.
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")

    commit = CommitResult()
    total_batches = (len(pairs) + batch_size - 1) // batch_size

    for start in range(0, len(pairs), batch_size):
        batch = pairs[start:start + batch_size]
        batch_number = start // batch_size + 1

        updates = []
        for pair in batch:
            updates.append(store.update_by_id(
                pair.ledger_id,
                reconciled_fields(pair.statement_id, PENDING_LEDGER),
                require_unmatched=True,
            ))
            updates.append(store.update_by_id(
                pair.statement_id,
                reconciled_fields(pair.ledger_id, PENDING_STATEMENT),
                require_unmatched=True,
            ))
        outcomes = await asyncio.gather(*updates, return_exceptions=True)

        batch_errors = 0
        for i, pair in enumerate(batch):
            ledger_outcome = outcomes[2 * i]
            statement_outcome = outcomes[2 * i + 1]
            ledger_failed = isinstance(ledger_outcome, BaseException)
            statement_failed = isinstance(statement_outcome, BaseException)

            if not ledger_failed and not statement_failed:
                commit.matched += 1
                continue

            error = ledger_outcome if ledger_failed else statement_outcome
            if not isinstance(error, Exception):
                raise error
            _tally_failure(commit, pair, error)
            if not isinstance(error, (DuplicateRecordError, MatchConflictError)):
                batch_errors += 1

            if not ledger_failed:
                await _revert(store, pair.ledger_id, PENDING_LEDGER)
            elif not statement_failed:
                await _revert(store, pair.statement_id, PENDING_STATEMENT)

        if batch_errors:
            commit.failed_batches += 1
            logger.error(
                "Batch %d/%d: %d of %d pairs failed to commit",
                batch_number, total_batches, batch_errors, len(batch),
            )
        else:
            logger.debug("Batch %d/%d committed", batch_number, total_batches)

    return commit


def _tally_failure(commit: CommitResult, pair: MatchPair, error: Exception) -> None:
    if isinstance(error, DuplicateRecordError):
        commit.duplicates += 1
        logger.warning("Duplicate rejected by storage for %s/%s", pair.ledger_id, pair.statement_id)
    elif isinstance(error, MatchConflictError):
        commit.conflicts += 1
        logger.warning("Pair %s/%s already claimed: %s", pair.ledger_id, pair.statement_id, error)
    elif isinstance(error, StorageError):
        commit.errors += 1
        logger.error("Failed to commit %s/%s: %s", pair.ledger_id, pair.statement_id, error)
    else:
        commit.errors += 1
        logger.exception("Unexpected error committing %s/%s", pair.ledger_id, pair.statement_id, exc_info=error)


async def _revert(store: TransactionStore, transaction_id: str, status: TransactionStatus) -> None:
    try:
        await store.update_by_id(transaction_id, unmatched_fields(status))
    except StorageError as exc:
        logger.error("Could not revert half-committed match on %s: %s", transaction_id, exc)


# ============================================
# Reporting
# ============================================

def _elapsed_ms(start_time: datetime) -> int:
    return int((datetime.now() - start_time).total_seconds() * 1000)


def _log_report(result: ReconciliationResult) -> None:
    logger.info(
        "Reconciliation complete in %dms: %d processed, %d matched, %d unmatched "
        "(%d duplicates, %d conflicts, %d errors)",
        result.duration_ms, result.total_processed, result.matched,
        result.total_processed - result.matched,
        result.commit.duplicates, result.commit.conflicts, result.commit.errors,
    )

    failed = result.failed_details
    for i, detail in enumerate(failed[:FAILURE_LOG_LIMIT], start=1):
        logger.info("%d. %s: %s", i, detail.ledger_transaction.label, "; ".join(detail.failures))
    if len(failed) > FAILURE_LOG_LIMIT:
        logger.info("... and %d more failed reconciliations", len(failed) - FAILURE_LOG_LIMIT)
