# ledger_recon/core/duplicates.py

"""
Application-level duplicate filter for import batches.

Advisory only: the unique constraint on duplicate_check_hash is what really
keeps duplicates out. Anything that slips past here (a concurrent import, a
snapshot taken too early) is caught at insert time.
"""

import logging
from collections import Counter
from typing import Any, Iterable

from ledger_recon.core.hashing import key_for
from ledger_recon.models import DuplicateFilterResult, TransactionCreate

logger = logging.getLogger(__name__)


def existing_keys(existing_records: Iterable[Any]) -> set[str]:
    """Canonical keys for rows already persisted."""
    keys: set[str] = set()
    for record in existing_records:
        try:
            keys.add(key_for(record))
        except ValueError:
            logger.warning("Skipping unkeyable persisted row: %r", record)
    return keys


def filter_duplicates(
    new_records: list[TransactionCreate],
    existing_records: Iterable[Any],
) -> DuplicateFilterResult:
    """
    Drop records already persisted or repeated earlier in the same batch.

    Keeps the first occurrence of every key, in input order.
    """
    known = existing_keys(existing_records)
    seen: set[str] = set()
    repeats: Counter[str] = Counter()
    result = DuplicateFilterResult()

    for record in new_records:
        key = key_for(record)

        if key in known:
            result.persisted_duplicates += 1
            continue

        if key in seen:
            result.intra_batch_duplicates += 1
            repeats[key] += 1
            continue

        seen.add(key)
        result.unique.append(record)

    if repeats:
        logger.warning(
            "Found %d transactions repeated inside the import batch (%d extra rows)",
            len(repeats), sum(repeats.values()),
        )
        for key, count in repeats.most_common(10):
            logger.debug("  %r appears %d times", key, count + 1)

    logger.info(
        "Duplicate check: %d new, %d unique, %d already stored, %d repeated in batch",
        len(new_records), len(result.unique),
        result.persisted_duplicates, result.intra_batch_duplicates,
    )
    return result
