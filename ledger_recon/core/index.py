# ledger_recon/core/index.py

"""
In-memory candidate index for a reconciliation run.

Candidates are bucketed by (date label, |value| in cents, normalized payment
method), so a ledger record only ever looks at the handful of candidates
that could pass the value and method gates on a given day.
"""

from datetime import timedelta
from typing import Iterable, Iterator

from ledger_recon.core.normalizers import date_label, normalize_method, value_cents
from ledger_recon.models import Transaction

IndexKey = tuple[str, int, str]


def index_key(transaction: Transaction, day_offset: int = 0) -> IndexKey:
    """Bucket key for a transaction, optionally shifted by whole days."""
    day = transaction.date + timedelta(days=day_offset)
    return (
        date_label(day),
        value_cents(transaction.value),
        normalize_method(transaction.payment_method),
    )


class CandidateIndex:
    """Buckets of unmatched candidates keyed by date, value and method."""

    def __init__(self, candidates: Iterable[Transaction] = ()):
        self._buckets: dict[IndexKey, list[Transaction]] = {}
        self._keys: dict[str, IndexKey] = {}
        for candidate in candidates:
            self.add(candidate)

    def add(self, candidate: Transaction) -> bool:
        """
        Add a candidate. Already-matched records and ids already present
        are ignored; returns whether the candidate was added.
        """
        if candidate.matched_transaction_id or candidate.id in self._keys:
            return False

        key = index_key(candidate)
        self._buckets.setdefault(key, []).append(candidate)
        self._keys[candidate.id] = key
        return True

    def lookup(self, key: IndexKey) -> list[Transaction]:
        """Candidates in one bucket, in insertion order."""
        return list(self._buckets.get(key, ()))

    def candidates_for(self, transaction: Transaction, day_offsets: Iterable[int]) -> Iterator[Transaction]:
        """
        Candidates sharing the transaction's value and method on any of the
        shifted days, de-duplicated by id, in day-offset order.
        """
        seen: set[str] = set()
        for offset in day_offsets:
            for candidate in self._buckets.get(index_key(transaction, offset), ()):
                if candidate.id in seen:
                    continue
                seen.add(candidate.id)
                yield candidate

    def remove(self, candidate_id: str) -> bool:
        """
        Remove a consumed candidate. Empty buckets are deleted. Unknown ids
        are a no-op; returns whether anything was removed.
        """
        key = self._keys.pop(candidate_id, None)
        if key is None:
            return False

        bucket = self._buckets.get(key)
        if bucket is not None:
            remaining = [c for c in bucket if c.id != candidate_id]
            if remaining:
                self._buckets[key] = remaining
            else:
                del self._buckets[key]
        return True

    @property
    def bucket_count(self) -> int:
        return len(self._buckets)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, candidate_id: object) -> bool:
        return candidate_id in self._keys
