# tests/test_index.py

"""
Tests for the candidate index.
"""

from datetime import date

from ledger_recon.core.index import CandidateIndex, index_key
from tests.helpers.factories import make_ledger_txn, make_statement_txn


class TestCandidateIndex:
    """Test bucketing, lookup and removal."""

    def test_key_uses_day_cents_and_method(self):
        txn = make_statement_txn("-199.02", date(2025, 10, 14), payment_method=" Zelle ")

        assert index_key(txn) == ("2025-10-14", 19902, "zelle")
        assert index_key(txn, day_offset=-2) == ("2025-10-12", 19902, "zelle")

    def test_same_key_shares_bucket(self):
        a = make_statement_txn("50.00", id="a")
        b = make_statement_txn("50.00", id="b", depositor="Other")
        c = make_statement_txn("60.00", id="c")

        index = CandidateIndex([a, b, c])

        assert len(index) == 3
        assert index.bucket_count == 2
        assert [t.id for t in index.lookup(index_key(a))] == ["a", "b"]

    def test_matched_candidates_skipped(self):
        matched = make_statement_txn(id="m", matched_transaction_id="led_1")

        index = CandidateIndex([matched])

        assert len(index) == 0
        assert "m" not in index

    def test_remove_deletes_empty_bucket(self):
        a = make_statement_txn(id="a")
        index = CandidateIndex([a])

        assert index.remove("a")
        assert index.bucket_count == 0
        assert index.lookup(index_key(a)) == []
        assert "a" not in index

    def test_remove_keeps_other_candidates(self):
        a = make_statement_txn(id="a")
        b = make_statement_txn(id="b", depositor="Other")
        index = CandidateIndex([a, b])

        index.remove("a")

        assert [t.id for t in index.lookup(index_key(b))] == ["b"]

    def test_remove_unknown_is_noop(self):
        index = CandidateIndex([make_statement_txn(id="a")])

        assert not index.remove("missing")
        assert index.remove("a")
        assert not index.remove("a")

    def test_candidates_for_window(self):
        ledger = make_ledger_txn(txn_date=date(2025, 10, 16))
        inside = [
            make_statement_txn(id="minus2", txn_date=date(2025, 10, 14)),
            make_statement_txn(id="same", txn_date=date(2025, 10, 16)),
            make_statement_txn(id="plus2", txn_date=date(2025, 10, 18)),
        ]
        outside = [
            make_statement_txn(id="plus3", txn_date=date(2025, 10, 19)),
            make_statement_txn(id="other_value", value="100.50"),
            make_statement_txn(id="other_method", payment_method="Deposit"),
        ]
        index = CandidateIndex(inside + outside)

        found = [t.id for t in index.candidates_for(ledger, [-2, -1, 0, 1, 2])]

        assert found == ["minus2", "same", "plus2"]
