# tests/test_duplicates.py

"""
Tests for the import duplicate filter.
"""

from datetime import date

from ledger_recon.core.duplicates import filter_duplicates
from tests.helpers.factories import make_import_txn


class TestFilterDuplicates:
    """Test persisted and intra-batch duplicate detection."""

    def test_all_new_records_kept(self):
        batch = [make_import_txn(value="10.00"), make_import_txn(value="20.00")]

        result = filter_duplicates(batch, [])

        assert result.unique == batch
        assert result.persisted_duplicates == 0
        assert result.intra_batch_duplicates == 0

    def test_persisted_duplicate_dropped(self):
        existing = [{
            "date": "2025-10-16T00:00:00+00:00",
            "value": 10,
            "name": None,
            "depositor": "john doe",
            "car": None,
            "payment_method": "ZELLE",
        }]
        batch = [make_import_txn(value="10.00"), make_import_txn(value="20.00")]

        result = filter_duplicates(batch, existing)

        assert [r.value for r in result.unique] == [batch[1].value]
        assert result.persisted_duplicates == 1
        assert result.intra_batch_duplicates == 0

    def test_intra_batch_duplicate_tallied_separately(self):
        first = make_import_txn(value="10.00", depositor="Ana")
        repeat = make_import_txn(value="10.00", depositor="  ANA ")
        other = make_import_txn(value="10.00", depositor="Bob")

        result = filter_duplicates([first, repeat, other, repeat], [])

        assert result.unique == [first, other]
        assert result.intra_batch_duplicates == 2
        assert result.persisted_duplicates == 0
        assert result.dropped == 2

    def test_persisted_wins_over_intra_batch(self):
        """A key already stored counts as persisted every time it appears."""
        record = make_import_txn(txn_date=date(2025, 1, 2))

        result = filter_duplicates([record, record], [record])

        assert result.unique == []
        assert result.persisted_duplicates == 2
        assert result.intra_batch_duplicates == 0

    def test_unkeyable_existing_rows_are_ignored(self):
        record = make_import_txn()

        result = filter_duplicates([record], [{"date": None, "value": None}])

        assert result.unique == [record]
