# tests/test_lifecycle.py

"""
Tests for soft delete and restore.
"""

import pytest
import pytest_asyncio

from ledger_recon.core.lifecycle import restore, soft_delete
from ledger_recon.core.reconciliation import reconcile
from ledger_recon.errors import RecordNotFoundError
from tests.helpers.factories import make_ledger_txn, make_statement_txn
from tests.helpers.store import InMemoryTransactionStore


@pytest_asyncio.fixture
async def reconciled_store() -> InMemoryTransactionStore:
    store = InMemoryTransactionStore([
        make_ledger_txn(id="led_1"),
        make_statement_txn(id="stm_1"),
    ])
    await reconcile(store)
    return store


class TestSoftDelete:
    """Test deleting transactions."""

    @pytest.mark.asyncio
    async def test_delete_pending(self, store):
        store.put(make_ledger_txn(id="led_1"))

        deleted = await soft_delete(store, "led_1", "  entered twice ")

        assert deleted.status == "deleted"
        assert deleted.deleted_reason == "entered twice"
        assert deleted.previous_status == "pending-ledger"
        assert deleted.duplicate_check_hash is not None

    @pytest.mark.asyncio
    async def test_reason_required(self, store):
        store.put(make_ledger_txn(id="led_1"))

        with pytest.raises(ValueError):
            await soft_delete(store, "led_1", "   ")
        assert store.get("led_1").status == "pending-ledger"

    @pytest.mark.asyncio
    async def test_missing_record(self, store):
        with pytest.raises(RecordNotFoundError):
            await soft_delete(store, "nope", "gone")

    @pytest.mark.asyncio
    async def test_delete_unlinks_partner(self, reconciled_store):
        store = reconciled_store
        assert store.get("stm_1").status == "reconciled"

        await soft_delete(store, "led_1", "wrong customer")

        partner = store.get("stm_1")
        assert partner.status == "pending-statement"
        assert partner.matched_transaction_id is None
        assert partner.confidence is None
        assert store.get("led_1").matched_transaction_id is None

    @pytest.mark.asyncio
    async def test_unlinked_partner_can_match_again(self, reconciled_store):
        store = reconciled_store
        await soft_delete(store, "led_1", "wrong customer")
        store.put(make_ledger_txn(id="led_2", car="corrected"))

        result = await reconcile(store)

        assert result.matched == 1
        assert store.get("stm_1").matched_transaction_id == "led_2"


class TestRestore:
    """Test restoring deleted transactions."""

    @pytest.mark.asyncio
    async def test_restore_returns_to_pending_ledger(self, store):
        store.put(make_statement_txn(id="stm_1"))
        await soft_delete(store, "stm_1", "bank correction")

        restored = await restore(store, "stm_1")

        assert restored.status == "pending-ledger"
        assert restored.deleted_reason is None
        assert restored.previous_status is None
        assert restored.matched_transaction_id is None

    @pytest.mark.asyncio
    async def test_restore_requires_deleted(self, store):
        store.put(make_ledger_txn(id="led_1"))

        with pytest.raises(ValueError):
            await restore(store, "led_1")

    @pytest.mark.asyncio
    async def test_restore_missing(self, store):
        with pytest.raises(RecordNotFoundError):
            await restore(store, "nope")
