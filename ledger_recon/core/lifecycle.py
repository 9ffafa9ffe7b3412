# ledger_recon/core/lifecycle.py

"""
Soft delete and restore.

Deleted rows keep their duplicate_check_hash, so a deleted transaction still
blocks a re-import of the same record.
"""

import logging

from ledger_recon.core.reconciliation import unmatched_fields
from ledger_recon.database import TransactionStore
from ledger_recon.errors import RecordNotFoundError
from ledger_recon.models import Transaction, DELETED, PENDING_LEDGER, PENDING_STATEMENT, RECONCILED

logger = logging.getLogger(__name__)


async def soft_delete(store: TransactionStore, transaction_id: str, reason: str) -> Transaction:
    """
    Mark a transaction deleted with a reason.

    If it was one side of a reconciled pair, the partner is unlinked and
    returns to the status it had before it was matched.
    """
    if not reason or not reason.strip():
        raise ValueError("A deletion reason is required")

    transaction = await _get(store, transaction_id)
    partner_id = transaction.matched_transaction_id

    deleted = await store.update_by_id(transaction_id, {
        "status": DELETED,
        "deleted_reason": reason.strip(),
        "previous_status": transaction.status,
        "matched_transaction_id": None,
        "confidence": None,
    })

    if partner_id:
        await _unlink_partner(store, partner_id, transaction_id)

    logger.info("Deleted transaction %s: %s", transaction_id, reason.strip())
    return deleted


async def restore(store: TransactionStore, transaction_id: str) -> Transaction:
    """Bring a deleted transaction back as pending-ledger."""
    transaction = await _get(store, transaction_id)
    if transaction.status != DELETED:
        raise ValueError(f"Transaction {transaction_id} is not deleted")

    restored = await store.update_by_id(transaction_id, {
        "status": PENDING_LEDGER,
        "deleted_reason": None,
        "previous_status": None,
        "matched_transaction_id": None,
        "confidence": None,
    })
    logger.info("Restored transaction %s to %s", transaction_id, PENDING_LEDGER)
    return restored


async def _get(store: TransactionStore, transaction_id: str) -> Transaction:
    transaction = await store.get_by_id(transaction_id)
    if transaction is None:
        raise RecordNotFoundError(f"Transaction {transaction_id} not found")
    return transaction


async def _unlink_partner(store: TransactionStore, partner_id: str, deleted_id: str) -> None:
    partner = await store.get_by_id(partner_id)
    if partner is None or partner.matched_transaction_id != deleted_id:
        return

    status = partner.previous_status
    if status not in (PENDING_LEDGER, PENDING_STATEMENT):
        status = PENDING_STATEMENT
    if partner.status != RECONCILED:
        status = partner.status

    await store.update_by_id(partner_id, unmatched_fields(status))
    logger.info("Unlinked %s from deleted transaction %s", partner_id, deleted_id)
