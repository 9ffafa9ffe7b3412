# ledger_recon/database.py

"""
Transaction storage.

TransactionStore is what the engine depends on. SupabaseTransactionStore is
the production implementation; the supabase client is blocking, so every
call runs in the thread pool and the event loop stays free between pages and
commit batches.

Each transactions table (ledger transactions, Kingdom transactions) gets its
own store over the same client. ImportHistoryStore logs import runs.
"""

from datetime import date
from typing import Any, Iterable, Optional, Protocol

import httpx
from fastapi.concurrency import run_in_threadpool
from postgrest.exceptions import APIError
from supabase import create_client, Client

from ledger_recon.core.hashing import duplicate_check_hash
from ledger_recon.errors import (
    UNIQUE_VIOLATION,
    DuplicateRecordError,
    MatchConflictError,
    RecordNotFoundError,
    StorageError,
)
from ledger_recon.models import (
    KEY_FIELDS,
    ImportRun,
    Transaction,
    TransactionCreate,
    TransactionStatus,
)

SNAPSHOT_COLUMNS = ",".join(("id",) + KEY_FIELDS)


class TransactionStore(Protocol):
    """Storage operations the reconciliation engine relies on."""

    async def fetch_by_status(
        self,
        status: TransactionStatus,
        cutoff_date: Optional[date],
        offset: int,
        limit: int,
        unmatched_only: bool = True,
    ) -> list[Transaction]: ...

    async def fetch_snapshot(self, offset: int, limit: int) -> list[dict]: ...

    async def get_by_id(self, transaction_id: str) -> Optional[Transaction]: ...

    async def update_by_id(
        self,
        transaction_id: str,
        fields: dict[str, Any],
        require_unmatched: bool = False,
    ) -> Transaction: ...

    async def insert(self, record: TransactionCreate) -> Transaction: ...

    async def insert_many(self, records: list[TransactionCreate]) -> list[Transaction]: ...


def to_insert_payload(record: TransactionCreate) -> dict:
    """Row for insertion, with the canonical hash filled in."""
    payload = record.model_dump(mode="json")
    payload["duplicate_check_hash"] = duplicate_check_hash(record)
    return payload


def to_storage_error(exc: Exception) -> StorageError:
    """Map a client exception onto the storage error hierarchy."""
    if isinstance(exc, APIError):
        code = getattr(exc, "code", None)
        message = getattr(exc, "message", None) or str(exc)
        if code == UNIQUE_VIOLATION:
            return DuplicateRecordError(message, code)
        return StorageError(message, code)
    return StorageError(str(exc))


class SupabaseTable:
    """One Supabase (PostgREST) table behind the shared client."""

    def __init__(self, client: Client, table: str):
        self.client = client
        self.table = table

    async def _execute(self, query) -> list[dict]:
        try:
            response = await run_in_threadpool(query.execute)
        except (APIError, httpx.HTTPError) as exc:
            raise to_storage_error(exc) from exc
        return response.data or []


class SupabaseTransactionStore(SupabaseTable):
    """TransactionStore backed by a Supabase (PostgREST) table."""

    def __init__(self, client: Client, table: str = "transactions"):
        super().__init__(client, table)

    async def fetch_by_status(
        self,
        status: TransactionStatus,
        cutoff_date: Optional[date],
        offset: int,
        limit: int,
        unmatched_only: bool = True,
    ) -> list[Transaction]:
        """One page of transactions in a status, newest first."""
        query = self.client.table(self.table).select("*").eq("status", status)

        if unmatched_only:
            query = query.is_("matched_transaction_id", "null")
        if cutoff_date:
            query = query.gte("date", cutoff_date.isoformat())

        # id breaks ties between same-day rows so offsets stay stable
        query = query.order("date", desc=True).order("id").range(offset, offset + limit - 1)

        rows = await self._execute(query)
        return [Transaction.model_validate(row) for row in rows]

    async def fetch_snapshot(self, offset: int, limit: int) -> list[dict]:
        """Defining attributes of every stored row, deleted ones included."""
        query = (
            self.client.table(self.table)
            .select(SNAPSHOT_COLUMNS)
            .order("id")
            .range(offset, offset + limit - 1)
        )
        return await self._execute(query)

    async def get_by_id(self, transaction_id: str) -> Optional[Transaction]:
        query = self.client.table(self.table).select("*").eq("id", transaction_id)
        rows = await self._execute(query)
        return Transaction.model_validate(rows[0]) if rows else None

    async def update_by_id(
        self,
        transaction_id: str,
        fields: dict[str, Any],
        require_unmatched: bool = False,
    ) -> Transaction:
        """
        Update one row.

        With ``require_unmatched`` the update only applies while the row's
        matched_transaction_id is still null, and MatchConflictError is raised
        when another run got there first.
        """
        query = self.client.table(self.table).update(fields).eq("id", transaction_id)
        if require_unmatched:
            query = query.is_("matched_transaction_id", "null")

        rows = await self._execute(query)
        if not rows:
            if require_unmatched:
                raise MatchConflictError(f"Transaction {transaction_id} is already matched or missing")
            raise RecordNotFoundError(f"Transaction {transaction_id} not found")
        return Transaction.model_validate(rows[0])

    async def insert(self, record: TransactionCreate) -> Transaction:
        rows = await self._execute(
            self.client.table(self.table).insert(to_insert_payload(record))
        )
        if not rows:
            raise StorageError("Insert returned no rows")
        return Transaction.model_validate(rows[0])

    async def insert_many(self, records: list[TransactionCreate]) -> list[Transaction]:
        """Insert a batch in one statement; a single duplicate rejects the whole batch."""
        if not records:
            return []
        rows = await self._execute(
            self.client.table(self.table).insert([to_insert_payload(r) for r in records])
        )
        return [Transaction.model_validate(row) for row in rows]


# ============================================
# Import history
# ============================================

class ImportHistoryStore(Protocol):
    """Log of import runs, one row per import."""

    async def start(self, run: ImportRun) -> ImportRun: ...

    async def finish(self, run: ImportRun) -> None: ...

    async def recent(self, limit: int) -> list[ImportRun]: ...


class SupabaseImportHistoryStore(SupabaseTable):
    """ImportHistoryStore backed by the import_history table."""

    def __init__(self, client: Client, table: str = "import_history"):
        super().__init__(client, table)

    async def start(self, run: ImportRun) -> ImportRun:
        rows = await self._execute(
            self.client.table(self.table).insert(run.model_dump(mode="json", exclude_none=True))
        )
        if not rows:
            raise StorageError("Insert returned no rows")
        return ImportRun.model_validate(rows[0])

    async def finish(self, run: ImportRun) -> None:
        fields = run.model_dump(mode="json", exclude={"id", "source", "table_name", "import_started_at"})
        await self._execute(self.client.table(self.table).update(fields).eq("id", run.id))

    async def recent(self, limit: int) -> list[ImportRun]:
        """Latest runs first."""
        query = (
            self.client.table(self.table)
            .select("*")
            .order("import_started_at", desc=True)
            .range(0, limit - 1)
        )
        return [ImportRun.model_validate(row) for row in await self._execute(query)]


# ============================================
# Factories
# ============================================

def create_store(client: Client, table: str = "transactions") -> SupabaseTransactionStore:
    """Store for one transactions table."""
    return SupabaseTransactionStore(client, table)


def create_stores(
    url: str,
    key: str,
    tables: Iterable[str],
    history_table: str = "import_history",
) -> tuple[dict[str, SupabaseTransactionStore], SupabaseImportHistoryStore]:
    """A store per transactions table plus the import history, sharing one client."""
    client = create_client(url, key)
    stores = {table: create_store(client, table) for table in tables}
    return stores, SupabaseImportHistoryStore(client, history_table)
