# ledger_recon/dependencies.py

"""
Request-scoped dependencies.

The stores are created once at startup and kept on app.state, one per
transactions table, so routes (and tests, through dependency_overrides)
receive them explicitly.
"""

from typing import Optional

from fastapi import HTTPException, Request, status

from ledger_recon.config import Settings, get_settings
from ledger_recon.database import ImportHistoryStore, TransactionStore


def get_stores(request: Request) -> dict[str, TransactionStore]:
    stores = getattr(request.app.state, "stores", None)
    if not stores:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Transaction store is not configured",
        )
    return stores


def get_import_history(request: Request) -> Optional[ImportHistoryStore]:
    return getattr(request.app.state, "import_history", None)


def get_app_settings() -> Settings:
    return get_settings()


def select_store(
    stores: dict[str, TransactionStore],
    table: Optional[str],
    settings: Settings,
) -> tuple[str, TransactionStore]:
    """Store for the requested table, or the default one."""
    name = table or settings.transactions_table
    store = stores.get(name)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown table: {name}",
        )
    return name, store
