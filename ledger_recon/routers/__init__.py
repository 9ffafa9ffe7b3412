# ledger_recon/routers/__init__.py

from ledger_recon.routers import health
from ledger_recon.routers import reconcile
from ledger_recon.routers import transactions

__all__ = ["health", "reconcile", "transactions"]
