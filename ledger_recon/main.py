# ledger_recon/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ledger_recon.config import get_settings
from ledger_recon.database import create_stores
from ledger_recon.routers import health, reconcile, transactions

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


# ============================================
# Lifespan: one client per process, a store per table on app.state
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.stores, app.state.import_history = create_stores(
        settings.supabase_url,
        settings.supabase_service_role_key,
        settings.transaction_tables,
        settings.import_history_table,
    )
    yield
    app.state.stores = None
    app.state.import_history = None


# ============================================
# Create FastAPI app
# ============================================

app = FastAPI(
    title=settings.app_name,
    description="Ledger ↔ statement reconciliation engine",
    version="1.0.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# ============================================
# Include routers
# ============================================

app.include_router(health.router, tags=["Health"])
app.include_router(reconcile.router, tags=["Reconciliation"])
app.include_router(transactions.router, prefix="/transactions", tags=["Transactions"])

# ============================================
# Root endpoint
# ============================================

@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs" if settings.debug else None,
    }
