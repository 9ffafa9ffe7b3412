# ledger_recon/routers/health.py

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "service": "ledger-recon-api",
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """Readiness check - the transaction stores have been configured."""
    stores = getattr(request.app.state, "stores", None) or {}
    history = getattr(request.app.state, "import_history", None)
    return {
        "status": "ready" if stores else "not_ready",
        "checks": {
            "database": "ok" if stores else "missing",
            "tables": sorted(stores),
            "import_history": "ok" if history is not None else "missing",
        },
    }
