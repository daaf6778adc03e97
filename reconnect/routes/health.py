"""
Health check endpoints.
"""

import os

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "reconnect-checkins"}


@router.get("/readyz")
async def readyz(request: Request):
    """
    Readiness check: reports whether the message store is readable and how
    full the identity cache is. The engine works without the store, so this
    never fails the check; it only reports.
    """
    engine = request.app.state.checkin_engine
    db_path = engine.ranker.history.repository.db_path
    store_ok = os.access(db_path, os.R_OK)

    return {
        "overall_ok": True,
        "checks": {
            "message_store": {"ok": store_ok, "path": db_path},
            "identity_cache": {"ok": True, "entries": engine.cache_stats().total_entries},
        },
    }
