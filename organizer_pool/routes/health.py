# organizer_pool/routes/health.py
"""
Health check endpoints.
"""

import time

from fastapi import APIRouter

from organizer_pool.services.cache_store import cache_store

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "calendar-organizer-pool"}


@router.get("/readyz")
async def readyz():
    """Readiness check: cache store ping plus a write/read round trip."""
    checks = {}
    overall_ok = True

    t0 = time.time()
    result = await cache_store.health_check()
    checks["redis"] = {
        "ok": result["healthy"],
        "latency_ms": round((time.time() - t0) * 1000, 1),
    }
    if "error" in result:
        checks["redis"]["error"] = result["error"]
    overall_ok = overall_ok and result["healthy"]

    return {"overall_ok": overall_ok, "checks": checks}
