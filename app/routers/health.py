# app/routers/health.py
"""
System health check endpoint.
Returns status of the backend, the remote store and the in-memory queue.
"""

import requests
from fastapi import APIRouter, Request
from app.config import settings
from datetime import datetime, timezone

router = APIRouter()


def _store_headers() -> dict:
    return {"apikey": settings.SUPABASE_ANON_KEY, "Authorization": f"Bearer {settings.SUPABASE_ANON_KEY}"}


@router.get("/health", summary="System health check")
def health_check(request: Request):
    """
    Returns:
    - Backend status
    - Remote store reachability (REST root)
    - Local queue size and busy flag
    """
    result = {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "backend": "ok",
        "store": "unknown",
        "queue": None,
    }

    try:
        resp = requests.get(f"{settings.REST_URL}/", headers=_store_headers(), timeout=3)
        if resp.status_code < 400:
            result["store"] = "ok"
        else:
            result["store"] = f"http_{resp.status_code}"
            result["status"] = "degraded"
    except requests.exceptions.ConnectionError:
        result["store"] = "unreachable"
        result["status"] = "degraded"
    except requests.exceptions.RequestException as e:
        result["store"] = f"error: {str(e)}"
        result["status"] = "degraded"

    controller = getattr(request.app.state, "controller", None)
    if controller is not None:
        result["queue"] = {"size": len(controller.queue), "loading": controller.busy}

    return result
