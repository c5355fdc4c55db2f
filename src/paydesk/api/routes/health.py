"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
def ready(request: Request) -> dict[str, str]:
    persistence = request.app.state.persistence
    cache = persistence.cache
    ping = getattr(cache, "ping", None)
    if ping is not None and not ping():
        return {"status": "degraded", "cache": "unreachable"}
    return {"status": "ready"}
