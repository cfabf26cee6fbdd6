from __future__ import annotations
from fastapi import APIRouter, Request
from datetime import datetime, timezone
from sqlalchemy import text
import structlog
from hackboard.config import settings

log = structlog.get_logger()

router = APIRouter(tags=["system"])


async def _database_ok(request: Request) -> bool:
    try:
        async with request.app.state.session_factory() as session:
            await session.execute(text("SELECT 1"))
    except Exception:
        log.exception("health_database_unreachable")
        return False
    return True


@router.get("/health")
async def health(request: Request):
    db_ok = await _database_ok(request)
    return {
        "status": "ok" if db_ok else "degraded",
        "env": settings.environment,
        "time": datetime.now(timezone.utc).isoformat(),
        "request_id": request.state.request_id,
        "database": "ok" if db_ok else "unreachable",
        "leaderboard_listeners": request.app.state.runtime.hub.size,
    }


@router.get("/version")
async def version():
    return {
        "name": settings.app_name,
        "display_name": settings.app_display_name,
        "version": settings.app_version,
        "git_sha": settings.git_sha,
    }
