from __future__ import annotations
import io
from uuid import UUID
from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from hackboard.auth_deps import get_current_admin
from hackboard.config import settings
from hackboard.db import get_session
from hackboard.schemas.leaderboard import LeaderboardPage, LedgerAudit
from hackboard.services.leaderboard import (
    export_standings, leaderboard_page, participant_roster, render_csv, render_xlsx,
)
from hackboard.services.scoring import audit_participant

log = structlog.get_logger()

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])
admin_router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("", response_model=LeaderboardPage)
async def get_leaderboard(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.leaderboard_default_limit, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
):
    return await leaderboard_page(session, page, limit)


@admin_router.get("/export/leaderboard")
async def export_leaderboard(
    session: AsyncSession = Depends(get_session),
    admin=Depends(get_current_admin),
):
    csv_text = render_csv(await export_standings(session))
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="leaderboard.csv"'},
    )


@admin_router.get("/export/excel")
async def export_participants(
    session: AsyncSession = Depends(get_session),
    admin=Depends(get_current_admin),
):
    content = render_xlsx(await participant_roster(session))
    return StreamingResponse(
        io.BytesIO(content),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": 'attachment; filename="participants.xlsx"'},
    )


@admin_router.get("/ledger/audit/{participant_id}", response_model=LedgerAudit)
async def audit_ledger(
    participant_id: UUID,
    session: AsyncSession = Depends(get_session),
    admin=Depends(get_current_admin),
):
    """Compare a participant's stored totals with what their submissions add up to."""
    audit = await audit_participant(session, participant_id)
    if not audit.consistent:
        log.error("ledger_inconsistent", **audit.model_dump(mode="json"))
    return audit
