from __future__ import annotations
import csv
import io
from datetime import datetime, timezone
from math import ceil
from typing import Any, Sequence
from uuid import UUID
from openpyxl import Workbook
from openpyxl.styles import Font
from sqlalchemy import select, func, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from hackboard.config import settings
from hackboard.models.participant import Participant
from hackboard.models.submission import Submission
from hackboard.models.task import Task
from hackboard.schemas.leaderboard import LeaderboardEntry, LeaderboardPage, ParticipantStats
from hackboard.schemas.submission import Pagination
from hackboard.schemas.task import AdminStats
from hackboard.services.errors import NotFoundError
from hackboard.services.ranking import rank_rows

CSV_COLUMNS = ["Rank", "Name", "Email", "Total Points", "Task Count", "Join Date"]
ROSTER_COLUMNS = ["Name", "Email", "College"]

# Only participants who have scored appear on the board
_ranked = Participant.total_points > 0
_standing_order = (Participant.total_points.desc(), Participant.task_count.desc(), Participant.name.asc())

_standing_cols = (
    Participant.id,
    Participant.name,
    Participant.email,
    Participant.total_points,
    Participant.task_count,
    Participant.created_at,
)


async def count_ranked(session: AsyncSession) -> int:
    total = await session.scalar(select(func.count()).select_from(Participant).where(_ranked))
    return int(total or 0)


async def ranked_rows(session: AsyncSession, *, offset: int = 0, limit: int | None = None) -> Sequence[Any]:
    q = select(*_standing_cols).where(_ranked).order_by(*_standing_order).offset(offset)
    if limit is not None:
        q = q.limit(limit)
    return (await session.execute(q)).all()


async def rank_of_first(session: AsyncSession, row: Any) -> int:
    """Global competition rank of ``row``: one more than the participants strictly ahead of it."""
    ahead = await session.scalar(
        select(func.count()).select_from(Participant).where(
            _ranked,
            or_(
                Participant.total_points > row.total_points,
                and_(
                    Participant.total_points == row.total_points,
                    Participant.task_count > row.task_count,
                ),
            ),
        )
    )
    return int(ahead or 0) + 1


def _entries(ranked: list[tuple[int, Any]]) -> list[LeaderboardEntry]:
    return [
        LeaderboardEntry(
            id=row.id,
            name=row.name,
            total_points=int(row.total_points),
            task_count=int(row.task_count),
            rank=rank,
        )
        for rank, row in ranked
    ]


async def leaderboard_page(
    session: AsyncSession,
    page: int,
    limit: int,
    *,
    global_ties: bool | None = None,
) -> LeaderboardPage:
    if global_ties is None:
        global_ties = settings.leaderboard_global_ties
    skip = (page - 1) * limit

    # Page and total from one statement so they describe the same snapshot
    rows = (await session.execute(
        select(*_standing_cols, func.count().over().label("total"))
        .where(_ranked)
        .order_by(*_standing_order)
        .offset(skip)
        .limit(limit)
    )).all()
    total = int(rows[0].total) if rows else await count_ranked(session)

    head_rank = None
    if global_ties and rows and skip > 0:
        # The page may open inside a tie-group that started on an earlier page
        head_rank = await rank_of_first(session, rows[0])

    return LeaderboardPage(
        leaderboard=_entries(rank_rows(rows, skip=skip, head_rank=head_rank)),
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=ceil(total / limit),
        ),
    )


async def leaderboard_snapshot(session: AsyncSession, top_n: int | None = None) -> LeaderboardPage:
    """Top-N board pushed to realtime listeners."""
    return await leaderboard_page(session, 1, top_n or settings.leaderboard_top_n)


async def export_standings(session: AsyncSession) -> list[tuple[int, Any]]:
    rows = await ranked_rows(session)
    return rank_rows(rows)


def _join_date(created_at: datetime) -> str:
    if created_at.tzinfo is not None:
        created_at = created_at.astimezone(timezone.utc)
    return created_at.date().isoformat()


def render_csv(ranked: Sequence[tuple[int, Any]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for rank, row in ranked:
        writer.writerow([
            rank,
            row.name,
            row.email,
            int(row.total_points),
            int(row.task_count),
            _join_date(row.created_at),
        ])
    return buf.getvalue()


async def participant_roster(session: AsyncSession) -> list[Any]:
    """Every registered participant, scored or not, by name."""
    return list((await session.execute(
        select(Participant.name, Participant.email, Participant.college).order_by(Participant.name.asc())
    )).all())


def render_xlsx(roster: Sequence[Any]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "participants"
    ws.append(ROSTER_COLUMNS)
    for row in roster:
        ws.append([(value or "").strip() or "N/A" for value in (row.name, row.email, row.college)])

    for cell in ws[1]:
        cell.font = Font(bold=True)
    ws.auto_filter.ref = f"A1:C{ws.max_row}"
    for column in ws.columns:
        width = max(len(str(c.value or "")) for c in column)
        ws.column_dimensions[column[0].column_letter].width = width + 2

    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()


async def participant_stats(session: AsyncSession, participant_id: UUID) -> ParticipantStats:
    row = (await session.execute(
        select(Participant.id, Participant.name, Participant.total_points, Participant.task_count)
        .where(Participant.id == participant_id)
    )).one_or_none()
    if row is None:
        raise NotFoundError("Participant not found")
    return ParticipantStats(
        id=row.id,
        name=row.name,
        total_points=int(row.total_points),
        task_count=int(row.task_count),
    )


async def admin_stats(session: AsyncSession) -> AdminStats:
    tasks = await session.scalar(select(func.count()).select_from(Task))
    participants = await session.scalar(select(func.count()).select_from(Participant))
    by_status = dict((await session.execute(
        select(Submission.status, func.count()).group_by(Submission.status)
    )).all())
    return AdminStats(
        total_tasks=int(tasks or 0),
        total_participants=int(participants or 0),
        total_submissions=sum(int(v) for v in by_status.values()),
        pending_submissions=int(by_status.get("PENDING", 0)),
    )
