from __future__ import annotations
from dataclasses import dataclass
from uuid import UUID
import structlog
from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from hackboard.config import settings
from hackboard.models.participant import Participant
from hackboard.models.submission import Submission
from hackboard.schemas.leaderboard import LedgerAudit
from hackboard.schemas.submission import SubmissionCreate, SubmissionReview
from hackboard.services.errors import ConflictError, ConsistencyViolation, NotFoundError
from hackboard.services.events import LedgerUpdated

log = structlog.get_logger()

PENDING = "PENDING"
APPROVED = "APPROVED"
REJECTED = "REJECTED"

# Statuses that count toward a participant's task_count
COUNTED = (PENDING, APPROVED)


@dataclass
class SubmissionOutcome:
    submission: Submission
    created: bool
    event: LedgerUpdated


def transition_effect(
    prev_status: str | None,
    prev_points: int | None,
    new_status: str,
    new_points: int | None,
) -> tuple[int, int]:
    """
    Ledger (points_delta, task_delta) for moving one submission between states.
    prev_status=None is a brand new submission.

    Points only ever count while APPROVED; a task counts while PENDING or APPROVED.
    Summing these deltas over any sequence of transitions leaves the participant
    holding exactly the last approved points and one task per counted submission.
    """
    prev_award = int(prev_points or 0) if prev_status == APPROVED else 0
    new_award = int(new_points or 0) if new_status == APPROVED else 0
    prev_counted = 1 if prev_status in COUNTED else 0
    new_counted = 1 if new_status in COUNTED else 0
    return new_award - prev_award, new_counted - prev_counted


async def adjust_totals(session: AsyncSession, participant_id: UUID, *, points: int = 0, tasks: int = 0) -> None:
    """In-database increment of the ledger pair; never read-modify-write."""
    values = {}
    if points:
        values["total_points"] = Participant.total_points + points
    if tasks:
        values["task_count"] = Participant.task_count + tasks
    if not values:
        return
    await session.execute(
        update(Participant).where(Participant.id == participant_id).values(**values)
    )


async def create_submission(session: AsyncSession, participant_id: UUID, data: SubmissionCreate) -> SubmissionOutcome:
    """
    New task attempt, or a retry of a REJECTED one (same record, reset to PENDING).
    Both count the task immediately. The caller commits.
    """
    # Lock the participant row: serializes submissions of the same participant
    participant = await session.scalar(
        select(Participant).where(Participant.id == participant_id).with_for_update()
    )
    if not participant:
        raise NotFoundError("Participant not found")

    existing = (await session.execute(
        select(Submission)
        .where(Submission.participant_id == participant.id, Submission.task_name == data.task_name)
        .order_by(Submission.created_at.desc())
        .with_for_update()
    )).scalars().all()

    if any(s.status != REJECTED for s in existing):
        raise ConflictError("A submission for this task already exists and is not rejected.")

    if existing:
        sub = existing[0]
        prev_status, prev_points = sub.status, sub.points
        sub.file_url = str(data.file_url)
        sub.status = PENDING
        sub.points = None
        sub.note = None
        created = False
        reason = "resubmitted"
    else:
        sub = Submission(
            participant_id=participant.id,
            task_name=data.task_name,
            task_type=data.task_type,
            file_url=str(data.file_url),
            status=PENDING,
        )
        sub.participant = participant
        session.add(sub)
        prev_status, prev_points = None, None
        created = True
        reason = "submitted"

    points_delta, task_delta = transition_effect(prev_status, prev_points, PENDING, None)
    await session.flush()
    await adjust_totals(session, participant.id, points=points_delta, tasks=task_delta)
    if settings.ledger_audit:
        assert_consistent(await audit_participant(session, participant.id))
    await session.refresh(sub)

    log.info(
        "submission_received",
        submission_id=str(sub.id),
        participant_id=str(participant.id),
        task_name=sub.task_name,
        resubmission=not created,
        task_delta=task_delta,
    )
    event = LedgerUpdated(
        participant_id=participant.id,
        submission_id=sub.id,
        reason=reason,
        status=sub.status,
        points_delta=points_delta,
        task_delta=task_delta,
    )
    return SubmissionOutcome(submission=sub, created=created, event=event)


async def review_submission(session: AsyncSession, submission_id: UUID, data: SubmissionReview) -> SubmissionOutcome:
    """Apply an admin decision and the matching ledger adjustment in one transaction. The caller commits."""
    sub = await session.scalar(
        select(Submission).where(Submission.id == submission_id).with_for_update()
    )
    if not sub:
        raise NotFoundError("Submission not found")

    prev_status, prev_points = sub.status, sub.points
    points_delta, task_delta = transition_effect(prev_status, prev_points, data.status, data.points)

    sub.status = data.status
    sub.points = data.points if data.status == APPROVED else None
    if data.note is not None:
        sub.note = data.note
    await session.flush()
    await adjust_totals(session, sub.participant_id, points=points_delta, tasks=task_delta)
    if settings.ledger_audit:
        assert_consistent(await audit_participant(session, sub.participant_id))
    await session.refresh(sub)

    log.info(
        "submission_reviewed",
        submission_id=str(sub.id),
        participant_id=str(sub.participant_id),
        from_status=prev_status,
        to_status=sub.status,
        points_delta=points_delta,
        task_delta=task_delta,
    )
    event = LedgerUpdated(
        participant_id=sub.participant_id,
        submission_id=sub.id,
        reason="reviewed",
        status=sub.status,
        points_delta=points_delta,
        task_delta=task_delta,
    )
    return SubmissionOutcome(submission=sub, created=False, event=event)


async def audit_participant(session: AsyncSession, participant_id: UUID) -> LedgerAudit:
    """Recompute the ledger pair from submissions and compare with the stored totals."""
    recorded = (await session.execute(
        select(Participant.total_points, Participant.task_count).where(Participant.id == participant_id)
    )).one_or_none()
    if recorded is None:
        raise NotFoundError("Participant not found")

    approved_points = await session.scalar(
        select(func.coalesce(func.sum(Submission.points), 0))
        .where(Submission.participant_id == participant_id, Submission.status == APPROVED)
    )
    active = await session.scalar(
        select(func.count()).select_from(Submission)
        .where(Submission.participant_id == participant_id, Submission.status.in_(COUNTED))
    )
    return LedgerAudit(
        participant_id=participant_id,
        recorded_points=int(recorded.total_points),
        recorded_task_count=int(recorded.task_count),
        approved_points=int(approved_points or 0),
        active_submissions=int(active or 0),
    )


def assert_consistent(audit: LedgerAudit) -> None:
    if audit.consistent:
        return
    log.error("ledger_inconsistent", **audit.model_dump(mode="json"))
    raise ConsistencyViolation(
        f"participant {audit.participant_id}: recorded ({audit.recorded_points}, {audit.recorded_task_count}) "
        f"!= computed ({audit.approved_points}, {audit.active_submissions})"
    )
