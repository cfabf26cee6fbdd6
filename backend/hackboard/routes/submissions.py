from __future__ import annotations
from math import ceil
from uuid import UUID
from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from hackboard.auth_deps import get_current_admin, get_current_participant
from hackboard.db import get_session
from hackboard.models.participant import Participant
from hackboard.models.submission import Submission
from hackboard.models.task import Task
from hackboard.runtime import Runtime, get_runtime
from hackboard.schemas.submission import (
    AdminSubmission, AdminSubmissionPage, MySubmissions, Pagination, ParticipantTotals,
    SubmissionCreate, SubmissionPublic, SubmissionResult, SubmissionReview, SubmissionStatus,
    SubmissionWithParticipant, TaskInfo, TaskType,
)
from hackboard.services import mailer
from hackboard.services.scoring import APPROVED, REJECTED, create_submission, review_submission

router = APIRouter(prefix="/submissions", tags=["submissions"])
admin_router = APIRouter(prefix="/admin/submissions", tags=["admin"])


@router.post("", response_model=SubmissionResult, status_code=201)
async def submit(
    payload: SubmissionCreate,
    response: Response,
    background: BackgroundTasks,
    participant: Participant = Depends(get_current_participant),
    session: AsyncSession = Depends(get_session),
    runtime: Runtime = Depends(get_runtime),
):
    outcome = await create_submission(session, participant.id, payload)
    await session.commit()

    # Standings are pushed after the response; delivery never fails the request
    background.add_task(runtime.dispatcher.publish, outcome.event)
    if not outcome.created:
        response.status_code = 200
    return SubmissionResult(
        message="Submission created successfully" if outcome.created else "Submission updated successfully",
        submission=SubmissionWithParticipant.model_validate(outcome.submission),
    )


@router.get("/my-submissions", response_model=MySubmissions)
async def my_submissions(
    participant: Participant = Depends(get_current_participant),
    session: AsyncSession = Depends(get_session),
):
    rows = (await session.execute(
        select(Submission)
        .where(Submission.participant_id == participant.id)
        .order_by(Submission.created_at.desc())
    )).scalars().all()
    return MySubmissions(
        participant=ParticipantTotals.model_validate(participant),
        submissions=[SubmissionPublic.model_validate(s) for s in rows],
    )


@admin_router.get("", response_model=AdminSubmissionPage)
async def list_submissions(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    status: SubmissionStatus | None = Query(default=None),
    task_type: TaskType | None = Query(default=None),
    email: str | None = Query(default=None),
    session: AsyncSession = Depends(get_session),
    admin=Depends(get_current_admin),
):
    q = select(Submission)
    count_q = select(func.count()).select_from(Submission)
    filters = []
    if status:
        filters.append(Submission.status == status)
    if task_type:
        filters.append(Submission.task_type == task_type)
    if email:
        q = q.join(Participant, Participant.id == Submission.participant_id)
        count_q = count_q.join(Participant, Participant.id == Submission.participant_id)
        filters.append(Participant.email == email.strip().lower())
    if filters:
        q = q.where(*filters)
        count_q = count_q.where(*filters)

    total = int(await session.scalar(count_q) or 0)
    rows = (await session.execute(
        q.order_by(Submission.created_at.desc()).offset((page - 1) * limit).limit(limit)
    )).scalars().all()

    # Attach the task definition each submission was made against
    tasks: dict[tuple[str, str], Task] = {}
    names = {s.task_name for s in rows}
    if names:
        for t in (await session.execute(select(Task).where(Task.name.in_(names)))).scalars().all():
            tasks.setdefault((t.name, t.type), t)

    items = []
    for s in rows:
        task = tasks.get((s.task_name, s.task_type))
        item = AdminSubmission.model_validate(s)
        item.task = TaskInfo.model_validate(task) if task else None
        items.append(item)

    return AdminSubmissionPage(
        submissions=items,
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=ceil(total / limit)),
    )


@admin_router.patch("/{submission_id}", response_model=SubmissionResult)
async def review(
    submission_id: UUID,
    payload: SubmissionReview,
    background: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
    runtime: Runtime = Depends(get_runtime),
    admin=Depends(get_current_admin),
):
    outcome = await review_submission(session, submission_id, payload)
    await session.commit()

    s = outcome.submission
    background.add_task(runtime.dispatcher.publish, outcome.event)
    if s.status == APPROVED:
        background.add_task(
            mailer.send_submission_approved, s.participant.email, s.participant.name, s.task_name, s.points, s.note
        )
    elif s.status == REJECTED:
        background.add_task(
            mailer.send_submission_rejected, s.participant.email, s.participant.name, s.task_name, s.note
        )
    return SubmissionResult(
        message="Submission updated successfully",
        submission=SubmissionWithParticipant.model_validate(s),
    )
