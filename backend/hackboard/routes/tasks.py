from __future__ import annotations
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hackboard.auth_deps import get_current_admin
from hackboard.db import get_session
from hackboard.models.task import Task
from hackboard.schemas.task import AdminStats, TaskCreate, TaskList, TaskPublic, TaskUpdate
from hackboard.services.leaderboard import admin_stats

router = APIRouter(prefix="/tasks", tags=["tasks"])
admin_router = APIRouter(prefix="/admin/tasks", tags=["admin"])


async def _all_tasks(session: AsyncSession) -> TaskList:
    rows = (await session.execute(select(Task).order_by(Task.created_at.desc()))).scalars().all()
    return TaskList(tasks=[TaskPublic.model_validate(t) for t in rows], total=len(rows))


@router.get("", response_model=TaskList)
async def public_tasks(session: AsyncSession = Depends(get_session)):
    return await _all_tasks(session)


@admin_router.get("", response_model=TaskList)
async def list_tasks(session: AsyncSession = Depends(get_session), admin=Depends(get_current_admin)):
    return await _all_tasks(session)


@admin_router.get("/stats", response_model=AdminStats)
async def stats(session: AsyncSession = Depends(get_session), admin=Depends(get_current_admin)):
    return await admin_stats(session)


@admin_router.post("", response_model=TaskPublic, status_code=201)
async def create_task(payload: TaskCreate, session: AsyncSession = Depends(get_session), admin=Depends(get_current_admin)):
    task = Task(
        name=payload.name.strip(),
        description=payload.description.strip(),
        type=payload.type,
        points=payload.points,
        is_variable_points=payload.is_variable_points,
    )
    session.add(task)
    await session.commit()
    await session.refresh(task)
    return TaskPublic.model_validate(task)


@admin_router.put("/{task_id}", response_model=TaskPublic)
async def update_task(
    task_id: UUID,
    payload: TaskUpdate,
    session: AsyncSession = Depends(get_session),
    admin=Depends(get_current_admin),
):
    task = await session.get(Task, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(task, field, value.strip() if isinstance(value, str) else value)
    await session.commit()
    await session.refresh(task)
    return TaskPublic.model_validate(task)


@admin_router.delete("/{task_id}")
async def delete_task(task_id: UUID, session: AsyncSession = Depends(get_session), admin=Depends(get_current_admin)):
    task = await session.get(Task, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    await session.delete(task)
    await session.commit()
    return {"message": "Task deleted successfully"}
