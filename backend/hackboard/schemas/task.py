from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, model_validator
from uuid import UUID
from datetime import datetime
from hackboard.schemas.submission import TaskType


class TaskCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    type: TaskType
    points: int = Field(default=0, ge=0)
    is_variable_points: bool = False

    @model_validator(mode="after")
    def fixed_tasks_need_points(self):
        if not self.is_variable_points and self.points <= 0:
            raise ValueError("Valid points value is required for fixed point tasks")
        if self.is_variable_points:
            self.points = 0
        return self


class TaskUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1)
    type: TaskType | None = None
    points: int | None = Field(default=None, ge=0)
    is_variable_points: bool | None = None


class TaskPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str
    type: str
    points: int
    is_variable_points: bool
    created_at: datetime


class TaskList(BaseModel):
    tasks: list[TaskPublic]
    total: int


class AdminStats(BaseModel):
    total_tasks: int
    total_participants: int
    total_submissions: int
    pending_submissions: int
