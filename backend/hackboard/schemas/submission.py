from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, HttpUrl, model_validator
from typing import Literal
from uuid import UUID
from datetime import datetime

TaskType = Literal["CHALLENGE", "MENTOR_SESSION", "POWERUP_CHALLENGE", "EASTER_EGG"]
SubmissionStatus = Literal["PENDING", "APPROVED", "REJECTED"]


class SubmissionCreate(BaseModel):
    task_type: TaskType
    task_name: str = Field(min_length=1, max_length=200)
    file_url: HttpUrl


class SubmissionReview(BaseModel):
    status: SubmissionStatus
    points: int | None = Field(default=None, ge=0, le=1000)
    note: str | None = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def approval_needs_points(self):
        if self.status == "APPROVED" and self.points is None:
            raise ValueError("points are required to approve a submission")
        return self


class ParticipantBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    email: str


class SubmissionPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    participant_id: UUID
    task_name: str
    task_type: str
    file_url: str
    status: SubmissionStatus
    points: int | None = None
    note: str | None = None
    created_at: datetime
    updated_at: datetime


class SubmissionWithParticipant(SubmissionPublic):
    participant: ParticipantBrief


class TaskInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    type: str
    points: int
    is_variable_points: bool


class AdminSubmission(SubmissionWithParticipant):
    task: TaskInfo | None = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class AdminSubmissionPage(BaseModel):
    submissions: list[AdminSubmission]
    pagination: Pagination


class SubmissionResult(BaseModel):
    message: str
    submission: SubmissionWithParticipant


class ParticipantTotals(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    email: str
    total_points: int
    task_count: int


class MySubmissions(BaseModel):
    participant: ParticipantTotals
    submissions: list[SubmissionPublic]
