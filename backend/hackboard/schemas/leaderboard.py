from __future__ import annotations
from pydantic import BaseModel, computed_field
from uuid import UUID
from hackboard.schemas.submission import Pagination


class LeaderboardEntry(BaseModel):
    id: UUID
    name: str
    total_points: int
    task_count: int
    rank: int


class LeaderboardPage(BaseModel):
    leaderboard: list[LeaderboardEntry]
    pagination: Pagination


class ParticipantStats(BaseModel):
    id: UUID
    name: str
    total_points: int
    task_count: int


class LedgerAudit(BaseModel):
    participant_id: UUID
    recorded_points: int
    recorded_task_count: int
    approved_points: int
    active_submissions: int

    @computed_field
    @property
    def consistent(self) -> bool:
        return (
            self.recorded_points == self.approved_points
            and self.recorded_task_count == self.active_submissions
        )
