from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, Text, Integer, DateTime, ForeignKey, Index, Uuid, func
from hackboard.db import Base
from hackboard.models.participant import Participant


class Submission(Base):
    __tablename__ = "submissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    participant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("participants.id", ondelete="CASCADE"), index=True, nullable=False
    )

    task_name: Mapped[str] = mapped_column(String(200), nullable=False)
    task_type: Mapped[str] = mapped_column(String(32), nullable=False)  # CHALLENGE|MENTOR_SESSION|POWERUP_CHALLENGE|EASTER_EGG
    file_url: Mapped[str] = mapped_column(Text(), nullable=False)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default="PENDING", server_default="PENDING")  # PENDING|APPROVED|REJECTED
    points: Mapped[int | None] = mapped_column(Integer, nullable=True)  # only set while APPROVED
    note: Mapped[str | None] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    participant: Mapped[Participant] = relationship(lazy="selectin")

    __table_args__ = (
        # One record per (participant, task); a rejected one is reused on resubmission
        Index("ix_submissions_participant_task", "participant_id", "task_name"),
    )
