from __future__ import annotations
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Literal
from uuid import UUID

Gender = Literal["Male", "Female"]


class _EmailIn(BaseModel):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower()
        return v


class OTPRequest(_EmailIn):
    pass


class ParticipantOTPRequest(_EmailIn):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    college: str | None = Field(default=None, min_length=1, max_length=200)
    gender: Gender | None = None

    @field_validator("name", "college", mode="before")
    @classmethod
    def _strip(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip() or None
        return v


class OTPVerify(_EmailIn):
    otp: str = Field(pattern=r"^\d{6}$")


class AdminCheck(BaseModel):
    is_admin: bool


class OTPSent(BaseModel):
    message: str = "OTP sent successfully"
    email: str
    is_new_user: bool | None = None


class ParticipantPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str
    college: str | None = None
    gender: str | None = None
    total_points: int
    task_count: int


class AdminPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str


class ParticipantToken(BaseModel):
    token: str
    participant: ParticipantPublic


class AdminToken(BaseModel):
    token: str
    admin: AdminPublic


class ParticipantProfileUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    college: str | None = Field(default=None, min_length=1, max_length=200)
    gender: Gender | None = None
