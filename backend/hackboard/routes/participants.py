from __future__ import annotations
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from hackboard.auth_deps import get_current_participant
from hackboard.config import settings
from hackboard.db import get_session
from hackboard.models.participant import Participant
from hackboard.runtime import Runtime, get_runtime
from hackboard.schemas.auth import (
    OTPSent, OTPVerify, ParticipantOTPRequest, ParticipantProfileUpdate, ParticipantPublic, ParticipantToken,
)
from hackboard.security import generate_otp, otp_expiry, is_otp_expired, make_access_token
from hackboard.services import mailer

router = APIRouter(prefix="/participant", tags=["participant"])

@router.post("/request-otp", response_model=OTPSent)
async def request_participant_otp(
    payload: ParticipantOTPRequest,
    background: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
    runtime: Runtime = Depends(get_runtime),
):
    participant = await session.scalar(select(Participant).where(Participant.email == payload.email))
    is_new = participant is None
    if is_new and (not payload.name or not payload.college):
        raise HTTPException(
            status_code=400,
            detail={"error": "Name and college are required for new users", "is_new_user": True},
        )

    otp = generate_otp()
    expiry = otp_expiry(settings.participant_otp_ttl_min)
    if is_new:
        participant = Participant(
            email=payload.email,
            name=payload.name,
            college=payload.college,
            gender=payload.gender,
            otp=otp,
            otp_expiry=expiry,
        )
        session.add(participant)
    else:
        participant.otp = otp
        participant.otp_expiry = expiry
    await session.commit()

    # A registration stays provisional until its first OTP is verified
    if is_new or runtime.sweeper.pending(payload.email):
        runtime.sweeper.schedule(payload.email)

    background.add_task(mailer.send_participant_otp, payload.email, otp)
    return OTPSent(email=payload.email, is_new_user=is_new)

@router.post("/verify-otp", response_model=ParticipantToken)
async def verify_participant_otp(
    payload: OTPVerify,
    session: AsyncSession = Depends(get_session),
    runtime: Runtime = Depends(get_runtime),
):
    participant = await session.scalar(
        select(Participant).where(Participant.email == payload.email, Participant.otp == payload.otp)
    )
    if not participant:
        raise HTTPException(status_code=401, detail="Invalid email or OTP")
    if is_otp_expired(participant.otp_expiry):
        raise HTTPException(status_code=401, detail="OTP has expired")

    participant.otp = None
    participant.otp_expiry = None
    await session.commit()
    runtime.sweeper.cancel(payload.email)

    return ParticipantToken(
        token=make_access_token(str(participant.id), "participant", participant.email),
        participant=ParticipantPublic.model_validate(participant),
    )

@router.put("/profile", response_model=ParticipantPublic)
async def update_profile(
    payload: ParticipantProfileUpdate,
    participant: Participant = Depends(get_current_participant),
    session: AsyncSession = Depends(get_session),
):
    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(participant, field, value.strip() if isinstance(value, str) else value)
    await session.commit()
    await session.refresh(participant)
    return ParticipantPublic.model_validate(participant)
