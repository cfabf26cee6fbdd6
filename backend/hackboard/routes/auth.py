from __future__ import annotations
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from hackboard.auth_deps import get_current_admin, get_current_participant
from hackboard.config import settings
from hackboard.db import get_session
from hackboard.models.participant import Admin, Participant
from hackboard.schemas.auth import (
    AdminCheck, AdminPublic, AdminToken, OTPRequest, OTPSent, OTPVerify, ParticipantPublic,
)
from hackboard.security import generate_otp, otp_expiry, is_otp_expired, make_access_token
from hackboard.services import mailer

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/check-admin", response_model=AdminCheck)
async def check_admin(payload: OTPRequest, session: AsyncSession = Depends(get_session)):
    admin = await session.scalar(select(Admin).where(Admin.email == payload.email))
    return AdminCheck(is_admin=admin is not None)

@router.post("/request-otp", response_model=OTPSent)
async def request_admin_otp(
    payload: OTPRequest,
    background: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
):
    admin = await session.scalar(select(Admin).where(Admin.email == payload.email))
    if not admin:
        raise HTTPException(status_code=401, detail="Unauthorized: Admin account not found")
    otp = generate_otp()
    admin.otp = otp
    admin.otp_expiry = otp_expiry(settings.admin_otp_ttl_min)
    await session.commit()
    background.add_task(mailer.send_admin_otp, admin.email, otp)
    return OTPSent(email=admin.email)

@router.post("/verify-otp", response_model=AdminToken)
async def verify_admin_otp(payload: OTPVerify, session: AsyncSession = Depends(get_session)):
    admin = await session.scalar(select(Admin).where(Admin.email == payload.email, Admin.otp == payload.otp))
    if not admin:
        raise HTTPException(status_code=401, detail="Invalid email or OTP")
    if is_otp_expired(admin.otp_expiry):
        raise HTTPException(status_code=401, detail="OTP has expired")
    admin.otp = None
    admin.otp_expiry = None
    await session.commit()
    return AdminToken(
        token=make_access_token(str(admin.id), "admin", admin.email),
        admin=AdminPublic.model_validate(admin),
    )

@router.get("/validate-admin-token", response_model=AdminPublic)
async def validate_admin_token(admin: Admin = Depends(get_current_admin)):
    return AdminPublic.model_validate(admin)

@router.get("/validate-participant-token", response_model=ParticipantPublic)
async def validate_participant_token(participant: Participant = Depends(get_current_participant)):
    return ParticipantPublic.model_validate(participant)
