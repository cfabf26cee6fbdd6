from __future__ import annotations
from uuid import UUID
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from hackboard.db import get_session
from hackboard.security import decode_token
from hackboard.models.participant import Admin, Participant

security = HTTPBearer()

def _claims(credentials: HTTPAuthorizationCredentials, role: str) -> dict:
    try:
        data = decode_token(credentials.credentials)
    except Exception:
        raise HTTPException(status_code=401, detail="Invalid token")
    if data.get("type") != "access":
        raise HTTPException(status_code=401, detail="Wrong token type")
    if data.get("role") != role:
        raise HTTPException(status_code=403, detail=f"{role.capitalize()} access required")
    return data

async def get_current_participant(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    session: AsyncSession = Depends(get_session),
) -> Participant:
    data = _claims(credentials, "participant")
    participant = await session.get(Participant, _uuid(data.get("sub")))
    if not participant:
        raise HTTPException(status_code=401, detail="Participant not found")
    return participant

async def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    session: AsyncSession = Depends(get_session),
) -> Admin:
    data = _claims(credentials, "admin")
    admin = await session.get(Admin, _uuid(data.get("sub")))
    if not admin:
        raise HTTPException(status_code=401, detail="Admin not found")
    return admin

def _uuid(sub) -> UUID:
    try:
        return UUID(str(sub))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token")
