from __future__ import annotations
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Literal
import jwt
from hackboard.config import settings

JWT_ALG = "HS256"

Role = Literal["participant", "admin"]

def generate_otp() -> str:
    """Six-digit numeric one-time code."""
    return f"{secrets.randbelow(900000) + 100000}"

def otp_expiry(ttl_min: int) -> datetime:
    return datetime.now(timezone.utc) + timedelta(minutes=ttl_min)

def is_otp_expired(expiry: datetime | None) -> bool:
    if expiry is None:
        return True
    # SQLite hands back naive datetimes; they are stored as UTC
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=timezone.utc)
    return datetime.now(timezone.utc) > expiry

def make_access_token(sub: str, role: Role, email: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": sub,
        "role": role,
        "email": email,
        "type": "access",
        "iat": now.timestamp(),
        "exp": int((now + timedelta(minutes=settings.access_ttl_min)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALG)

def decode_token(token: str) -> dict[str, Any]:
    return jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALG])
