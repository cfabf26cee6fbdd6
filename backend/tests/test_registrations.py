from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from hackboard.models.participant import Participant
from hackboard.services.registrations import RegistrationSweeper


async def _pending(session, email, otp="123456"):
    p = Participant(
        email=email,
        name="New",
        college="Uni",
        otp=otp,
        otp_expiry=datetime.now(timezone.utc) + timedelta(minutes=5),
    )
    session.add(p)
    await session.commit()
    return p


async def _exists(session_factory, email):
    async with session_factory() as s:
        return await s.scalar(select(Participant).where(Participant.email == email)) is not None


@pytest.mark.asyncio
async def test_sweep_removes_unverified_registration(session, session_factory):
    await _pending(session, "new@example.com")
    sweeper = RegistrationSweeper(session_factory, ttl_seconds=300)
    assert await sweeper.sweep("new@example.com") is True
    assert not await _exists(session_factory, "new@example.com")


@pytest.mark.asyncio
async def test_sweep_keeps_verified_participant(session, session_factory):
    await _pending(session, "done@example.com", otp=None)
    sweeper = RegistrationSweeper(session_factory, ttl_seconds=300)
    assert await sweeper.sweep("done@example.com") is False
    assert await _exists(session_factory, "done@example.com")


@pytest.mark.asyncio
async def test_timer_fires_after_ttl(session, session_factory):
    await _pending(session, "late@example.com")
    sweeper = RegistrationSweeper(session_factory, ttl_seconds=0.01)
    sweeper.schedule("late@example.com")
    assert sweeper.pending("late@example.com")

    for _ in range(100):
        await asyncio.sleep(0.01)
        if not sweeper.pending("late@example.com"):
            break
    assert not sweeper.pending("late@example.com")
    assert not await _exists(session_factory, "late@example.com")


@pytest.mark.asyncio
async def test_cancel_and_close_stop_timers(session, session_factory):
    await _pending(session, "a@example.com")
    await _pending(session, "b@example.com")
    sweeper = RegistrationSweeper(session_factory, ttl_seconds=0.05)
    sweeper.schedule("a@example.com")
    sweeper.schedule("b@example.com")

    sweeper.cancel("a@example.com")
    await sweeper.close()
    await asyncio.sleep(0.1)

    assert not sweeper.pending("b@example.com")
    assert await _exists(session_factory, "a@example.com")
    assert await _exists(session_factory, "b@example.com")
