from __future__ import annotations
import asyncio
import structlog
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hackboard.models.participant import Participant

log = structlog.get_logger()


class RegistrationSweeper:
    """
    Deletes participants created by an OTP request that was never verified.

    One pending timer per email; scheduling again replaces the timer,
    verification cancels it. The application owns the instance and calls
    close() on shutdown, which cancels every pending timer.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], ttl_seconds: float) -> None:
        self.session_factory = session_factory
        self.ttl_seconds = ttl_seconds
        self._timers: dict[str, asyncio.Task] = {}

    def pending(self, email: str) -> bool:
        return email in self._timers

    def schedule(self, email: str) -> None:
        self.cancel(email)
        self._timers[email] = asyncio.get_running_loop().create_task(self._expire(email))

    def cancel(self, email: str) -> None:
        task = self._timers.pop(email, None)
        if task is not None:
            task.cancel()

    async def _expire(self, email: str) -> None:
        try:
            await asyncio.sleep(self.ttl_seconds)
            await self.sweep(email)
        except asyncio.CancelledError:
            raise
        except Exception:
            log.exception("registration_cleanup_failed", email=email)
        finally:
            if self._timers.get(email) is asyncio.current_task():
                del self._timers[email]

    async def sweep(self, email: str) -> bool:
        """Remove the participant if its OTP is still outstanding. Returns True when deleted."""
        async with self.session_factory() as session:
            result = await session.execute(
                delete(Participant).where(Participant.email == email, Participant.otp.is_not(None))
            )
            await session.commit()
        deleted = bool(result.rowcount)
        if deleted:
            log.info("unverified_participant_deleted", email=email)
        return deleted

    async def close(self) -> None:
        timers, self._timers = list(self._timers.values()), {}
        for task in timers:
            task.cancel()
        if timers:
            await asyncio.gather(*timers, return_exceptions=True)
