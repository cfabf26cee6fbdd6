from __future__ import annotations
from dataclasses import dataclass
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hackboard.config import settings
from hackboard.services.events import EventDispatcher
from hackboard.services.realtime import LeaderboardBroadcaster, LeaderboardHub
from hackboard.services.registrations import RegistrationSweeper


@dataclass
class Runtime:
    """Process-wide collaborators owned by one application instance."""
    dispatcher: EventDispatcher
    hub: LeaderboardHub
    sweeper: RegistrationSweeper

    async def shutdown(self) -> None:
        await self.sweeper.close()
        await self.hub.close()


def build_runtime(session_factory: async_sessionmaker[AsyncSession]) -> Runtime:
    hub = LeaderboardHub()
    dispatcher = EventDispatcher()
    dispatcher.subscribe(LeaderboardBroadcaster(hub, session_factory, settings.leaderboard_top_n))
    sweeper = RegistrationSweeper(session_factory, settings.registration_ttl_seconds)
    return Runtime(dispatcher=dispatcher, hub=hub, sweeper=sweeper)


def get_runtime(request: Request) -> Runtime:
    return request.app.state.runtime
