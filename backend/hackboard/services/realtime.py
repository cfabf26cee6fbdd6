from __future__ import annotations
import asyncio
from typing import Any, Protocol
import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hackboard.services.events import LedgerUpdated
from hackboard.services.leaderboard import leaderboard_snapshot, participant_stats

log = structlog.get_logger()

LEADERBOARD_UPDATE = "leaderboard:update"
USER_STATS_UPDATE = "user:stats:update"
SUBMISSION_NEW = "submission:new"


class Listener(Protocol):
    async def send_json(self, data: Any) -> None: ...


class LeaderboardHub:
    """
    Registry of connected leaderboard listeners (WebSockets in production).
    Owned by the application: created in create_app(), closed on shutdown.
    Sends are at-most-once; a listener that fails a send is dropped.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self._lock = asyncio.Lock()

    @property
    def size(self) -> int:
        return len(self._listeners)

    async def connect(self, listener: Listener) -> None:
        async with self._lock:
            self._listeners.append(listener)
        log.info("leaderboard_listener_connected", listeners=len(self._listeners))

    async def disconnect(self, listener: Listener) -> None:
        async with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)
        log.info("leaderboard_listener_disconnected", listeners=len(self._listeners))

    async def broadcast(self, event: str, data: Any) -> int:
        """Push to every listener; returns how many sends succeeded."""
        async with self._lock:
            targets = list(self._listeners)
        if not targets:
            return 0

        message = {"event": event, "data": data}
        results = await asyncio.gather(
            *(t.send_json(message) for t in targets), return_exceptions=True
        )
        dead = [t for t, r in zip(targets, results) if isinstance(r, BaseException)]
        if dead:
            log.warning("leaderboard_listeners_dropped", ws_event=event, dropped=len(dead))
            async with self._lock:
                for t in dead:
                    if t in self._listeners:
                        self._listeners.remove(t)
        return len(targets) - len(dead)

    async def close(self) -> None:
        async with self._lock:
            targets, self._listeners = self._listeners, []
        for t in targets:
            close = getattr(t, "close", None)
            if close is None:
                continue
            try:
                await close()
            except Exception:
                log.warning("leaderboard_listener_close_failed")


class LeaderboardBroadcaster:
    """Ledger event handler: recompute standings after commit and push them to the hub."""

    def __init__(self, hub: LeaderboardHub, session_factory: async_sessionmaker[AsyncSession], top_n: int) -> None:
        self.hub = hub
        self.session_factory = session_factory
        self.top_n = top_n

    async def __call__(self, event: LedgerUpdated) -> None:
        async with self.session_factory() as session:
            board = await leaderboard_snapshot(session, self.top_n)
            stats = await participant_stats(session, event.participant_id)

        if event.reason in ("submitted", "resubmitted"):
            await self.hub.broadcast(SUBMISSION_NEW, {
                "submission_id": str(event.submission_id),
                "participant_id": str(event.participant_id),
                "status": event.status,
            })
        await self.hub.broadcast(LEADERBOARD_UPDATE, board.model_dump(mode="json"))
        await self.hub.broadcast(USER_STATS_UPDATE, stats.model_dump(mode="json"))
        log.info(
            "leaderboard_broadcast",
            reason=event.reason,
            participant_id=str(event.participant_id),
            listeners=self.hub.size,
        )
