from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Literal
from uuid import UUID
import structlog

log = structlog.get_logger()

LedgerReason = Literal["submitted", "resubmitted", "reviewed"]


@dataclass(frozen=True)
class LedgerUpdated:
    """A participant's totals changed (or may have); standings must be redistributed."""
    participant_id: UUID
    submission_id: UUID
    reason: LedgerReason
    status: str
    points_delta: int = 0
    task_delta: int = 0
    at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


Handler = Callable[[LedgerUpdated], Awaitable[None]]


class EventDispatcher:
    """Fans ledger events out to subscribers.

    Delivery is best-effort: a failing handler is logged and the next one
    still runs. Nothing is retried; the next mutation publishes fresh state.
    """

    def __init__(self) -> None:
        self._handlers: list[Handler] = []

    def subscribe(self, handler: Handler) -> None:
        self._handlers.append(handler)

    def unsubscribe(self, handler: Handler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    async def publish(self, event: LedgerUpdated) -> None:
        for handler in list(self._handlers):
            try:
                await handler(event)
            except Exception:
                log.exception(
                    "ledger_event_handler_failed",
                    handler=getattr(handler, "__qualname__", repr(handler)),
                    participant_id=str(event.participant_id),
                    reason=event.reason,
                )
