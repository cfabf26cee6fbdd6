from __future__ import annotations
import structlog
from redis import Redis
from rq import Queue

from hackboard.config import settings

log = structlog.get_logger()

_queue: Queue | None = None


def _get_queue() -> Queue:
    # RQ queue (lazy single instance)
    global _queue
    if _queue is None:
        _queue = Queue("default", connection=Redis.from_url(settings.redis_url))
    return _queue


def deliver(to: str, subject: str, body: str) -> None:
    """Hand a message to the configured backend. Best effort: failures are logged, never raised."""
    if settings.email_backend == "log":
        log.info("email_outbox", to=to, subject=subject, body=body)
        return
    try:
        _get_queue().enqueue("hackboard.jobs.send_email.send_email", to, subject, body)
    except Exception:
        log.exception("email_enqueue_failed", to=to, subject=subject)


def send_participant_otp(email: str, otp: str) -> None:
    deliver(
        email,
        f"Your {settings.app_display_name} login code",
        f"Your one-time code is {otp}. It expires in {settings.participant_otp_ttl_min} minutes.",
    )


def send_admin_otp(email: str, otp: str) -> None:
    deliver(
        email,
        f"{settings.app_display_name} admin login code",
        f"Your admin one-time code is {otp}. It expires in {settings.admin_otp_ttl_min} minutes.",
    )


def send_submission_approved(email: str, name: str, task_name: str, points: int, note: str | None = None) -> None:
    body = f"Hi {name},\n\nYour submission for \"{task_name}\" was approved and earned {points} points."
    if note:
        body += f"\n\nReviewer note: {note}"
    deliver(email, f"Submission approved: {task_name}", body)


def send_submission_rejected(email: str, name: str, task_name: str, note: str | None = None) -> None:
    body = f"Hi {name},\n\nYour submission for \"{task_name}\" was not accepted. You can submit it again."
    if note:
        body += f"\n\nReviewer note: {note}"
    deliver(email, f"Submission rejected: {task_name}", body)
