"""
Create admin accounts (idempotent: existing emails are left alone).

Usage:
  hackboard-seed-admins --email lead@example.com --email judge@example.com
  # or from the environment
  ADMIN_EMAILS=lead@example.com,judge@example.com hackboard-seed-admins
"""

from __future__ import annotations

import argparse
import asyncio
from typing import Iterable

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hackboard.config import settings
from hackboard.db import SessionLocal
from hackboard.logging_setup import configure_logging
from hackboard.models.participant import Admin

log = structlog.get_logger()


def normalize_emails(emails: Iterable[str]) -> list[str]:
    seen: list[str] = []
    for raw in emails:
        for part in raw.split(","):
            email = part.strip().lower()
            if email and email not in seen:
                seen.append(email)
    return seen


async def seed_admins(session: AsyncSession, emails: Iterable[str]) -> list[str]:
    """Insert the admins that do not exist yet; returns the newly created emails."""
    wanted = normalize_emails(emails)
    if not wanted:
        return []
    existing = set((await session.execute(select(Admin.email).where(Admin.email.in_(wanted)))).scalars())
    created = [email for email in wanted if email not in existing]
    session.add_all(Admin(email=email) for email in created)
    await session.commit()
    log.info("admins_seeded", created=created, already_present=sorted(existing))
    return created


async def run(emails: list[str], session_factory: async_sessionmaker[AsyncSession] | None = None) -> list[str]:
    async with (session_factory or SessionLocal)() as session:
        return await seed_admins(session, emails)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create admin accounts (idempotent)")
    parser.add_argument(
        "--email",
        action="append",
        default=[],
        help="Admin email; repeat or comma-separate. Defaults to ADMIN_EMAILS.",
    )
    args = parser.parse_args(argv)

    emails = normalize_emails(args.email or [settings.admin_emails])
    if not emails:
        parser.error("no admin emails given (use --email or set ADMIN_EMAILS)")

    configure_logging()
    created = asyncio.run(run(emails))
    print(f"Created {len(created)} admin(s); {len(emails) - len(created)} already present.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
