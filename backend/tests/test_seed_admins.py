from __future__ import annotations

import pytest
from sqlalchemy import select

from hackboard.config import settings
from hackboard.jobs import seed_admins as job
from hackboard.models.participant import Admin
from conftest import add_admin


async def _admin_emails(session_factory):
    async with session_factory() as s:
        return sorted((await s.execute(select(Admin.email))).scalars())


@pytest.mark.asyncio
async def test_seed_is_idempotent(session_factory, session):
    await add_admin(session, "lead@example.com")

    created = await job.run([" Lead@Example.com ", "judge@example.com,ops@example.com"], session_factory)
    assert created == ["judge@example.com", "ops@example.com"]

    assert await job.run(["judge@example.com"], session_factory) == []
    assert await _admin_emails(session_factory) == ["judge@example.com", "lead@example.com", "ops@example.com"]


@pytest.mark.asyncio
async def test_seeded_admin_can_request_otp(client, session_factory):
    r = await client.post("/auth/request-otp", json={"email": "judge@example.com"})
    assert r.status_code == 401

    await job.run(["judge@example.com"], session_factory)
    r = await client.post("/auth/request-otp", json={"email": "judge@example.com"})
    assert r.status_code == 200


def test_normalize_emails_dedupes_and_splits():
    assert job.normalize_emails(["a@x.io, B@x.io", "a@x.io", " "]) == ["a@x.io", "b@x.io"]


def test_cli_reads_flags_then_environment(monkeypatch, capsys):
    calls = []

    async def fake_run(emails, session_factory=None):
        calls.append(emails)
        return emails[:1]

    monkeypatch.setattr(job, "run", fake_run)
    monkeypatch.setattr(job, "configure_logging", lambda: None)

    assert job.main(["--email", "a@x.io", "--email", "b@x.io"]) == 0
    monkeypatch.setattr(settings, "admin_emails", "env@x.io")
    assert job.main([]) == 0

    assert calls == [["a@x.io", "b@x.io"], ["env@x.io"]]
    assert "Created 1 admin(s); 1 already present." in capsys.readouterr().out


def test_cli_without_emails_exits(monkeypatch):
    monkeypatch.setattr(settings, "admin_emails", "")
    with pytest.raises(SystemExit):
        job.main([])
