from __future__ import annotations

import io
import uuid

import pytest
from openpyxl import load_workbook

from conftest import add_admin, add_participant, admin_headers, participant_headers


@pytest.mark.asyncio
async def test_leaderboard_pagination(client, session):
    for i in range(25):
        await add_participant(session, f"P{i:02d}", total_points=300 - i, task_count=1)

    r = await client.get("/leaderboard", params={"page": 2, "limit": 10})
    assert r.status_code == 200
    data = r.json()
    assert [e["rank"] for e in data["leaderboard"]] == list(range(11, 21))
    assert data["pagination"] == {"page": 2, "limit": 10, "total": 25, "total_pages": 3}


@pytest.mark.asyncio
async def test_leaderboard_rejects_bad_paging(client):
    assert (await client.get("/leaderboard", params={"page": 0})).status_code == 422
    assert (await client.get("/leaderboard", params={"limit": 0})).status_code == 422


@pytest.mark.asyncio
async def test_csv_export(client, session):
    admin = await add_admin(session)
    await add_participant(session, "Ada", total_points=100, task_count=3)
    await add_participant(session, "Bob", total_points=100, task_count=3)
    await add_participant(session, "Cy", total_points=90, task_count=2)
    await add_participant(session, "Dee", total_points=0, task_count=1)

    r = await client.get("/admin/export/leaderboard", headers=admin_headers(admin))
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert 'filename="leaderboard.csv"' in r.headers["content-disposition"]

    lines = r.text.strip().split("\n")
    assert lines[0] == "Rank,Name,Email,Total Points,Task Count,Join Date"
    assert [line.split(",")[:2] for line in lines[1:]] == [["1", "Ada"], ["1", "Bob"], ["3", "Cy"]]


@pytest.mark.asyncio
async def test_csv_export_is_admin_only(client, session):
    p = await add_participant(session, "Ada", total_points=10, task_count=1)
    r = await client.get("/admin/export/leaderboard", headers=participant_headers(p))
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_ledger_audit_endpoint(client, session):
    admin = await add_admin(session)
    good = await add_participant(session, "Ada")
    bad = await add_participant(session, "Bob", total_points=7, task_count=1)

    r = await client.get(f"/admin/ledger/audit/{good.id}", headers=admin_headers(admin))
    assert r.status_code == 200
    assert r.json()["consistent"] is True

    r = await client.get(f"/admin/ledger/audit/{bad.id}", headers=admin_headers(admin))
    assert r.json()["consistent"] is False
    assert r.json()["recorded_points"] == 7

    r = await client.get(f"/admin/ledger/audit/{uuid.uuid4()}", headers=admin_headers(admin))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_participant_spreadsheet_export(client, session):
    admin = await add_admin(session)
    await add_participant(session, "Bob", total_points=0)
    ada = await add_participant(session, "Ada", total_points=40, task_count=2)
    ada.college = "Analytical"
    await session.commit()

    r = await client.get("/admin/export/excel", headers=admin_headers(admin))
    assert r.status_code == 200
    assert r.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert 'filename="participants.xlsx"' in r.headers["content-disposition"]

    ws = load_workbook(io.BytesIO(r.content)).active
    rows = [list(row) for row in ws.iter_rows(values_only=True)]
    # Unscored participants are listed too
    assert rows == [
        ["Name", "Email", "College"],
        ["Ada", "ada@example.com", "Analytical"],
        ["Bob", "bob@example.com", "N/A"],
    ]
    assert ws["A1"].font.bold


@pytest.mark.asyncio
async def test_participant_spreadsheet_export_is_admin_only(client, session):
    p = await add_participant(session, "Ada")
    r = await client.get("/admin/export/excel", headers=participant_headers(p))
    assert r.status_code == 403
