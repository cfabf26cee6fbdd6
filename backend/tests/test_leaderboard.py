from __future__ import annotations

import csv
import io
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from hackboard.services.leaderboard import (
    CSV_COLUMNS,
    admin_stats,
    export_standings,
    leaderboard_page,
    leaderboard_snapshot,
    participant_stats,
    render_csv,
)
from hackboard.services.errors import NotFoundError
from conftest import add_participant


async def _board(session, scores):
    """scores: list of (name, total_points, task_count)"""
    out = []
    for name, pts, tasks in scores:
        out.append(await add_participant(session, name, total_points=pts, task_count=tasks))
    return out


@pytest.mark.asyncio
async def test_page_orders_and_ranks_with_ties(session):
    await _board(session, [
        ("Cleo", 90, 2),
        ("Abe", 100, 3),
        ("Bea", 100, 3),
        ("Dan", 90, 2),
        ("Eve", 80, 1),
    ])
    page = await leaderboard_page(session, 1, 10)
    assert [e.name for e in page.leaderboard] == ["Abe", "Bea", "Cleo", "Dan", "Eve"]
    assert [e.rank for e in page.leaderboard] == [1, 1, 3, 3, 5]
    assert page.pagination.model_dump() == {"page": 1, "limit": 10, "total": 5, "total_pages": 1}


@pytest.mark.asyncio
async def test_zero_point_participants_are_not_ranked(session):
    await _board(session, [("Abe", 10, 1), ("Bea", 0, 2), ("Cleo", 0, 0)])
    page = await leaderboard_page(session, 1, 10)
    assert [e.name for e in page.leaderboard] == ["Abe"]
    assert page.pagination.total == 1


@pytest.mark.asyncio
async def test_second_page_of_distinct_scores(session):
    await _board(session, [(f"P{i:02d}", 500 - i, 1) for i in range(25)])
    page = await leaderboard_page(session, 2, 10)
    assert [e.rank for e in page.leaderboard] == list(range(11, 21))
    assert page.pagination.total == 25
    assert page.pagination.total_pages == 3


@pytest.mark.asyncio
async def test_tie_group_spanning_pages_keeps_global_rank(session):
    await _board(session, [
        ("Abe", 100, 1),
        ("Bea", 50, 1),
        ("Cleo", 50, 1),
        ("Dan", 50, 1),
        ("Eve", 10, 1),
    ])
    second = await leaderboard_page(session, 2, 2, global_ties=True)
    assert [e.name for e in second.leaderboard] == ["Cleo", "Dan"]
    assert [e.rank for e in second.leaderboard] == [2, 2]

    third = await leaderboard_page(session, 3, 2, global_ties=True)
    assert [(e.name, e.rank) for e in third.leaderboard] == [("Eve", 5)]


@pytest.mark.asyncio
async def test_page_local_ties_when_global_ties_disabled(session):
    await _board(session, [
        ("Abe", 100, 1),
        ("Bea", 50, 1),
        ("Cleo", 50, 1),
        ("Dan", 50, 1),
    ])
    second = await leaderboard_page(session, 2, 2, global_ties=False)
    assert [e.rank for e in second.leaderboard] == [3, 3]


@pytest.mark.asyncio
async def test_page_past_the_end_is_empty(session):
    await _board(session, [("Abe", 10, 1)])
    page = await leaderboard_page(session, 4, 10)
    assert page.leaderboard == []
    assert page.pagination.total == 1
    assert page.pagination.total_pages == 1


@pytest.mark.asyncio
async def test_empty_board(session):
    page = await leaderboard_page(session, 1, 50)
    assert page.leaderboard == []
    assert page.pagination.total == 0
    assert page.pagination.total_pages == 0


@pytest.mark.asyncio
async def test_snapshot_is_bounded_to_top_n(session):
    await _board(session, [(f"P{i}", 10 * (i + 1), 1) for i in range(6)])
    snap = await leaderboard_snapshot(session, 3)
    assert len(snap.leaderboard) == 3
    assert snap.leaderboard[0].total_points == 60
    assert snap.pagination.total == 6


@pytest.mark.asyncio
async def test_export_ranks_every_participant(session):
    await _board(session, [(f"P{i:02d}", 100 if i < 2 else 100 - i, 1) for i in range(60)])
    ranked = await export_standings(session)
    assert len(ranked) == 60
    assert [r for r, _ in ranked[:3]] == [1, 1, 3]


def test_render_csv_columns_and_quoting():
    rows = [
        (1, SimpleNamespace(name="Ada, Countess", email="ada@example.com", total_points=100, task_count=3,
                            created_at=datetime(2026, 3, 1, 23, 30, tzinfo=timezone.utc))),
        (1, SimpleNamespace(name="Bob", email="bob@example.com", total_points=100, task_count=3,
                            created_at=datetime(2026, 3, 2, 8, 0))),
    ]
    text = render_csv(rows)
    parsed = list(csv.reader(io.StringIO(text)))
    assert parsed[0] == CSV_COLUMNS
    assert parsed[1] == ["1", "Ada, Countess", "ada@example.com", "100", "3", "2026-03-01"]
    assert parsed[2] == ["1", "Bob", "bob@example.com", "100", "3", "2026-03-02"]


@pytest.mark.asyncio
async def test_participant_stats(session):
    p = await add_participant(session, "Ada", total_points=12, task_count=2)
    stats = await participant_stats(session, p.id)
    assert stats.name == "Ada"
    assert (stats.total_points, stats.task_count) == (12, 2)


@pytest.mark.asyncio
async def test_participant_stats_missing(session):
    with pytest.raises(NotFoundError):
        await participant_stats(session, uuid.uuid4())


@pytest.mark.asyncio
async def test_admin_stats_on_empty_database(session):
    stats = await admin_stats(session)
    assert stats.model_dump() == {
        "total_tasks": 0,
        "total_participants": 0,
        "total_submissions": 0,
        "pending_submissions": 0,
    }
