from __future__ import annotations

import random
from types import SimpleNamespace

from hackboard.services.ranking import assign_ranks, rank_rows


def _rows(*scores):
    return [
        SimpleNamespace(name=f"p{i:02d}", total_points=pts, task_count=tasks)
        for i, (pts, tasks) in enumerate(scores)
    ]


def test_ties_share_rank_and_skip_following():
    """(100,3),(100,3),(90,2),(90,2),(80,1) -> 1,1,3,3,5"""
    rows = _rows((100, 3), (100, 3), (90, 2), (90, 2), (80, 1))
    assert assign_ranks(rows) == [1, 1, 3, 3, 5]


def test_empty_sequence():
    assert assign_ranks([]) == []
    assert assign_ranks([], skip=40) == []


def test_single_entry_starts_after_skip():
    assert assign_ranks(_rows((10, 1))) == [1]
    assert assign_ranks(_rows((10, 1)), skip=7) == [8]


def test_all_tied():
    rows = _rows(*[(50, 2)] * 6)
    assert assign_ranks(rows, skip=3) == [4] * 6


def test_same_points_different_task_count_is_not_a_tie():
    rows = _rows((100, 4), (100, 3), (100, 3))
    assert assign_ranks(rows) == [1, 2, 2]


def test_second_page_without_ties():
    """page 2, limit 10 on a 25-entry board -> ranks 11..20"""
    board = _rows(*[(250 - i * 10, 1) for i in range(25)])
    page = board[10:20]
    assert assign_ranks(page, skip=10) == list(range(11, 21))


def test_head_rank_overrides_only_the_first_group():
    # Page opens with two rows of a group that started at global rank 9
    page = _rows((40, 2), (40, 2), (30, 1), (20, 1))
    assert assign_ranks(page, skip=10) == [11, 11, 13, 14]
    assert assign_ranks(page, skip=10, head_rank=9) == [9, 9, 13, 14]


def test_rank_rows_pairs_ranks_with_rows():
    rows = _rows((5, 1), (5, 1), (1, 1))
    ranked = rank_rows(rows)
    assert [r for r, _ in ranked] == [1, 1, 3]
    assert [row.name for _, row in ranked] == ["p00", "p01", "p02"]


def test_ranking_properties_hold_for_random_boards():
    rnd = random.Random(20261018)
    for _ in range(200):
        n = rnd.randint(0, 40)
        skip = rnd.randint(0, 30)
        scores = [(rnd.choice([0, 10, 20, 30]), rnd.randint(0, 3)) for _ in range(n)]
        rows = sorted(_rows(*scores), key=lambda r: (-r.total_points, -r.task_count, r.name))
        ranks = assign_ranks(rows, skip=skip)

        assert len(ranks) == n
        if rows:
            assert ranks[0] == skip + 1
        for i in range(1, n):
            same = (rows[i].total_points, rows[i].task_count) == (rows[i - 1].total_points, rows[i - 1].task_count)
            if same:
                assert ranks[i] == ranks[i - 1]
            else:
                # Next group starts exactly at its position
                assert ranks[i] == skip + i + 1
            assert ranks[i] >= ranks[i - 1]
