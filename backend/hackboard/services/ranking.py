from __future__ import annotations
from typing import Callable, Protocol, Sequence, TypeVar


class Scored(Protocol):
    total_points: int
    task_count: int


T = TypeVar("T", bound=Scored)


def score_key(row: Scored) -> tuple[int, int]:
    return (int(row.total_points), int(row.task_count))


def assign_ranks(
    rows: Sequence[Scored],
    *,
    skip: int = 0,
    head_rank: int | None = None,
    key: Callable[[Scored], tuple[int, int]] = score_key,
) -> list[int]:
    """Standard competition ranking (1, 1, 3) over rows already sorted best-first.

    Rows tie when (total_points, task_count) are equal; the name ordering
    upstream only makes the output deterministic. ``skip`` is the number of
    rows ranked ahead of this sequence. ``head_rank`` overrides the rank of
    the first tie-group, for pages that open in the middle of a group which
    started on an earlier page.
    """
    ranks: list[int] = []
    group_start = 0
    prev: tuple[int, int] | None = None

    for idx, row in enumerate(rows):
        current = key(row)
        if prev is not None and current != prev:
            group_start = idx
        prev = current
        if group_start == 0 and head_rank is not None:
            ranks.append(head_rank)
        else:
            ranks.append(skip + group_start + 1)

    return ranks


def rank_rows(
    rows: Sequence[T],
    *,
    skip: int = 0,
    head_rank: int | None = None,
) -> list[tuple[int, T]]:
    return list(zip(assign_ranks(rows, skip=skip, head_rank=head_rank), rows))
