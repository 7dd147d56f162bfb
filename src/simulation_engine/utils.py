"""Small numeric helpers shared by the generators."""

import math
from typing import List, Mapping, Sequence


def clamp(value, low, high):
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)


def rank_by_score(
    values: Sequence[str],
    scores: Mapping[str, float],
    count: int = 1,
    ascending: bool = False,
) -> List[str]:
    """Top *count* values ordered by score (missing scores count as 0).

    The sort is stable, so equal scores keep their input order.  At least
    one value is returned when *values* is non-empty.
    """
    ordered = sorted(
        values,
        key=lambda v: scores.get(v, 0) if ascending else -scores.get(v, 0),
    )
    return ordered[: max(1, count)]


def first_max_index(values: Sequence[float]) -> int:
    """Index of the first occurrence of the maximum."""
    best = 0
    for i in range(1, len(values)):
        if values[i] > values[best]:
            best = i
    return best
