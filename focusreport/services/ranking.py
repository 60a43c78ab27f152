"""
Ranking
=======
Bounded, deterministic "top N" selection for the report.

top_n:
    1. Optionally drop singleton buckets (count == 1)
    2. Sort ascending by location key
    3. Stable-sort descending by count
    → largest count first, ties in ascending key order, never dependent on
      dict iteration order.

top_slowest:
    1. Sort descending by duration
    2. Take the first n
    3. THEN drop entries under the threshold
    → "at most n, and only if slow enough". An item cut by the threshold is
      not replaced by the next one down the list.
"""
from typing import Callable, Iterable, Mapping, Optional, TypeVar

T = TypeVar("T")
B = TypeVar("B")


def top_n(
    buckets: Mapping[str, B],
    n: int,
    exclude_singletons: bool = True,
) -> list[tuple[str, B]]:
    """
    Rank location buckets by size.

    Parameters
    ----------
    buckets : Mapping[str, LineBucket | SiteBucket]
        Normalized location → bucket (anything with a ``count``).
    n : int
        Maximum entries returned. ``n <= 0`` yields an empty list.
    exclude_singletons : bool
        Drop buckets seen only once.

    Returns
    -------
    list[tuple[str, bucket]]
    """
    if n <= 0:
        return []

    items = [
        (key, bucket)
        for key, bucket in buckets.items()
        if not (exclude_singletons and bucket.count == 1)
    ]
    items.sort(key=lambda item: item[0])
    items.sort(key=lambda item: item[1].count, reverse=True)
    return items[:n]


def _second(item) -> float:
    return item[1]


def top_slowest(
    items: Iterable[T],
    n: int,
    min_threshold: float = 0.0,
    duration: Optional[Callable[[T], float]] = None,
) -> list[T]:
    """
    Pick the slowest items, at most ``n`` of them, each at least
    ``min_threshold`` seconds.

    ``duration`` extracts the seconds from an item; by default items are
    (name, duration) pairs.
    """
    if n <= 0:
        return []

    key = duration or _second
    ranked = sorted(items, key=key, reverse=True)[:n]
    return [item for item in ranked if key(item) >= min_threshold]
