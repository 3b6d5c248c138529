"""
Window Aggregator — recent vs. prior window measures.

Splits a creation-ordered record collection into two adjacent fixed-size
windows (the most recent ``size`` records and the ``size`` records before
them) and measures each, giving a cheap trajectory signal without a stored
time series.

Rules:
    - A window with fewer than ``size`` records is empty
    - Measures over an empty collection return a neutral default (0.0)
    - A delta against an empty window is 0.0, never an error
"""

from typing import Callable, Iterable, Sequence, TypeVar

import numpy as np

T = TypeVar("T")

DEFAULT_WINDOW_SIZE = 10


def split_windows(records: Sequence[T], size: int = DEFAULT_WINDOW_SIZE) -> tuple[list[T], list[T]]:
    """
    Split records into (recent, prior) windows.

    Args:
        records: Records ordered by creation time ascending
        size: Records per window

    Returns:
        Tuple of the last ``size`` records and the ``size`` records preceding
        them; either is empty when the collection is too short to fill it

    Raises:
        ValueError: If size < 1
    """
    if size < 1:
        raise ValueError("Window size must be at least 1")

    records = list(records)
    n = len(records)
    recent = records[n - size:] if n >= size else []
    prior = records[n - 2 * size:n - size] if n >= 2 * size else []
    return recent, prior


def ratio(records: Sequence[T], predicate: Callable[[T], bool]) -> float:
    """Fraction of records satisfying predicate (0.0 when empty)."""
    if not records:
        return 0.0
    return float(np.mean([bool(predicate(r)) for r in records]))


def mean(values: Iterable[float], default: float = 0.0) -> float:
    """Arithmetic mean of values, or default when there are none."""
    array = np.array(list(values), dtype=float)
    if array.size == 0:
        return default
    return float(np.mean(array))


def window_delta(
    records: Sequence[T],
    measure: Callable[[Sequence[T]], float],
    size: int = DEFAULT_WINDOW_SIZE,
    scale: float = 100.0,
) -> float:
    """
    Scaled difference between the recent and prior window measures.

    Args:
        records: Records ordered by creation time ascending
        measure: Function computing a value over one window
        size: Records per window
        scale: Multiplier applied to the difference (100 turns ratios into points)

    Returns:
        ``(measure(recent) - measure(prior)) * scale``, or 0.0 when either
        window is empty
    """
    recent, prior = split_windows(records, size)
    if not recent or not prior:
        return 0.0
    return (measure(recent) - measure(prior)) * scale
