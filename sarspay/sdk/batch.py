"""Ordered fan-out for batch calculations.

Calculators hold no mutable state, so employees can be processed on a
thread pool in any order; results are returned in input order.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Optional, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def map_ordered(fn: Callable[[T], R], items: Iterable[T], max_workers: Optional[int] = None) -> list[R]:
    """Apply fn to each item, on max_workers threads when given.

    With max_workers None or 1 the items are processed in the calling
    thread. The first exception raised by fn propagates.
    """
    items = list(items)
    if not max_workers or max_workers <= 1 or len(items) <= 1:
        return [fn(item) for item in items]

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(fn, items))
