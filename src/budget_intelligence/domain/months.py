import math
from collections.abc import Iterator


def shift_month(month: int, year: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index % 12 + 1, index // 12


def months_back(month: int, year: int, count: int, *, include_start: bool = True) -> Iterator[tuple[int, int]]:
    """Yield ``count`` (month, year) pairs walking backward from ``(month, year)``.

    With ``include_start=False`` the walk starts at the previous month.
    """
    offset = 0 if include_start else 1
    for step in range(max(count, 0)):
        yield shift_month(month, year, -(step + offset))


def months_ahead(month: int, year: int, count: int) -> Iterator[tuple[int, int]]:
    """Yield ``count`` (month, year) pairs following ``(month, year)``."""
    for step in range(1, max(count, 0) + 1):
        yield shift_month(month, year, step)


def round_half_up(value: float) -> int:
    # .5 rounds toward positive infinity, not to even
    return math.floor(value + 0.5)
