"""Monthly net-worth history series."""

from datetime import date
from typing import Iterable

from wealth_snapshot.services.currency import finite_or_zero, round_half_up
from wealth_snapshot.services.state import HistoricalDataPoint


def period_key(day: date | None = None) -> str:
    """Month key ("YYYY-MM") a snapshot taken on ``day`` is filed under."""
    return (day or date.today()).strftime("%Y-%m")


def record_snapshot(
    history: Iterable[HistoricalDataPoint], key: str, total: float
) -> tuple[HistoricalDataPoint, ...]:
    """Replace the entry for ``key`` in place, or append it when missing.

    Positions of existing entries never change, so recording the same period
    twice leaves exactly one entry for it.
    """
    value = round_half_up(finite_or_zero(total, allow_negative=True))
    points = list(history)
    for i, point in enumerate(points):
        if point.date == key:
            points[i] = HistoricalDataPoint(date=key, total_value_hkd=value)
            break
    else:
        points.append(HistoricalDataPoint(date=key, total_value_hkd=value))
    return tuple(points)
