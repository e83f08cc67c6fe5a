from __future__ import annotations

from datetime import date, datetime, timedelta

from phase_schedule.core.config.schedule_config import DEFAULT_DURATION_DAYS
from phase_schedule.core.model import Phase


def days_between(end: date, start: date) -> int:
    """Whole days from start to end; negative when end precedes start.

    Two datetimes with matching timezone awareness count completed 24-hour
    days. Any other pairing, including a naive datetime against an aware one,
    is compared by calendar date.
    """
    if _comparable_datetimes(end, start):
        delta = end - start
        # Completed days, truncated toward zero.
        if delta < timedelta(0):
            return -((-delta).days)
        return delta.days
    return (_as_date(end) - _as_date(start)).days


def resolve_duration(phase: Phase, default_days: int = DEFAULT_DURATION_DAYS) -> int:
    if phase.planned_start is not None and phase.planned_end is not None:
        return max(1, days_between(phase.planned_end, phase.planned_start))
    return default_days


def _comparable_datetimes(a: date, b: date) -> bool:
    if not (isinstance(a, datetime) and isinstance(b, datetime)):
        return False
    return (a.utcoffset() is None) == (b.utcoffset() is None)


def _as_date(v: date) -> date:
    return v.date() if isinstance(v, datetime) else v
