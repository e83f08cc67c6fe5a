from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from phase_schedule.core.config.schedule_config import DEFAULT_RISK_BUFFER_RATIO
from phase_schedule.core.model import ScheduleResult, ScheduleRisk
from phase_schedule.core.schedule.duration import days_between


def assess_schedule_risk(
    result: ScheduleResult,
    *,
    today: date,
    project_start: Optional[date] = None,
    project_end: Optional[date] = None,
    risk_buffer_ratio: float = DEFAULT_RISK_BUFFER_RATIO,
) -> ScheduleRisk:
    """Compare the remaining calendar time against the computed duration.

    `today` is passed in so the assessment stays reproducible. Without a
    project end, the planned end is the base date plus the project duration.
    """
    base_date = project_start or today
    planned_end = project_end or base_date + timedelta(days=result.project_duration)
    days_remaining = days_between(planned_end, today)
    return ScheduleRisk(
        base_date=base_date,
        planned_end=planned_end,
        days_remaining=days_remaining,
        is_at_risk=days_remaining < result.project_duration * risk_buffer_ratio,
    )
