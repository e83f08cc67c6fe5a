from datetime import date

from phase_schedule.core.model import ScheduleResult
from phase_schedule.core.schedule.risk import assess_schedule_risk


def _result(duration):
    return ScheduleResult(
        valid=True,
        project_duration=duration,
        critical_phase_ids=[],
        total_slack=0,
        average_slack=0.0,
    )


def test_planned_end_defaults_to_base_plus_duration():
    risk = assess_schedule_risk(_result(30), today=date(2024, 1, 1))
    assert risk.base_date == date(2024, 1, 1)
    assert risk.planned_end == date(2024, 1, 31)
    assert risk.days_remaining == 30
    assert risk.is_at_risk is False


def test_at_risk_when_buffer_is_short():
    risk = assess_schedule_risk(
        _result(44),
        today=date(2024, 2, 25),
        project_start=date(2024, 1, 1),
        project_end=date(2024, 3, 1),
    )
    assert risk.days_remaining == 5
    assert risk.is_at_risk is True


def test_buffer_ratio_is_configurable():
    kwargs = dict(today=date(2024, 2, 20), project_start=date(2024, 1, 1), project_end=date(2024, 3, 1))
    assert assess_schedule_risk(_result(44), **kwargs).is_at_risk is False
    assert assess_schedule_risk(_result(44), risk_buffer_ratio=0.5, **kwargs).is_at_risk is True


def test_past_deadline_has_negative_days_remaining():
    risk = assess_schedule_risk(_result(10), today=date(2024, 1, 20), project_end=date(2024, 1, 15))
    assert risk.days_remaining == -5
    assert risk.is_at_risk is True
