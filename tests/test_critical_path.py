import copy
from datetime import date

import pytest

from phase_schedule.core.config.schedule_config import ScheduleConfig
from phase_schedule.core.errors import PhaseValidationError
from phase_schedule.core.model import Phase
from phase_schedule.core.schedule.critical_path import analyze_schedule


def _dated(pid, days, depends_on=None):
    start = date(2024, 1, 1)
    return Phase(
        id=pid,
        planned_start=start,
        planned_end=date.fromordinal(start.toordinal() + days),
        depends_on=depends_on,
    )


def test_empty_input_is_not_valid():
    result = analyze_schedule([])
    assert result.valid is False
    assert result.project_duration == 0
    assert result.critical_phase_ids == []
    assert result.total_slack == 0
    assert result.timings == []


def test_single_undated_phase_uses_default_duration():
    result = analyze_schedule([Phase(id="A")])
    t = result.timing_for("A")
    assert result.valid is True
    assert result.project_duration == 7
    assert (t.earliest_start, t.earliest_finish) == (0, 7)
    assert (t.latest_start, t.latest_finish) == (0, 7)
    assert t.slack == 0
    assert result.critical_phase_ids == ["A"]


def test_linear_chain_is_fully_critical():
    phases = [_dated("A", 5), _dated("B", 5, "A"), _dated("C", 5, "B")]
    result = analyze_schedule(phases)

    assert result.project_duration == 15
    assert result.critical_phase_ids == ["A", "B", "C"]
    b = result.timing_for("B")
    c = result.timing_for("C")
    assert (b.earliest_start, b.earliest_finish) == (5, 10)
    assert (c.earliest_start, c.earliest_finish) == (10, 15)
    assert result.total_slack == 0


def test_fan_out_leaves_slack_on_short_branch():
    phases = [_dated("A", 10), _dated("B", 5, "A"), _dated("C", 20, "A")]
    result = analyze_schedule(phases)

    assert result.project_duration == 30
    b = result.timing_for("B")
    assert b.earliest_start == 10
    assert b.latest_start == 25
    assert b.slack == 15
    assert not b.is_critical
    assert result.critical_phase_ids == ["A", "C"]
    assert result.total_slack == 15
    assert result.average_slack == 5.0


def test_input_order_does_not_change_result():
    phases = [_dated("C", 20, "A"), _dated("B", 5, "A"), _dated("A", 10)]
    result = analyze_schedule(phases)
    assert result.project_duration == 30
    assert sorted(result.critical_phase_ids) == ["A", "C"]
    assert result.timing_for("B").slack == 15


def test_rerun_is_identical():
    phases = [_dated("A", 10), _dated("B", 5, "A"), _dated(3, 2), Phase(id="D", depends_on=3)]
    first = analyze_schedule(phases)
    assert analyze_schedule(phases) == first
    assert analyze_schedule(copy.deepcopy(phases)) == first


def test_dangling_predecessor_behaves_like_root():
    dangling = analyze_schedule([Phase(id="A", depends_on="missing")])
    root = analyze_schedule([Phase(id="A")])
    assert dangling.timing_for("A").earliest_start == 0
    assert dangling.project_duration == root.project_duration
    assert dangling.critical_phase_ids == root.critical_phase_ids
    assert dangling.timing_for("A").dependencies == ["missing"]


def test_two_phase_cycle_is_contained_and_reported():
    phases = [
        Phase(id="A", depends_on="B"),
        Phase(id="B", depends_on="A"),
        _dated("C", 3),
        _dated("D", 4, "C"),
    ]
    result = analyze_schedule(phases)

    assert result.valid is True
    assert sorted(result.cycles_detected) == ["A", "B"]
    assert any(w.code == "W_CYCLE_DETECTED" for w in result.warnings)
    assert len(result.timings) == 4
    d = result.timing_for("D")
    assert (d.earliest_start, d.earliest_finish) == (3, 7)


def test_self_dependency_is_reported_as_cycle():
    result = analyze_schedule([Phase(id="A", depends_on="A")])
    assert result.cycles_detected == ["A"]
    assert result.timing_for("A").earliest_start == 0


def test_negative_slack_is_surfaced_not_clamped():
    phases = [Phase(id="A", depends_on="B"), Phase(id="B", depends_on="A"), Phase(id="C")]
    result = analyze_schedule(phases)
    negative = [t for t in result.timings if t.slack < 0]
    assert negative
    assert any(w.code == "W_NEGATIVE_SLACK" for w in result.warnings)
    assert result.total_slack == sum(t.slack for t in result.timings)


def test_long_chain_does_not_exhaust_the_stack():
    n = 5000
    phases = [Phase(id=0)] + [Phase(id=i, depends_on=i - 1) for i in range(1, n)]
    result = analyze_schedule(phases)
    assert result.project_duration == 7 * n
    assert len(result.critical_phase_ids) == n


def test_acyclic_slack_is_non_negative_and_sums_exactly():
    phases = [
        _dated("A", 4),
        _dated("B", 9, "A"),
        _dated("C", 2, "A"),
        _dated("D", 6, "C"),
        _dated("E", 1, "D"),
        _dated("F", 3),
        Phase(id="G", depends_on="F"),
    ]
    result = analyze_schedule(phases)
    assert all(t.slack >= 0 for t in result.timings)
    assert result.total_slack == sum(t.slack for t in result.timings)
    assert result.warnings == []
    assert result.project_duration == 13


def test_duplicate_ids_keep_last_phase():
    phases = [_dated("A", 3), _dated("A", 8)]
    result = analyze_schedule(phases)
    assert result.project_duration == 8
    assert len(result.timings) == 1


def test_config_overrides_default_duration():
    result = analyze_schedule([Phase(id="A")], config=ScheduleConfig(default_duration_days=10))
    assert result.project_duration == 10


def test_non_list_input_raises():
    with pytest.raises(PhaseValidationError) as exc:
        analyze_schedule("A,B,C")
    assert exc.value.code == "E_INVALID_INPUT"


def test_non_phase_items_raise():
    with pytest.raises(PhaseValidationError) as exc:
        analyze_schedule([{"id": "A"}])
    assert exc.value.path == "phases[0]"


def test_timings_by_id_indexes_each_phase():
    result = analyze_schedule([_dated("A", 10), _dated("B", 5, "A")])
    assert set(result.timings_by_id) == {"A", "B"}
    assert result.timings_by_id is result.timings_by_id
    assert result.timing_for("B") is result.timings_by_id["B"]
    assert result.timing_for("missing") is None


def test_cycle_warning_serializes_as_analysis_warning():
    result = analyze_schedule([Phase(id="A", depends_on="B"), Phase(id="B", depends_on="A")])
    item = next(w for w in result.warnings if w.code == "W_CYCLE_DETECTED").to_dict()
    assert item["severity"] == "warning"
    assert item["source"] == "analyze"
