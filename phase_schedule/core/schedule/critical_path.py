from __future__ import annotations

import logging
from typing import Any, Optional

from phase_schedule.core.config.schedule_config import ScheduleConfig
from phase_schedule.core.errors import PhaseValidationError, ScheduleWarning
from phase_schedule.core.model import (
    BackwardTiming,
    ForwardTiming,
    Phase,
    PhaseId,
    PhaseTiming,
    ScheduleResult,
)
from phase_schedule.core.schedule.backward_pass import backward_pass
from phase_schedule.core.schedule.duration import resolve_duration
from phase_schedule.core.schedule.forward_pass import forward_pass
from phase_schedule.core.schedule.graph import build_graph


logger = logging.getLogger(__name__)


def analyze_schedule(phases: Any, *, config: Optional[ScheduleConfig] = None) -> ScheduleResult:
    """Run the forward and backward passes and extract the critical path.

    Scheduling anomalies (empty input, cycles, dangling predecessors,
    negative slack) never raise; they shape the result and its warnings.
    Raises PhaseValidationError only when `phases` is not a list of Phase.
    """
    _check_input(phases)
    config = config or ScheduleConfig()

    if not phases:
        return ScheduleResult(
            valid=False,
            project_duration=0,
            critical_phase_ids=[],
            total_slack=0,
            average_slack=0.0,
        )

    graph = build_graph(phases)
    durations = {
        pid: resolve_duration(p, config.default_duration_days)
        for pid, p in graph.nodes_by_id.items()
    }

    fwd = forward_pass(graph, durations)
    bwd = backward_pass(graph, durations, fwd.project_duration)

    warnings: list[ScheduleWarning] = []
    cycle_ids: list[PhaseId] = []
    for cycle in fwd.cycles:
        cycle_ids.extend(pid for pid in cycle if pid not in cycle_ids)
        warnings.append(
            ScheduleWarning(
                code="W_CYCLE_DETECTED",
                message="dependency cycle detected, timings for its phases are not meaningful: "
                + " -> ".join(str(c) for c in cycle + cycle[:1]),
                path=f"phases[id={cycle[0]}].depends_on",
            )
        )

    timings: list[PhaseTiming] = []
    for pid, phase in graph.nodes_by_id.items():
        forward = fwd.timings.get(pid)
        backward = bwd.get(pid)
        if forward is None or backward is None:
            logger.warning("no timing computed for phase %s; defaulting to zero", pid)
            warnings.append(
                ScheduleWarning(
                    code="W_MISSING_TIMING",
                    message="no timing computed for phase; slack defaulted to 0",
                    path=f"phases[id={pid}]",
                )
            )
            forward = forward or ForwardTiming(earliest_start=0, earliest_finish=0)
            backward = backward or BackwardTiming(latest_start=0, latest_finish=0)

        slack = backward.latest_start - forward.earliest_start
        if slack < 0:
            logger.warning("negative slack %s for phase %s", slack, pid)
            warnings.append(
                ScheduleWarning(
                    code="W_NEGATIVE_SLACK",
                    message=f"negative slack ({slack}); schedule is inconsistent for this phase",
                    path=f"phases[id={pid}]",
                )
            )

        timings.append(
            PhaseTiming(
                phase_id=pid,
                duration=durations[pid],
                earliest_start=forward.earliest_start,
                earliest_finish=forward.earliest_finish,
                latest_start=backward.latest_start,
                latest_finish=backward.latest_finish,
                slack=slack,
                is_critical=slack == 0,
                dependencies=[phase.depends_on] if phase.depends_on is not None else [],
            )
        )

    total_slack = sum(t.slack for t in timings)
    logger.debug(
        "analyzed %d phases: duration=%d critical=%d total_slack=%d",
        len(timings),
        fwd.project_duration,
        sum(1 for t in timings if t.is_critical),
        total_slack,
    )
    return ScheduleResult(
        valid=True,
        project_duration=fwd.project_duration,
        critical_phase_ids=[t.phase_id for t in timings if t.is_critical],
        total_slack=total_slack,
        average_slack=total_slack / len(timings),
        timings=timings,
        cycles_detected=cycle_ids,
        warnings=warnings,
    )


def _check_input(phases: Any) -> None:
    if not isinstance(phases, (list, tuple)):
        raise PhaseValidationError(
            code="E_INVALID_INPUT",
            message=f"phases must be a list of Phase records, got {type(phases).__name__}",
            path="phases",
        )
    for i, p in enumerate(phases):
        if not isinstance(p, Phase):
            raise PhaseValidationError(
                code="E_INVALID_INPUT",
                message=f"phases[{i}] must be a Phase, got {type(p).__name__}",
                path=f"phases[{i}]",
            )
