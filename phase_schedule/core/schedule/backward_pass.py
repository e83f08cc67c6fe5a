from __future__ import annotations

import logging
from typing import Iterator, Optional

from phase_schedule.core.model import BackwardTiming, PhaseId, ScheduleGraph


logger = logging.getLogger(__name__)


def backward_pass(
    graph: ScheduleGraph,
    durations: dict[PhaseId, int],
    project_duration: int,
) -> dict[PhaseId, BackwardTiming]:
    """Latest start/finish for every phase, seeded from project_duration.

    Terminal phases are walked first. Phases not reached from a terminal
    phase (cycle members) are computed afterward so none is left out.
    """
    memo: dict[PhaseId, BackwardTiming] = {}
    for tid in graph.terminal_ids:
        latest(tid, graph, durations, project_duration, memo)

    for p in graph.phases:
        if p.id not in memo:
            logger.debug("phase %s not reached from a terminal phase", p.id)
            latest(p.id, graph, durations, project_duration, memo)

    return memo


def latest(
    phase_id: PhaseId,
    graph: ScheduleGraph,
    durations: dict[PhaseId, int],
    project_duration: int,
    memo: dict[PhaseId, BackwardTiming],
) -> BackwardTiming:
    """Memoized post-order walk over the successors of phase_id.

    latest_finish is the minimum latest_start over successors, or
    project_duration when there are none. A successor reached again while
    still open counts as the degenerate pair (project_duration,
    project_duration) and is not memoized.
    """
    cached = memo.get(phase_id)
    if cached is not None:
        return cached

    visiting: set[PhaseId] = {phase_id}
    finish_bound: dict[PhaseId, Optional[int]] = {phase_id: None}
    stack: list[tuple[PhaseId, Iterator[PhaseId]]] = [
        (phase_id, iter(graph.successors_of(phase_id)))
    ]

    while stack:
        pid, pending = stack[-1]
        descended = False
        for sid in pending:
            done = memo.get(sid)
            if done is not None:
                candidate = done.latest_start
            elif sid in visiting:
                candidate = project_duration
            else:
                visiting.add(sid)
                finish_bound[sid] = None
                stack.append((sid, iter(graph.successors_of(sid))))
                descended = True
                break
            finish_bound[pid] = _min(finish_bound[pid], candidate)
        if descended:
            continue

        stack.pop()
        bound = finish_bound[pid]
        latest_finish = project_duration if bound is None else bound
        memo[pid] = BackwardTiming(
            latest_start=latest_finish - durations[pid],
            latest_finish=latest_finish,
        )
        if stack:
            parent = stack[-1][0]
            finish_bound[parent] = _min(finish_bound[parent], memo[pid].latest_start)

    return memo[phase_id]


def _min(current: Optional[int], candidate: int) -> int:
    return candidate if current is None else min(current, candidate)
