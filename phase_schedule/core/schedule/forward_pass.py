from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from phase_schedule.core.model import ForwardTiming, PhaseId, ScheduleGraph


logger = logging.getLogger(__name__)


@dataclass
class ForwardPass:
    timings: dict[PhaseId, ForwardTiming] = field(default_factory=dict)
    project_duration: int = 0
    cycles: list[list[PhaseId]] = field(default_factory=list)


def forward_pass(graph: ScheduleGraph, durations: dict[PhaseId, int]) -> ForwardPass:
    """Earliest start/finish for every phase in the graph.

    The memo table lives on the returned ForwardPass and is only shared by
    the walks of this call.
    """
    result = ForwardPass()
    for p in graph.phases:
        earliest(p.id, graph, durations, result)

    if result.timings:
        result.project_duration = max(t.earliest_finish for t in result.timings.values())
    return result


def earliest(
    phase_id: PhaseId,
    graph: ScheduleGraph,
    durations: dict[PhaseId, int],
    memo: ForwardPass,
) -> ForwardTiming:
    """Memoized descent along the predecessor chain of phase_id.

    With a single predecessor per phase the descent is a chain, walked with an
    explicit list instead of the call stack. A phase reached again while its
    own chain is still open contributes a zero pair and is not memoized.
    """
    cached = memo.timings.get(phase_id)
    if cached is not None:
        return cached

    visiting: set[PhaseId] = set()
    chain: list[PhaseId] = []
    start = 0
    current: Optional[PhaseId] = phase_id
    while current is not None:
        cached = memo.timings.get(current)
        if cached is not None:
            start = cached.earliest_finish
            break
        if current in visiting:
            cycle = chain[chain.index(current):]
            memo.cycles.append(cycle)
            logger.warning(
                "dependency cycle detected: %s",
                " -> ".join(str(c) for c in cycle + [current]),
            )
            start = 0
            break
        visiting.add(current)
        chain.append(current)
        current = graph.predecessor_of(current)

    for pid in reversed(chain):
        timing = ForwardTiming(earliest_start=start, earliest_finish=start + durations[pid])
        memo.timings[pid] = timing
        start = timing.earliest_finish

    return memo.timings[phase_id]
