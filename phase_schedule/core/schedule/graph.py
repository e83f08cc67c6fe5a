from __future__ import annotations

from collections import defaultdict
from typing import Sequence

from phase_schedule.core.model import Phase, PhaseId, ScheduleGraph


def build_graph(phases: Sequence[Phase]) -> ScheduleGraph:
    """Index phases by id and derive the successor view.

    Duplicate ids: the last phase with a given id wins. Dangling depends_on
    references are kept as-is; ScheduleGraph.predecessor_of hides them.
    """
    nodes_by_id: dict[PhaseId, Phase] = {}
    for p in phases:
        nodes_by_id[p.id] = p

    successors: dict[PhaseId, list[PhaseId]] = defaultdict(list)
    for pid, p in nodes_by_id.items():
        if p.depends_on is not None and p.depends_on in nodes_by_id:
            successors[p.depends_on].append(pid)

    named = {p.depends_on for p in nodes_by_id.values() if p.depends_on is not None}
    terminal_ids = [pid for pid in nodes_by_id if pid not in named]

    return ScheduleGraph(
        phases=list(phases),
        nodes_by_id=nodes_by_id,
        successors_by_id=dict(successors),
        terminal_ids=terminal_ids,
    )
