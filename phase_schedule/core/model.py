from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from functools import cached_property
from typing import Optional, Union

from phase_schedule.core.errors import ScheduleWarning


PhaseId = Union[str, int]


@dataclass(frozen=True)
class Phase:
    id: PhaseId
    name: Optional[str] = None
    planned_start: Optional[date] = None
    planned_end: Optional[date] = None
    depends_on: Optional[PhaseId] = None


@dataclass(frozen=True)
class PhaseDocument:
    schema_version: str
    phases: list[Phase]
    project_start: Optional[date] = None
    project_end: Optional[date] = None


@dataclass(frozen=True)
class ScheduleGraph:
    phases: list[Phase]
    nodes_by_id: dict[PhaseId, Phase]
    successors_by_id: dict[PhaseId, list[PhaseId]]
    terminal_ids: list[PhaseId]

    def predecessor_of(self, phase_id: PhaseId) -> Optional[PhaseId]:
        """Return the predecessor id, or None when absent or dangling."""
        phase = self.nodes_by_id.get(phase_id)
        if phase is None or phase.depends_on is None:
            return None
        if phase.depends_on not in self.nodes_by_id:
            return None
        return phase.depends_on

    def successors_of(self, phase_id: PhaseId) -> list[PhaseId]:
        return self.successors_by_id.get(phase_id, [])


@dataclass(frozen=True)
class ForwardTiming:
    earliest_start: int
    earliest_finish: int


@dataclass(frozen=True)
class BackwardTiming:
    latest_start: int
    latest_finish: int


@dataclass(frozen=True)
class PhaseTiming:
    phase_id: PhaseId
    duration: int
    earliest_start: int
    earliest_finish: int
    latest_start: int
    latest_finish: int
    slack: int
    is_critical: bool
    dependencies: list[PhaseId]


@dataclass(frozen=True)
class ScheduleResult:
    valid: bool
    project_duration: int
    critical_phase_ids: list[PhaseId]
    total_slack: int
    average_slack: float
    timings: list[PhaseTiming] = field(default_factory=list)
    cycles_detected: list[PhaseId] = field(default_factory=list)
    warnings: list[ScheduleWarning] = field(default_factory=list)

    @cached_property
    def timings_by_id(self) -> dict[PhaseId, PhaseTiming]:
        return {t.phase_id: t for t in self.timings}

    def timing_for(self, phase_id: PhaseId) -> Optional[PhaseTiming]:
        return self.timings_by_id.get(phase_id)


@dataclass(frozen=True)
class ScheduleRisk:
    base_date: date
    planned_end: date
    days_remaining: int
    is_at_risk: bool
