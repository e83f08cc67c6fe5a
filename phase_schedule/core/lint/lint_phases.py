from __future__ import annotations

from collections import Counter
from typing import Any, Hashable, Optional

from phase_schedule.core.errors import PhaseValidationError
from phase_schedule.core.schedule.duration import days_between
from phase_schedule.core.validate.validate_phases import is_phase_id, parse_date


# Phase lint rules:
# - L_DUPLICATE_ID: duplicate phase IDs (the analyzer keeps the last one)
# - L_DANGLING_DEPENDENCY: depends_on names an id that is not in the file
# - L_SELF_DEPENDENCY: phase depends on itself
# - L_CYCLE_DETECTED: dependency cycle exists
# - L_MISSING_DATES: phase lacks planned_start/planned_end and gets the default duration
# - L_END_BEFORE_START: planned_end is before planned_start


def lint_phases(doc: dict[str, Any]) -> list[PhaseValidationError]:
    """Lint a phase document.

    Lint runs *in addition to* schema validation. It is allowed to operate on
    partially-invalid inputs (best effort) and flags inputs the analyzer
    tolerates but whose numbers a planner would not trust.
    """

    file = _cast_optional_str(doc.get("__file__"))

    phases = doc.get("phases")
    if not isinstance(phases, list):
        # Let validator handle shape.
        return []

    id_to_index: dict[Hashable, int] = {}
    id_to_raw: dict[Hashable, dict[str, Any]] = {}
    ids: list[Hashable] = []

    for i, raw in enumerate(phases):
        if not isinstance(raw, dict):
            continue
        pid = raw.get("id")
        if not is_phase_id(pid):
            continue
        ids.append(pid)
        id_to_index[pid] = i
        # Last write wins, matching the analyzer.
        id_to_raw[pid] = raw

    errors: list[PhaseValidationError] = []

    # Rule: duplicate IDs
    counts = Counter(ids)
    dupes = {k: v for k, v in counts.items() if v > 1}
    if dupes:
        seen: set[Hashable] = set()
        for i, raw in enumerate(phases):
            if not isinstance(raw, dict):
                continue
            pid = raw.get("id")
            if not is_phase_id(pid) or pid not in dupes:
                continue
            if pid not in seen:
                seen.add(pid)
                errors.append(
                    PhaseValidationError(
                        code="L_DUPLICATE_ID",
                        message=f"duplicate phase id: {pid} (count={dupes[pid]}, last one is used)",
                        file=file,
                        path=f"phases[{i}].id",
                    )
                )

    id_to_dep: dict[Hashable, Hashable] = {}
    for pid, raw in id_to_raw.items():
        dep = raw.get("depends_on")
        if is_phase_id(dep):
            id_to_dep[pid] = dep

    # Rule: dangling and self dependencies
    for pid, dep in id_to_dep.items():
        if dep == pid:
            errors.append(
                PhaseValidationError(
                    code="L_SELF_DEPENDENCY",
                    message=f"phase depends on itself: {pid}",
                    file=file,
                    path=f"phases[{id_to_index[pid]}].depends_on",
                )
            )
        elif dep not in id_to_raw:
            errors.append(
                PhaseValidationError(
                    code="L_DANGLING_DEPENDENCY",
                    message=f"depends_on references unknown id: {dep} (treated as no predecessor)",
                    file=file,
                    path=f"phases[{id_to_index[pid]}].depends_on",
                )
            )

    # Rule: cycle detection
    for pid, msg in _detect_cycles(id_to_dep):
        errors.append(
            PhaseValidationError(
                code="L_CYCLE_DETECTED",
                message=msg,
                file=file,
                path=f"phases[{id_to_index.get(pid, 0)}].depends_on",
            )
        )

    # Rules: planned dates
    for pid, raw in id_to_raw.items():
        idx = id_to_index[pid]
        try:
            start = parse_date(raw.get("planned_start"))
            end = parse_date(raw.get("planned_end"))
        except ValueError:
            # Validator reports unparseable dates.
            continue
        if start is None or end is None:
            errors.append(
                PhaseValidationError(
                    code="L_MISSING_DATES",
                    message="phase has no planned_start/planned_end; default duration applies",
                    file=file,
                    path=f"phases[{idx}]",
                )
            )
        elif days_between(end, start) < 0:
            errors.append(
                PhaseValidationError(
                    code="L_END_BEFORE_START",
                    message="planned_end is before planned_start; duration is floored to 1 day",
                    file=file,
                    path=f"phases[{idx}].planned_end",
                )
            )

    return _sorted(errors)


def _detect_cycles(id_to_dep: dict[Hashable, Hashable]) -> list[tuple[Hashable, str]]:
    # Each phase has at most one predecessor, so every walk is a simple chain.
    WHITE, GRAY, BLACK = 0, 1, 2
    state: dict[Hashable, int] = {pid: WHITE for pid in id_to_dep.keys()}
    out: list[tuple[Hashable, str]] = []

    for start in list(state.keys()):
        if state[start] != WHITE:
            continue
        path: list[Hashable] = []
        cur: Optional[Hashable] = start
        while cur is not None and state.get(cur) == WHITE:
            state[cur] = GRAY
            path.append(cur)
            cur = id_to_dep.get(cur)
        if cur is not None and state.get(cur) == GRAY:
            cycle = path[path.index(cur):] + [cur]
            # A bare self-dependency is reported by its own rule.
            if len(cycle) > 2:
                out.append((cur, "dependency cycle detected: " + " -> ".join(str(c) for c in cycle)))
        for pid in path:
            state[pid] = BLACK

    return out


def _sorted(errors: list[PhaseValidationError]) -> list[PhaseValidationError]:
    return sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))


def _cast_optional_str(v: Any) -> Optional[str]:
    return v if isinstance(v, str) else None
