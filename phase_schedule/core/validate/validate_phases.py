from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, Optional, cast

from phase_schedule.core.errors import PhaseValidationError
from phase_schedule.core.model import Phase, PhaseDocument, PhaseId


def is_phase_id(v: Any) -> bool:
    if isinstance(v, bool):
        return False
    if isinstance(v, int):
        return True
    return isinstance(v, str) and bool(v.strip())


def parse_date(v: Any) -> Optional[date]:
    """Coerce a YAML/JSON date value. Raises ValueError on unparseable input."""
    if v is None:
        return None
    # datetime is a subclass of date; keep time-of-day when present.
    if isinstance(v, date):
        return v
    if isinstance(v, str):
        s = v.strip()
        if not s:
            return None
        try:
            return date.fromisoformat(s)
        except ValueError:
            return datetime.fromisoformat(s)
    raise ValueError(f"expected an ISO date, got {type(v).__name__}")


def validate_phases(doc: dict[str, Any]) -> tuple[Optional[PhaseDocument], list[PhaseValidationError]]:
    """Validate a loaded phase document.

    Returns (document, errors). Document is None when errors exist.
    Duplicate ids and dangling depends_on references are left to the linter;
    the analyzer has defined behavior for both.
    """

    file = cast(Optional[str], doc.get("__file__"))
    errors: list[PhaseValidationError] = []

    schema_version = doc.get("schema_version")
    if not isinstance(schema_version, str) or not schema_version.strip():
        errors.append(
            PhaseValidationError(
                code="E_REQUIRED_FIELD",
                message="schema_version is required and must be a non-empty string",
                file=file,
                path="schema_version",
            )
        )

    project_start, project_end = _validate_project(doc.get("project"), file, errors)

    phases = doc.get("phases")
    if not isinstance(phases, list):
        errors.append(
            PhaseValidationError(
                code="E_REQUIRED_FIELD",
                message="phases is required and must be an array",
                file=file,
                path="phases",
            )
        )
        return None, _sorted(errors)

    out: list[Phase] = []
    for i, raw in enumerate(phases):
        phase = _validate_phase(raw, f"phases[{i}]", file, errors)
        if phase is not None:
            out.append(phase)

    if errors:
        return None, _sorted(errors)

    return (
        PhaseDocument(
            schema_version=cast(str, schema_version),
            phases=out,
            project_start=project_start,
            project_end=project_end,
        ),
        [],
    )


def _validate_phase(
    raw: Any, phase_path: str, file: Optional[str], errors: list[PhaseValidationError]
) -> Optional[Phase]:
    if not isinstance(raw, dict):
        errors.append(
            PhaseValidationError(
                code="E_INVALID_TYPE",
                message="phase must be an object",
                file=file,
                path=phase_path,
            )
        )
        return None

    pid = raw.get("id")
    if not is_phase_id(pid):
        errors.append(
            PhaseValidationError(
                code="E_REQUIRED_FIELD",
                message="id is required and must be a non-empty string or an integer",
                file=file,
                path=f"{phase_path}.id",
            )
        )
        return None

    name = raw.get("name")
    if name is not None and not isinstance(name, str):
        errors.append(
            PhaseValidationError(
                code="E_INVALID_TYPE",
                message="name must be a string",
                file=file,
                path=f"{phase_path}.name",
            )
        )

    dep = raw.get("depends_on")
    if dep == "":
        dep = None
    if isinstance(dep, list):
        errors.append(
            PhaseValidationError(
                code="E_INVALID_TYPE",
                message="depends_on must name a single phase id (multiple predecessors are not supported)",
                file=file,
                path=f"{phase_path}.depends_on",
            )
        )
        dep = None
    elif dep is not None and not is_phase_id(dep):
        errors.append(
            PhaseValidationError(
                code="E_INVALID_TYPE",
                message="depends_on must be a phase id (string or integer)",
                file=file,
                path=f"{phase_path}.depends_on",
            )
        )
        dep = None

    dates: dict[str, Optional[date]] = {}
    for key in ("planned_start", "planned_end"):
        try:
            dates[key] = parse_date(raw.get(key))
        except ValueError as e:
            errors.append(
                PhaseValidationError(
                    code="E_INVALID_DATE",
                    message=f"{key} is not a valid ISO date: {e}",
                    file=file,
                    path=f"{phase_path}.{key}",
                )
            )
            dates[key] = None

    return Phase(
        id=cast(PhaseId, pid),
        name=cast(Optional[str], name),
        planned_start=dates["planned_start"],
        planned_end=dates["planned_end"],
        depends_on=cast(Optional[PhaseId], dep),
    )


def _validate_project(
    project: Any, file: Optional[str], errors: list[PhaseValidationError]
) -> tuple[Optional[date], Optional[date]]:
    if project is None:
        return None, None
    if not isinstance(project, dict):
        errors.append(
            PhaseValidationError(
                code="E_INVALID_TYPE",
                message="project must be an object",
                file=file,
                path="project",
            )
        )
        return None, None

    bounds: list[Optional[date]] = []
    for key in ("start", "end"):
        try:
            bounds.append(parse_date(project.get(key)))
        except ValueError as e:
            errors.append(
                PhaseValidationError(
                    code="E_INVALID_DATE",
                    message=f"{key} is not a valid ISO date: {e}",
                    file=file,
                    path=f"project.{key}",
                )
            )
            bounds.append(None)
    return bounds[0], bounds[1]


def summarize_phases(document: PhaseDocument) -> str:
    roots = [p.id for p in document.phases if p.depends_on is None]
    dated = sum(1 for p in document.phases if p.planned_start and p.planned_end)
    return (
        f"OK: {len(document.phases)} phases (dated={dated}, "
        f"undated={len(document.phases) - dated})\nRoots: "
        + ", ".join(str(r) for r in roots)
    )


def _sorted(errors: Iterable[PhaseValidationError]) -> list[PhaseValidationError]:
    return sorted(
        list(errors),
        key=lambda e: (
            e.file or "",
            e.path or "",
            e.code,
        ),
    )
