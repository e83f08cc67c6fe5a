from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from phase_schedule.core.errors import PhaseLoadError


# Keys the analyzer reads from each phase record.
PHASE_KEYS: tuple[str, ...] = ("id", "name", "planned_start", "planned_end", "depends_on")

# Column names used by phase store exports, mapped to the file format.
PHASE_KEY_ALIASES: dict[str, str] = {
    "depends_on_phase_id": "depends_on",
    "start_date": "planned_start",
    "end_date": "planned_end",
}


def load_phases(path: str) -> dict[str, Any]:
    """Load a YAML/JSON phase file.

    Returns a dict with keys: schema_version, phases, optional project.
    Phase records are reduced to PHASE_KEYS (budget/cost columns and other
    extras are dropped) and export aliases are renamed. The project window
    may be given as a `project: {start, end}` block or as top-level
    `project_start`/`project_end`. Values are not coerced; the validator owns
    shape checking.
    """

    p = Path(path)
    if not p.exists():
        raise PhaseLoadError(code="E_FILE_NOT_FOUND", message="file does not exist", file=str(p))

    data = _parse(p)
    if not isinstance(data, dict):
        raise PhaseLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="top-level document must be a mapping/object",
            file=str(p),
        )

    phases = data.get("phases")
    doc: dict[str, Any] = {
        "schema_version": data.get("schema_version"),
        "phases": [_normalize_phase(raw) for raw in phases] if isinstance(phases, list) else phases,
        "__file__": str(p),
    }

    project = _normalize_project(data)
    if project is not None:
        doc["project"] = project
    return doc


def _parse(p: Path) -> Any:
    suffix = p.suffix.lower()
    if suffix not in {".yaml", ".yml", ".json"}:
        raise PhaseLoadError(
            code="E_UNSUPPORTED_FORMAT",
            message="supported formats are .yaml/.yml and .json",
            file=str(p),
        )
    try:
        raw_text = p.read_text(encoding="utf-8")
    except OSError as e:  # pragma: no cover
        raise PhaseLoadError(code="E_FILE_READ", message=str(e), file=str(p)) from e

    if suffix == ".json":
        try:
            return json.loads(raw_text)
        except json.JSONDecodeError as e:
            raise PhaseLoadError(code="E_JSON_PARSE", message=str(e), file=str(p)) from e
    try:
        return yaml.safe_load(raw_text)
    except yaml.YAMLError as e:
        raise PhaseLoadError(code="E_YAML_PARSE", message=str(e), file=str(p)) from e


def _normalize_phase(raw: Any) -> Any:
    # Non-mapping entries pass through so the validator can report them by index.
    if not isinstance(raw, dict):
        return raw
    out: dict[str, Any] = {}
    for key, value in raw.items():
        key = PHASE_KEY_ALIASES.get(key, key)
        if key in PHASE_KEYS and key not in out:
            out[key] = value
    # A canonical key wins over its alias regardless of order.
    for key in PHASE_KEYS:
        if key in raw:
            out[key] = raw[key]
    return out


def _normalize_project(data: dict[str, Any]) -> Any:
    project = data.get("project")
    if project is None and ("project_start" in data or "project_end" in data):
        return {"start": data.get("project_start"), "end": data.get("project_end")}
    if isinstance(project, dict):
        return {"start": project.get("start"), "end": project.get("end")}
    # None when absent; anything else is left for the validator to reject.
    return project
