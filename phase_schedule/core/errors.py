from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Optional


@dataclass(frozen=True)
class ScheduleError(Exception):
    """Error envelope shared by loading, validation, lint and analysis.

    Prefer returning/printing these rather than raising raw exceptions.
    Codes are prefixed by stage: E_ (load/validate), L_ (lint), W_ (analysis
    warnings attached to a ScheduleResult).
    """

    code: str
    message: str
    file: Optional[str] = None
    path: Optional[str] = None

    severity: ClassVar[str] = "error"

    def __str__(self) -> str:
        parts: list[str] = []
        if self.file:
            parts.append(self.file)
        if self.path:
            parts.append(self.path)
        loc = ":".join(parts) if parts else "<phases>"
        return f"{loc}: {self.code}: {self.message}"

    @property
    def source(self) -> str:
        return "lint" if self.code.startswith("L_") else "validate"

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "file": self.file,
            "path": self.path,
            "severity": self.severity,
            "source": self.source,
        }


class PhaseLoadError(ScheduleError):
    @property
    def source(self) -> str:
        return "load"


class PhaseValidationError(ScheduleError):
    pass


class ScheduleWarning(ScheduleError):
    """Annotation attached to a ScheduleResult; never raised by the analyzer."""

    severity: ClassVar[str] = "warning"

    @property
    def source(self) -> str:
        return "analyze"
