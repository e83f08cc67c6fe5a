from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml


# Policy fallback for phases without both planned dates; not an estimate.
DEFAULT_DURATION_DAYS = 7
# At risk when fewer days remain than this fraction of the project duration.
DEFAULT_RISK_BUFFER_RATIO = 0.2


class ScheduleConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ScheduleConfig:
    default_duration_days: int = DEFAULT_DURATION_DAYS
    risk_buffer_ratio: float = DEFAULT_RISK_BUFFER_RATIO


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Load schedule settings from a YAML file.

    Format:
      default_duration_days: 7
      risk_buffer_ratio: 0.2

    Both keys are optional. Returns the validated overrides only.
    """
    p = Path(path)
    raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ScheduleConfigError("config file must be a mapping of setting -> value")

    out: dict[str, Any] = {}
    for k, v in raw.items():
        if k == "default_duration_days":
            if isinstance(v, bool) or not isinstance(v, int) or v < 1:
                raise ScheduleConfigError("default_duration_days must be an integer >= 1")
            out[k] = v
        elif k == "risk_buffer_ratio":
            if isinstance(v, bool) or not isinstance(v, (int, float)) or v < 0:
                raise ScheduleConfigError("risk_buffer_ratio must be a non-negative number")
            out[k] = float(v)
        else:
            raise ScheduleConfigError(f"unknown setting: {k}")
    return out


def merged_config(overrides: dict[str, Any] | None = None) -> ScheduleConfig:
    """Return the default ScheduleConfig with optional overrides applied."""
    config = ScheduleConfig()
    if overrides:
        config = replace(config, **overrides)
    return config


def load_config(config_file: str | None) -> ScheduleConfig:
    if not config_file:
        return merged_config()
    return merged_config(load_config_file(config_file))
