import pytest

from phase_schedule.core.config.schedule_config import (
    DEFAULT_DURATION_DAYS,
    ScheduleConfigError,
    load_config,
)


def test_defaults_without_file():
    config = load_config(None)
    assert config.default_duration_days == DEFAULT_DURATION_DAYS == 7
    assert config.risk_buffer_ratio == 0.2


def test_file_overrides_defaults():
    config = load_config("examples/schedule-config.yaml")
    assert config.default_duration_days == 10
    assert config.risk_buffer_ratio == 0.25


def test_partial_file_keeps_other_defaults(tmp_path):
    p = tmp_path / "config.yaml"
    p.write_text("risk_buffer_ratio: 0.1\n", encoding="utf-8")
    config = load_config(str(p))
    assert config.default_duration_days == 7
    assert config.risk_buffer_ratio == 0.1


@pytest.mark.parametrize(
    "body",
    ["- 1\n- 2\n", "default_duration_days: 0\n", "risk_buffer_ratio: -1\n", "colour: blue\n"],
)
def test_invalid_file_raises(tmp_path, body):
    p = tmp_path / "config.yaml"
    p.write_text(body, encoding="utf-8")
    with pytest.raises(ScheduleConfigError):
        load_config(str(p))


def test_missing_file_raises_file_not_found():
    with pytest.raises(FileNotFoundError):
        load_config("examples/does-not-exist.yaml")
