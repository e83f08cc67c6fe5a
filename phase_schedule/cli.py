from __future__ import annotations

import json
import logging
from datetime import date
from typing import Any

import typer

from phase_schedule.core.config.schedule_config import ScheduleConfigError, load_config
from phase_schedule.core.errors import PhaseLoadError, PhaseValidationError, ScheduleError
from phase_schedule.core.io.load_phases import load_phases
from phase_schedule.core.lint.lint_phases import lint_phases
from phase_schedule.core.model import ScheduleResult, ScheduleRisk
from phase_schedule.core.schedule.critical_path import analyze_schedule
from phase_schedule.core.schedule.risk import assess_schedule_risk
from phase_schedule.core.validate.validate_phases import summarize_phases, validate_phases

app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.callback()
def _callback() -> None:
    """Phase schedule CLI."""
    return


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    # basicConfig is a no-op once the root logger has handlers.
    logging.getLogger("phase_schedule").setLevel(level)


@app.command("validate")
def validate(
    path: str = typer.Argument(..., help="Path to a phase file (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Validate a phase file."""
    setup_logging(verbose)
    _check_format(format, "E_VALIDATE_UNKNOWN_FORMAT")

    def _emit_json(ok: bool, *, exit_code: int, errors: list[ScheduleError], summary: dict | None) -> None:
        payload = {
            "tool": "phase-schedule",
            "command": "validate",
            "ok": ok,
            "error_count": len(errors),
            "errors": [e.to_dict() for e in errors],
            "summary": summary,
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True, default=str))
        raise typer.Exit(code=exit_code)

    try:
        doc = load_phases(path)
    except PhaseLoadError as e:
        if format == "json":
            _emit_json(False, exit_code=1, errors=[e], summary=None)
        _print_errors([e])
        raise typer.Exit(code=1)

    document, errors = validate_phases(doc)
    if errors:
        if format == "json":
            _emit_json(False, exit_code=2, errors=list(errors), summary=None)
        _print_errors(list(errors))
        raise typer.Exit(code=2)

    assert document is not None

    if format == "text":
        typer.echo(summarize_phases(document))
        return

    summary = {
        "schema_version": document.schema_version,
        "phase_count": len(document.phases),
        "roots": [p.id for p in document.phases if p.depends_on is None],
    }
    _emit_json(True, exit_code=0, errors=[], summary=summary)


@app.command("lint")
def lint(
    path: str = typer.Argument(..., help="Path to a phase file (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Lint a phase file (rules beyond minimal schema validation)."""
    setup_logging(verbose)
    _check_format(format, "E_LINT_UNKNOWN_FORMAT")

    def _emit_json(ok: bool, errors: list[ScheduleError], exit_code: int) -> None:
        payload = {
            "tool": "phase-schedule",
            "command": "lint",
            "ok": ok,
            "error_count": len(errors),
            "errors": [e.to_dict() for e in errors],
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        raise typer.Exit(code=exit_code)

    try:
        doc = load_phases(path)
    except PhaseLoadError as e:
        if format == "json":
            _emit_json(False, [e], 1)
        _print_errors([e])
        raise typer.Exit(code=1)

    _, validation_errors = validate_phases(doc)
    errors: list[ScheduleError] = [*lint_phases(doc), *validation_errors]

    if format == "text":
        if errors:
            _print_errors(errors)
            raise typer.Exit(code=2)
        typer.echo("OK: lint passed")
        return

    if errors:
        _emit_json(False, errors, 2)
    _emit_json(True, [], 0)


@app.command("analyze")
def analyze(
    path: str = typer.Argument(..., help="Path to a phase file (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    config_file: str | None = typer.Option(
        None,
        "--config",
        help="Optional YAML file overriding default_duration_days / risk_buffer_ratio",
    ),
    today: str | None = typer.Option(
        None,
        "--today",
        help="Reference date for the risk assessment (ISO date, defaults to the current date)",
    ),
) -> None:
    """Compute earliest/latest times, slack and the critical path."""
    setup_logging(verbose)
    _check_format(format, "E_ANALYZE_UNKNOWN_FORMAT")

    try:
        doc = load_phases(path)
    except PhaseLoadError as e:
        _print_errors([e])
        raise typer.Exit(code=1)

    document, errors = validate_phases(doc)
    if errors or document is None:
        _print_errors(list(errors))
        raise typer.Exit(code=2)

    try:
        config = load_config(config_file)
    except FileNotFoundError:
        _print_errors(
            [
                PhaseLoadError(
                    code="E_CONFIG_FILE_NOT_FOUND",
                    message=f"config file not found: {config_file}",
                    file=None,
                    path="config",
                )
            ]
        )
        raise typer.Exit(code=1)
    except ScheduleConfigError as e:
        _print_errors(
            [
                PhaseValidationError(
                    code="E_CONFIG_FILE_INVALID",
                    message=str(e),
                    file=config_file,
                    path="config",
                )
            ]
        )
        raise typer.Exit(code=2)

    try:
        reference = date.fromisoformat(today) if today else date.today()
    except ValueError:
        _print_errors(
            [
                PhaseValidationError(
                    code="E_INVALID_DATE",
                    message=f"--today is not a valid ISO date: {today}",
                    file=None,
                    path="today",
                )
            ]
        )
        raise typer.Exit(code=2)

    result = analyze_schedule(document.phases, config=config)
    risk = None
    if result.valid:
        risk = assess_schedule_risk(
            result,
            today=reference,
            project_start=document.project_start,
            project_end=document.project_end,
            risk_buffer_ratio=config.risk_buffer_ratio,
        )

    if format == "json":
        typer.echo(json.dumps(_result_payload(result, risk), indent=2, sort_keys=True, default=str))
    else:
        _print_result(result, risk)

    for w in result.warnings:
        typer.echo(f"WARN: {w}", err=True)


def _result_payload(result: ScheduleResult, risk: ScheduleRisk | None) -> dict[str, Any]:
    return {
        "tool": "phase-schedule",
        "command": "analyze",
        "valid": result.valid,
        "project_duration": result.project_duration,
        "critical_phase_ids": list(result.critical_phase_ids),
        "total_slack": result.total_slack,
        "average_slack": result.average_slack,
        "cycles_detected": list(result.cycles_detected),
        "phases": [
            {
                "id": t.phase_id,
                "duration": t.duration,
                "earliest_start": t.earliest_start,
                "earliest_finish": t.earliest_finish,
                "latest_start": t.latest_start,
                "latest_finish": t.latest_finish,
                "slack": t.slack,
                "is_critical": t.is_critical,
                "dependencies": list(t.dependencies),
            }
            for t in result.timings
        ],
        "risk": None
        if risk is None
        else {
            "base_date": risk.base_date.isoformat(),
            "planned_end": risk.planned_end.isoformat(),
            "days_remaining": risk.days_remaining,
            "is_at_risk": risk.is_at_risk,
        },
        "warnings": [w.to_dict() for w in result.warnings],
    }


def _print_result(result: ScheduleResult, risk: ScheduleRisk | None) -> None:
    if not result.valid:
        typer.echo("No phases to analyze")
        return

    typer.echo(f"Project duration: {result.project_duration} days")
    typer.echo(
        f"Critical path: {len(result.critical_phase_ids)} phases ("
        + ", ".join(str(pid) for pid in result.critical_phase_ids)
        + ")"
    )
    typer.echo(f"Total slack: {result.total_slack} days (avg {result.average_slack:.1f})")
    if risk is not None:
        status = "AT RISK" if risk.is_at_risk else "on track"
        typer.echo(
            f"Planned end: {risk.planned_end.isoformat()} "
            f"({risk.days_remaining} days remaining, {status})"
        )
    typer.echo("Phases:")
    for t in result.timings:
        flag = " *" if t.is_critical else ""
        typer.echo(
            f"- {t.phase_id}: ES={t.earliest_start} EF={t.earliest_finish} "
            f"LS={t.latest_start} LF={t.latest_finish} slack={t.slack}{flag}"
        )


def _check_format(format: str, code: str) -> None:
    if format not in ("text", "json"):
        err = PhaseValidationError(
            code=code,
            message=f"unknown format: {format} (choose one of: text, json)",
            file=None,
            path="format",
        )
        _print_errors([err])
        raise typer.Exit(code=2)


def _print_errors(errors: list[ScheduleError]) -> None:
    errors_sorted = sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))
    for e in errors_sorted:
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name="phase-schedule")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
