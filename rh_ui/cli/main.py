"""
Command-line interface for repeat-harness.

Repeats a test command N times to surface flaky failures, keeping the logs of
failed runs and printing pass/fail statistics at the end.
"""

from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Any, List, Optional

import typer
from pydantic import ValidationError

from rh_common.api import ConfigurationError, RHError, configure_logging, error_to_payload
from rh_runner.api import (
    EXIT_HARNESS_ERROR,
    RepeatSession,
    RetentionPolicy,
    SessionConfig,
    SessionInterrupted,
)
from rh_ui.ui.console import ConsoleReporter

logger = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130

app = typer.Typer(
    help="Run a test command repeatedly and report its pass/fail statistics.",
    add_completion=False,
)


def _format_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "config"
        problems.append(f"{location}: {error.get('msg')}")
    return "Invalid configuration: " + "; ".join(problems)


def _build_config(**overrides: Any) -> SessionConfig:
    try:
        return SessionConfig.from_env(**overrides)
    except ValidationError as exc:
        raise ConfigurationError(_format_validation_error(exc), cause=exc) from exc
    except ValueError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}", cause=exc) from exc


def _normalize_command(command: Optional[List[str]]) -> Optional[tuple[str, ...]]:
    if not command:
        return None
    if command[0] == "--":
        command = command[1:]
    return tuple(command) or None


@app.command(
    context_settings={
        "allow_interspersed_args": False,
        "ignore_unknown_options": True,
    }
)
def run(
    iterations: Optional[int] = typer.Argument(
        None,
        min=0,
        help="Number of runs (default 100).",
        show_default=False,
    ),
    command: Optional[List[str]] = typer.Argument(
        None,
        help="Command and arguments to repeat (default: make test-e2e).",
        show_default=False,
    ),
    delay: Optional[float] = typer.Option(
        None,
        "--delay",
        "-d",
        min=0,
        help="Seconds to wait between runs (default 5; env RH_DELAY_SECONDS).",
    ),
    keep_all_logs: bool = typer.Option(
        False,
        "--keep-all-logs",
        help="Keep logs of passing runs too (env KEEP_ALL_LOGS=1).",
    ),
    output_root: Optional[Path] = typer.Option(
        None,
        "--output-root",
        "-o",
        help="Directory in which the session directory is created (env RH_OUTPUT_ROOT).",
    ),
    prefix: Optional[str] = typer.Option(
        None,
        "--prefix",
        help="Name prefix of the timestamped session directory.",
    ),
    setup: Optional[str] = typer.Option(
        None,
        "--setup",
        help="Shell-quoted command executed once before the first run; failure aborts.",
    ),
    stop_file: Optional[Path] = typer.Option(
        None,
        "--stop-file",
        help="Path to a stop sentinel file; when created, no further run is started.",
    ),
    terminate_on_interrupt: Optional[bool] = typer.Option(
        None,
        "--terminate-on-interrupt/--no-terminate-on-interrupt",
        help="Send SIGTERM to the running command on Ctrl+C (default on).",
        show_default=False,
    ),
    summary_on_interrupt: bool = typer.Option(
        False,
        "--summary-on-interrupt",
        help="Print the summary of completed runs before exiting on Ctrl+C.",
    ),
    fail_on_failures: Optional[bool] = typer.Option(
        None,
        "--fail-on-failures/--no-fail-on-failures",
        help="Exit with status 1 when any run failed (env RH_FAIL_ON_FAILURES).",
        show_default=False,
    ),
    write_summary: bool = typer.Option(
        False,
        "--write-summary",
        help="Write summary.json into the session directory.",
    ),
    color: Optional[bool] = typer.Option(
        None,
        "--color/--no-color",
        help="Force colored output on or off (default: only on a terminal).",
        show_default=False,
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable verbose debug logging on stderr.",
    ),
) -> None:
    """Repeat COMMAND ITERATIONS times and report reliability statistics."""
    configure_logging(debug=debug, force=True)
    reporter = ConsoleReporter(styled=color)

    try:
        config = _build_config(
            iterations=iterations,
            command=_normalize_command(command),
            delay_seconds=delay,
            retention=RetentionPolicy.ALL if keep_all_logs else None,
            output_root=output_root,
            session_prefix=prefix,
            setup_command=tuple(shlex.split(setup)) if setup else None,
            stop_file=stop_file,
            terminate_on_interrupt=terminate_on_interrupt,
            summary_on_interrupt=summary_on_interrupt or None,
            fail_on_run_failures=fail_on_failures,
            write_summary=write_summary or None,
        )
    except ConfigurationError as exc:
        reporter.harness_error(str(exc))
        raise typer.Exit(EXIT_HARNESS_ERROR)
    except ValueError as exc:
        # shlex rejects unbalanced quotes in --setup
        reporter.harness_error(f"Invalid --setup command: {exc}")
        raise typer.Exit(EXIT_HARNESS_ERROR)

    session = RepeatSession(config, reporter=reporter)
    try:
        outcome = session.run()
    except SessionInterrupted as exc:
        if config.summary_on_interrupt:
            reporter.session_finished(exc.summary, exc.session_dir, config.retention)
        raise typer.Exit(exc.exit_code)
    except KeyboardInterrupt:
        raise typer.Exit(EXIT_INTERRUPTED)
    except RHError as exc:
        logger.debug("Harness error: %s", error_to_payload(exc))
        reporter.harness_error(f"{exc} ({exc.__cause__})" if exc.__cause__ else str(exc))
        raise typer.Exit(EXIT_HARNESS_ERROR)

    raise typer.Exit(outcome.exit_code(config.fail_on_run_failures))


def main() -> None:
    """Console script entrypoint (Typer app)."""
    app()


if __name__ == "__main__":
    main()
