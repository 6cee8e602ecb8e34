"""Rich-based console reporter used for all operator-facing output."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import IO

from rich.console import Console
from rich.text import Text
from rich.theme import Theme

from rh_runner.engine.log_store import LogStore
from rh_runner.interfaces import SessionReporter
from rh_runner.models.config import RetentionPolicy, SessionConfig
from rh_runner.models.results import RunResult, SessionSummary

THEME = Theme(
    {
        "info": "bold yellow",
        "warning": "yellow",
        "error": "red",
        "success": "green",
    }
)

SUMMARY_HEADER = "================ Summary ================"
SUMMARY_FOOTER = "========================================"


def supports_styled_output(stream: IO[str], environ: dict[str, str] | None = None) -> bool:
    """Return True when ``stream`` is an interactive terminal that accepts color."""
    env = os.environ if environ is None else environ
    if env.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty and isatty())
    except ValueError:
        return False


def build_console(stream: IO[str], *, styled: bool) -> Console:
    return Console(
        file=stream,
        theme=THEME,
        force_terminal=styled,
        color_system="standard" if styled else None,
        highlight=False,
        soft_wrap=True,
        emoji=False,
    )


class ConsoleReporter(SessionReporter):
    """Per-run status lines and the final summary, colored only on a TTY."""

    def __init__(
        self,
        stream: IO[str] | None = None,
        *,
        styled: bool | None = None,
        error_stream: IO[str] | None = None,
    ) -> None:
        out = stream or sys.stdout
        err = error_stream or sys.stderr
        resolved = supports_styled_output(out) if styled is None else styled
        self.styled = resolved
        self.console = build_console(out, styled=resolved)
        self.err_console = build_console(err, styled=resolved and supports_styled_output(err))

    def session_started(self, config: SessionConfig, session_dir: Path) -> None:
        self.console.print(Text(f"Running: {config.command_line()}", style="info"))
        self.console.print(Text(f"Iterations: {config.iterations}", style="info"))
        self.console.print(Text(f"Logs directory: {session_dir}"))
        self.console.print()

    def run_completed(self, result: RunResult, total: int) -> None:
        prefix = f"[{result.index:3d}/{total}] "
        if result.passed:
            self.console.print(
                Text.assemble(prefix, ("PASS", "success"), f" ({result.duration_ms} ms)")
            )
            return

        self.console.print(
            Text.assemble(
                prefix,
                ("FAIL", "error"),
                f" ({result.duration_ms} ms) -> {result.log_path}",
            )
        )
        self.console.print(Text(f"=== Log for run {result.index} ===", style="error"))
        self._echo_log(result.log_path)

    def _echo_log(self, path: Path | None) -> None:
        if path is None:
            return
        try:
            content = LogStore.read_log(path)
        except OSError as exc:
            self.console.print(Text(f"(could not read {path}: {exc})", style="warning"))
            return
        if content and not content.endswith(b"\n"):
            content += b"\n"
        # Raw bytes bypass Rich so carriage returns, tabs and control codes survive.
        stream = self.console.file
        stream.flush()
        buffer = getattr(stream, "buffer", None)
        if buffer is not None:
            buffer.write(content)
            buffer.flush()
        else:
            stream.write(content.decode("utf-8", errors="replace"))
            stream.flush()

    def session_interrupted(self, signum: int | None) -> None:
        if signum is None:
            message = "\n[!] Stop requested. Stopping tests."
        else:
            message = "\n[!] Caught interrupt. Stopping tests."
        self.console.print(Text(message, style="warning"))

    def session_finished(
        self,
        summary: SessionSummary,
        session_dir: Path,
        retention: RetentionPolicy,
    ) -> None:
        kept = "failures kept"
        if retention is RetentionPolicy.ALL:
            kept += "; successes too"
        lines = [
            "",
            SUMMARY_HEADER,
            f"Total:   {summary.total}",
            f"Passed:  {summary.passes} ({summary.pass_rate:.2f}%)",
            f"Failed:  {summary.fails} ({summary.fail_rate:.2f}%)",
            f"Timing:  avg={summary.avg_ms} ms  min={summary.min_ms} ms  max={summary.max_ms} ms",
        ]
        if summary.failed_runs:
            lines.append("Failed runs: " + ", ".join(str(index) for index in summary.failed_runs))
        lines.append(f"Logs:    {session_dir}  ({kept})")
        lines.append(SUMMARY_FOOTER)
        for line in lines:
            self.console.print(Text(line))

    def harness_error(self, message: str) -> None:
        self.err_console.print(Text(f"Error: {message}", style="error"))
