"""Runner-level reporting contract."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from rh_runner.models.config import RetentionPolicy, SessionConfig
from rh_runner.models.results import RunResult, SessionSummary


class SessionReporter(Protocol):
    """Presentation hooks invoked by the loop driver."""

    def session_started(self, config: SessionConfig, session_dir: Path) -> None:
        """Announce the command, iteration count and log directory."""

    def run_completed(self, result: RunResult, total: int) -> None:
        """Emit the status line for a finished run (and its log on FAIL)."""

    def session_interrupted(self, signum: int | None) -> None:
        """Emit the one-line interruption notice."""

    def session_finished(
        self,
        summary: SessionSummary,
        session_dir: Path,
        retention: RetentionPolicy,
    ) -> None:
        """Emit the aggregate summary block."""

    def harness_error(self, message: str) -> None:
        """Emit a diagnostic for a harness-fatal error."""
