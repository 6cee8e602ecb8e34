"""No-op implementation of SessionReporter for headless execution."""

from __future__ import annotations

from pathlib import Path

from rh_runner.interfaces import SessionReporter
from rh_runner.models.config import RetentionPolicy, SessionConfig
from rh_runner.models.results import RunResult, SessionSummary


class NoOpReporter(SessionReporter):
    """Reporter that discards all output."""

    def session_started(self, config: SessionConfig, session_dir: Path) -> None:
        pass

    def run_completed(self, result: RunResult, total: int) -> None:
        pass

    def session_interrupted(self, signum: int | None) -> None:
        pass

    def session_finished(
        self,
        summary: SessionSummary,
        session_dir: Path,
        retention: RetentionPolicy,
    ) -> None:
        pass

    def harness_error(self, message: str) -> None:
        pass
