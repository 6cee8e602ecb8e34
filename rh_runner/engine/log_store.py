"""Session directory and per-run log artifact management."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Callable

from rh_common.errors import LogSinkError, SessionSetupError
from rh_runner.models.config import RetentionPolicy
from rh_runner.models.results import RunResult, SessionSummary

logger = logging.getLogger(__name__)

SUMMARY_FILENAME = "summary.json"
SETUP_LOG_FILENAME = "setup.log"


def generate_session_stamp(now: datetime | None = None) -> str:
    """Return a sortable, second-resolution timestamp."""
    return (now or datetime.now()).strftime("%Y%m%d-%H%M%S")


def run_log_name(index: int) -> str:
    return f"run_{index}.log"


class LogStore:
    """Own the session directory and enforce the log retention policy."""

    def __init__(
        self,
        output_root: Path,
        *,
        prefix: str,
        retention: RetentionPolicy = RetentionPolicy.FAILURES_ONLY,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.output_root = output_root
        self.prefix = prefix
        self.retention = retention
        self._clock = clock
        self._session_dir: Path | None = None

    @property
    def session_dir(self) -> Path:
        if self._session_dir is None:
            raise SessionSetupError("Session directory requested before begin_session()")
        return self._session_dir

    def begin_session(self) -> Path:
        """Create a fresh, uniquely named session directory."""
        base_name = f"{self.prefix}-{generate_session_stamp(self._clock())}"
        try:
            self.output_root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise SessionSetupError(
                "Cannot create output root",
                context={"output_root": self.output_root},
                cause=exc,
            ) from exc

        candidate = self.output_root / base_name
        suffix = 0
        while True:
            try:
                candidate.mkdir()
                break
            except FileExistsError:
                suffix += 1
                candidate = self.output_root / f"{base_name}-{suffix}"
            except OSError as exc:
                raise SessionSetupError(
                    "Cannot create session directory",
                    context={"session_dir": candidate},
                    cause=exc,
                ) from exc

        self._session_dir = candidate
        logger.debug("Session directory created at %s", candidate)
        return candidate

    def run_log_path(self, index: int) -> Path:
        return self.session_dir / run_log_name(index)

    def open_run_log(self, index: int) -> BinaryIO:
        """Create the log artifact for run ``index`` and return a binary sink."""
        return self._open_sink(self.run_log_path(index), index=index)

    def open_setup_log(self) -> BinaryIO:
        return self._open_sink(self.session_dir / SETUP_LOG_FILENAME, index=0)

    def _open_sink(self, path: Path, *, index: int) -> BinaryIO:
        try:
            return path.open("xb")
        except OSError as exc:
            raise LogSinkError(
                "Cannot open run log",
                context={"path": path, "run": index},
                cause=exc,
            ) from exc

    def finalize(self, result: RunResult) -> RunResult:
        """Apply the retention policy and return the result with its final log path."""
        path = self.run_log_path(result.index)
        if result.passed and self.retention is RetentionPolicy.FAILURES_ONLY:
            self._discard(path, index=result.index)
            return replace(result, log_path=None)
        return replace(result, log_path=path)

    def discard_run_log(self, index: int) -> None:
        self._discard(self.run_log_path(index), index=index)

    def discard_setup_log(self) -> None:
        self._discard(self.session_dir / SETUP_LOG_FILENAME, index=0)

    def _discard(self, path: Path, *, index: int) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise LogSinkError(
                "Cannot remove discarded run log",
                context={"path": path, "run": index},
                cause=exc,
            ) from exc

    def write_summary(self, summary: SessionSummary) -> Path:
        path = self.session_dir / SUMMARY_FILENAME
        try:
            path.write_text(json.dumps(summary.to_dict(), indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise LogSinkError(
                "Cannot write session summary",
                context={"path": path},
                cause=exc,
            ) from exc
        return path

    @staticmethod
    def read_log(path: Path) -> bytes:
        """Return the raw content of a retained artifact."""
        return path.read_bytes()
