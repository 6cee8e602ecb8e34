"""Per-run and per-session result types."""

from __future__ import annotations

import signal
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Tuple


class RunStatus(str, Enum):
    """Classification of a single run."""

    PASS = "PASS"
    FAIL = "FAIL"


@dataclass(frozen=True)
class RunResult:
    """Immutable snapshot of one completed run.

    ``exit_code`` follows the subprocess convention: a negative value is the
    distinguished marker for termination by the signal ``-exit_code``.
    """

    index: int
    exit_code: int
    duration_ms: int
    log_path: Optional[Path] = None

    @property
    def status(self) -> RunStatus:
        return RunStatus.PASS if self.exit_code == 0 else RunStatus.FAIL

    @property
    def passed(self) -> bool:
        return self.status is RunStatus.PASS

    @property
    def signal_number(self) -> Optional[int]:
        return -self.exit_code if self.exit_code < 0 else None

    def describe_exit(self) -> str:
        signum = self.signal_number
        if signum is None:
            return f"exit status {self.exit_code}"
        try:
            name = signal.Signals(signum).name
        except ValueError:
            name = f"signal {signum}"
        return f"terminated by {name}"


@dataclass(frozen=True)
class SessionSummary:
    """Aggregate statistics derived once the loop ends."""

    total: int = 0
    passes: int = 0
    fails: int = 0
    pass_rate: float = 0.0
    fail_rate: float = 0.0
    min_ms: int = 0
    avg_ms: int = 0
    max_ms: int = 0
    failed_runs: Tuple[int, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["failed_runs"] = list(self.failed_runs)
        return payload
