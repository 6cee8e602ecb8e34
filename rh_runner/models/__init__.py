"""Data models for the repeat-harness runner."""

from rh_runner.models.config import RetentionPolicy, SessionConfig
from rh_runner.models.results import RunResult, RunStatus, SessionSummary

__all__ = [
    "RetentionPolicy",
    "SessionConfig",
    "RunResult",
    "RunStatus",
    "SessionSummary",
]
