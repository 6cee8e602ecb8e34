"""Stable runner API surface."""

from rh_runner.engine.command_runner import CommandRunner
from rh_runner.engine.interrupts import InterruptHandler
from rh_runner.engine.log_store import LogStore
from rh_runner.engine.session import (
    EXIT_HARNESS_ERROR,
    EXIT_OK,
    EXIT_RUN_FAILURES,
    RepeatSession,
    SessionInterrupted,
    SessionOutcome,
    SessionState,
)
from rh_runner.engine.stats import SessionStats, StatsAggregator
from rh_runner.interfaces import SessionReporter
from rh_runner.models.config import RetentionPolicy, SessionConfig
from rh_runner.models.results import RunResult, RunStatus, SessionSummary
from rh_runner.noop_ui import NoOpReporter
from rh_runner.stop_token import StopToken

__all__ = [
    "CommandRunner",
    "InterruptHandler",
    "LogStore",
    "RepeatSession",
    "SessionInterrupted",
    "SessionOutcome",
    "SessionState",
    "SessionStats",
    "StatsAggregator",
    "SessionReporter",
    "NoOpReporter",
    "RetentionPolicy",
    "SessionConfig",
    "RunResult",
    "RunStatus",
    "SessionSummary",
    "StopToken",
    "EXIT_OK",
    "EXIT_RUN_FAILURES",
    "EXIT_HARNESS_ERROR",
]
