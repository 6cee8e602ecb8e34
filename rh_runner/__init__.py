"""Runner facade for repeat-harness components.

This module re-exports the types needed to drive a session from Python
without going through the CLI.
"""

from rh_runner.api import (
    RepeatSession,
    RetentionPolicy,
    SessionConfig,
    SessionInterrupted,
    SessionSummary,
)

__all__ = [
    "RepeatSession",
    "RetentionPolicy",
    "SessionConfig",
    "SessionInterrupted",
    "SessionSummary",
]
