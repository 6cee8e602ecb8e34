"""Session configuration (canonical definition of one repeat-harness session)."""

from __future__ import annotations

import os
import tempfile
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from rh_common.config.env import parse_bool_env, parse_float_env, parse_path_env

DEFAULT_ITERATIONS = 100
DEFAULT_COMMAND: Tuple[str, ...] = ("make", "test-e2e")
DEFAULT_DELAY_SECONDS = 5.0
DEFAULT_SESSION_PREFIX = "e2e-test"


class RetentionPolicy(str, Enum):
    """Which per-run logs survive once the run is finalized."""

    FAILURES_ONLY = "failures_only"
    ALL = "all"


def _default_output_root() -> Path:
    return Path(tempfile.gettempdir())


class SessionConfig(BaseModel):
    """Immutable description of a repeat-harness session."""

    model_config = ConfigDict(frozen=True)

    iterations: int = Field(default=DEFAULT_ITERATIONS, ge=0, description="Number of runs to execute")
    command: Tuple[str, ...] = Field(default=DEFAULT_COMMAND, description="Argument vector of the command to repeat")
    output_root: Path = Field(default_factory=_default_output_root, description="Parent directory of the session directory")
    session_prefix: str = Field(default=DEFAULT_SESSION_PREFIX, description="Prefix of the timestamped session directory name")
    retention: RetentionPolicy = Field(default=RetentionPolicy.FAILURES_ONLY, description="Log retention policy")
    delay_seconds: float = Field(default=DEFAULT_DELAY_SECONDS, ge=0, description="Pause between consecutive runs")
    setup_command: Optional[Tuple[str, ...]] = Field(default=None, description="Command executed once before the first run")
    stop_file: Optional[Path] = Field(default=None, description="Sentinel file that stops the session when created")
    terminate_on_interrupt: bool = Field(default=True, description="Send SIGTERM to the in-flight command on interrupt")
    summary_on_interrupt: bool = Field(default=False, description="Print a partial summary before exiting on interrupt")
    fail_on_run_failures: bool = Field(default=False, description="Exit nonzero when any run failed")
    write_summary: bool = Field(default=False, description="Persist summary.json in the session directory")

    @field_validator("command", "setup_command")
    @classmethod
    def _validate_argv(cls, value: Optional[Tuple[str, ...]]) -> Optional[Tuple[str, ...]]:
        if value is None:
            return value
        if not value:
            raise ValueError("command must contain at least the program to execute")
        if not value[0].strip():
            raise ValueError("command program must be a non-empty string")
        return value

    @field_validator("session_prefix")
    @classmethod
    def _validate_prefix(cls, value: str) -> str:
        if not value or "/" in value or os.sep in value:
            raise ValueError("session_prefix must be a plain, non-empty name")
        return value

    @model_validator(mode="after")
    def _validate_stop_file(self) -> "SessionConfig":
        if self.stop_file is not None and self.stop_file.is_dir():
            raise ValueError(f"stop_file {self.stop_file} is a directory")
        return self

    def command_line(self) -> str:
        """Render the command for display purposes."""
        return " ".join(self.command)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> "SessionConfig":
        """Build a config from environment defaults and explicit overrides.

        Priority: explicit overrides (ignored when None) > environment > defaults.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        if parse_bool_env(env.get("KEEP_ALL_LOGS")):
            values["retention"] = RetentionPolicy.ALL
        delay = parse_float_env(env.get("RH_DELAY_SECONDS"))
        if delay is not None:
            values["delay_seconds"] = delay
        output_root = parse_path_env(env.get("RH_OUTPUT_ROOT"))
        if output_root is not None:
            values["output_root"] = output_root
        fail_on_failures = parse_bool_env(env.get("RH_FAIL_ON_FAILURES"))
        if fail_on_failures is not None:
            values["fail_on_run_failures"] = fail_on_failures

        values.update({key: val for key, val in overrides.items() if val is not None})
        return cls(**values)
