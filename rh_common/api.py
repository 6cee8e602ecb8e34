"""Public API surface for rh_common."""

from rh_common.config.env import (
    parse_bool_env,
    parse_float_env,
    parse_path_env,
)
from rh_common.errors import (
    CommandSpawnError,
    ConfigurationError,
    LogSinkError,
    RHError,
    SessionSetupError,
    error_to_payload,
)
from rh_common.logging import configure_logging

__all__ = [
    "configure_logging",
    "parse_bool_env",
    "parse_float_env",
    "parse_path_env",
    "RHError",
    "ConfigurationError",
    "SessionSetupError",
    "LogSinkError",
    "CommandSpawnError",
    "error_to_payload",
]
