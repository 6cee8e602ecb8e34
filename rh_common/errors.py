"""Shared error taxonomy for repeat-harness."""

from __future__ import annotations

from typing import Any, Mapping


def _normalize_context_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return normalize_context(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_context_value(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def normalize_context(context: Mapping[str, Any]) -> dict[str, Any]:
    """Return a JSON-friendly copy of an error context mapping."""
    return {key: _normalize_context_value(val) for key, val in context.items()}


class RHError(Exception):
    """Base error type for harness-level failures.

    Anything raised as an RHError aborts the whole session. A failing target
    command is never an RHError; it is recorded as a FAIL run instead.
    """

    def __init__(
        self,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.context = normalize_context(context or {})
        if cause is not None:
            self.__cause__ = cause

    @property
    def error_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.error_type, "message": str(self), "context": self.context}


class ConfigurationError(RHError):
    """Failure due to invalid session configuration."""


class SessionSetupError(RHError):
    """Failure creating the session directory or running the setup command."""


class LogSinkError(RHError):
    """Failure opening or finalizing a per-run log artifact."""


class CommandSpawnError(RHError):
    """The target command could not be started at all."""


def error_to_payload(error: RHError) -> dict[str, Any]:
    """Convert an RHError to a summary/diagnostic payload."""
    return {
        "error_type": error.error_type,
        "error": str(error),
        "error_context": error.context,
    }
