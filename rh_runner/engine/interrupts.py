"""SIGINT/SIGTERM handling for the repeat loop."""

from __future__ import annotations

import logging
import signal
from collections.abc import Callable, Iterable
from contextlib import AbstractContextManager
from types import FrameType
from typing import Any

from rh_runner.stop_token import StopToken

logger = logging.getLogger(__name__)

DEFAULT_SIGNALS: tuple[int, ...] = (signal.SIGINT, signal.SIGTERM)


class InterruptHandler(AbstractContextManager["InterruptHandler"]):
    """Trip a StopToken on the first interrupt; terminate on the second.

    The first SIGINT/SIGTERM marks the token stopped and invokes
    ``on_interrupt(signum)``; the loop then refuses to start another run.
    Any further signal while the token is stopped terminates the process
    straight away: SIGINT raises KeyboardInterrupt, other signals raise
    SystemExit with ``128 + signum``.
    """

    def __init__(
        self,
        *,
        token: StopToken,
        on_interrupt: Callable[[int], None] | None = None,
        signals: Iterable[int] = DEFAULT_SIGNALS,
    ) -> None:
        self._token = token
        self._on_interrupt = on_interrupt
        self._signals = tuple(signals)
        self._prev_handlers: dict[int, Any] = {}

    def __enter__(self) -> "InterruptHandler":
        for sig in self._signals:
            self._prev_handlers[sig] = signal.getsignal(sig)
            signal.signal(sig, self._handle_signal)  # type: ignore[arg-type]
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.restore()

    def restore(self) -> None:
        """Restore original signal handlers."""
        for sig, handler in self._prev_handlers.items():
            if handler is None:
                continue
            signal.signal(sig, handler)  # type: ignore[arg-type]
        self._prev_handlers.clear()

    def _handle_signal(self, signum: int, frame: FrameType | None) -> None:
        if self._token.stop_requested:
            self._terminate(signum, frame)
            return
        logger.info("Received %s; stopping after the current run", signal.Signals(signum).name)
        self._token.request_stop(signum)
        if self._on_interrupt is not None:
            self._on_interrupt(signum)

    @staticmethod
    def _terminate(signum: int, frame: FrameType | None) -> None:
        if signum == signal.SIGINT:
            signal.default_int_handler(signum, frame)
        raise SystemExit(128 + signum)
