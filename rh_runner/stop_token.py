"""Stop token helpers for graceful interruption and file-based cancellation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_INTERRUPT_EXIT_CODE = 130


class StopToken:
    """
    Lightweight cooperative stop controller.

    It can be tripped explicitly (the interrupt handler does so on SIGINT/SIGTERM)
    or by the presence of a stop file on disk. The session loop calls
    `should_stop()` at every iteration boundary and stops starting new runs
    when True.
    """

    def __init__(
        self,
        stop_file: Optional[Path] = None,
        on_stop: Optional[Callable[[], None]] = None,
    ) -> None:
        self.stop_file = stop_file
        self._on_stop = on_stop
        self._stop_requested = False
        self._signum: Optional[int] = None

    @property
    def stop_requested(self) -> bool:
        """Whether a stop was already recorded; never polls the stop file."""
        return self._stop_requested

    @property
    def signum(self) -> Optional[int]:
        """Signal that tripped the token, if any."""
        return self._signum

    @property
    def exit_code(self) -> int:
        """Conventional exit status for a process stopped by this token."""
        if self._signum is None:
            return DEFAULT_INTERRUPT_EXIT_CODE
        return 128 + self._signum

    def request_stop(self, signum: Optional[int] = None) -> None:
        """Mark the token as stopped and trigger callback once."""
        if self._stop_requested:
            return
        self._stop_requested = True
        self._signum = signum
        self._notify()

    def should_stop(self) -> bool:
        """Return True when stop was requested or the stop file exists."""
        if self._stop_requested:
            return True
        if self.stop_file and self.stop_file.exists():
            logger.info("Stop file %s detected", self.stop_file)
            self._stop_requested = True
            self._notify()
            return True
        return False

    def _notify(self) -> None:
        if self._on_stop is None:
            return
        try:
            self._on_stop()
        except Exception:
            logger.debug("Stop callback failed", exc_info=True)
