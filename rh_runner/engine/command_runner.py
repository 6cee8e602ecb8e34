"""
Executor for a single invocation of the target command.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import time
from typing import BinaryIO, Optional, Sequence

from rh_common.errors import CommandSpawnError
from rh_runner.models.results import RunResult

logger = logging.getLogger(__name__)

_NS_PER_MS = 1_000_000


class CommandRunner:
    """Run the target command once, capturing combined output into a sink.

    A nonzero or signalled exit is a normal outcome and is returned as a FAIL
    result. Only a command that cannot be started raises.
    """

    def __init__(self) -> None:
        self._process: Optional[subprocess.Popen[bytes]] = None

    def run(self, index: int, argv: Sequence[str], sink: BinaryIO) -> RunResult:
        """
        Execute ``argv`` once and classify the outcome.

        Args:
            index: 1-based run number within the session
            argv: Command and arguments
            sink: Binary file receiving stdout and stderr

        Returns:
            RunResult with exit code and duration; ``log_path`` is left unset
            for the log store to decide.
        """
        cmd = list(argv)
        logger.debug("Run %s: executing %s", index, " ".join(cmd))
        sink.flush()

        start_ns = time.monotonic_ns()
        try:
            self._process = subprocess.Popen(cmd, stdout=sink, stderr=subprocess.STDOUT)
        except OSError as exc:
            raise CommandSpawnError(
                f"Cannot start command '{cmd[0]}'",
                context={"command": " ".join(cmd), "run": index},
                cause=exc,
            ) from exc

        proc = self._process
        try:
            returncode = proc.wait()
        except BaseException:
            # Harness teardown while the child is running (e.g. a second Ctrl+C).
            self._kill(proc)
            raise
        finally:
            self._process = None
        end_ns = time.monotonic_ns()

        result = RunResult(
            index=index,
            exit_code=returncode,
            duration_ms=(end_ns - start_ns) // _NS_PER_MS,
        )
        if result.signal_number is not None:
            self._note_signal(sink, result)
        logger.debug(
            "Run %s finished: %s in %s ms", index, result.describe_exit(), result.duration_ms
        )
        return result

    def interrupt_active(self) -> bool:
        """Send SIGTERM to the in-flight command, if any.

        Safe to call from a signal handler: it never waits on the child.
        """
        proc = self._process
        if proc is None or proc.returncode is not None:
            return False
        logger.info("Terminating in-flight command (pid %s)", proc.pid)
        try:
            proc.send_signal(signal.SIGTERM)
        except ProcessLookupError:
            return False
        return True

    @staticmethod
    def _kill(proc: subprocess.Popen[bytes]) -> None:
        if proc.poll() is not None:
            return
        logger.warning("Force killing command (pid %s)", proc.pid)
        proc.kill()
        proc.wait()

    @staticmethod
    def _note_signal(sink: BinaryIO, result: RunResult) -> None:
        # The child wrote through the shared descriptor; append after its output.
        sink.seek(0, os.SEEK_END)
        sink.write(f"\n[harness] command {result.describe_exit()}\n".encode())
        sink.flush()
