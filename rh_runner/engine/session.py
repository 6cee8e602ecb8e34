"""Loop driver for a repeat-harness session."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, NoReturn, Optional

from rh_common.errors import RHError, SessionSetupError
from rh_runner.engine.command_runner import CommandRunner
from rh_runner.engine.interrupts import InterruptHandler
from rh_runner.engine.log_store import SETUP_LOG_FILENAME, LogStore
from rh_runner.engine.stats import StatsAggregator
from rh_runner.interfaces import SessionReporter
from rh_runner.models.config import SessionConfig
from rh_runner.models.results import RunResult, SessionSummary
from rh_runner.noop_ui import NoOpReporter
from rh_runner.stop_token import StopToken

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_RUN_FAILURES = 1
EXIT_HARNESS_ERROR = 3

_PAUSE_SLICE_SECONDS = 0.1


class SessionState(str, Enum):
    """Lifecycle of the loop driver."""

    INIT = "init"
    RUNNING = "running"
    DONE = "done"
    INTERRUPTED = "interrupted"


class SessionInterrupted(Exception):
    """Raised when the loop stops at an iteration boundary on request."""

    def __init__(
        self,
        *,
        summary: SessionSummary,
        session_dir: Path,
        exit_code: int,
        signum: Optional[int] = None,
        summary_path: Optional[Path] = None,
    ) -> None:
        super().__init__(f"Session interrupted after {summary.total} run(s)")
        self.summary = summary
        self.session_dir = session_dir
        self.exit_code = exit_code
        self.signum = signum
        self.summary_path = summary_path


@dataclass(frozen=True)
class SessionOutcome:
    """Result of a session that ran to completion."""

    summary: SessionSummary
    session_dir: Path
    summary_path: Optional[Path] = None

    def exit_code(self, fail_on_run_failures: bool = False) -> int:
        if fail_on_run_failures and self.summary.fails:
            return EXIT_RUN_FAILURES
        return EXIT_OK


class RepeatSession:
    """Run the configured command N times, strictly one run at a time."""

    def __init__(
        self,
        config: SessionConfig,
        *,
        reporter: SessionReporter | None = None,
        runner: CommandRunner | None = None,
        log_store: LogStore | None = None,
        stop_token: StopToken | None = None,
        install_signal_handlers: bool = True,
        sleep: Callable[[float], None] = time.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self.reporter = reporter or NoOpReporter()
        self.runner = runner or CommandRunner()
        self.log_store = log_store or LogStore(
            config.output_root,
            prefix=config.session_prefix,
            retention=config.retention,
        )
        self.stop_token = stop_token or StopToken(stop_file=config.stop_file)
        self.state = SessionState.INIT
        self._install_signal_handlers = install_signal_handlers
        self._sleep = sleep
        self._monotonic = monotonic
        self._terminated_in_flight = False

    def run(self) -> SessionOutcome:
        """Execute the session; raises SessionInterrupted or RHError."""
        if not self._install_signal_handlers:
            return self._run()
        handler = InterruptHandler(token=self.stop_token, on_interrupt=self._on_interrupt)
        with handler:
            return self._run()

    def _run(self) -> SessionOutcome:
        session_dir = self.log_store.begin_session()
        self.reporter.session_started(self.config, session_dir)
        if self.config.setup_command:
            self._run_setup()

        aggregator = StatsAggregator()
        total = self.config.iterations
        self.state = SessionState.RUNNING
        for index in range(1, total + 1):
            if self.stop_token.should_stop():
                self._interrupt(aggregator)
            result = self._execute(index)
            if result is None:
                self._interrupt(aggregator)
            aggregator.accumulate(result)
            self.reporter.run_completed(result, total)
            if index < total:
                self._pause()

        if self.stop_token.should_stop():
            self._interrupt(aggregator)

        self.state = SessionState.DONE
        summary = aggregator.summarize()
        summary_path = None
        if self.config.write_summary:
            summary_path = self.log_store.write_summary(summary)
        self.reporter.session_finished(summary, session_dir, self.config.retention)
        return SessionOutcome(summary=summary, session_dir=session_dir, summary_path=summary_path)

    def _execute(self, index: int) -> Optional[RunResult]:
        """Run once; None when the harness itself terminated the command."""
        self._terminated_in_flight = False
        with self.log_store.open_run_log(index) as sink:
            result = self.runner.run(index, self.config.command, sink)
        if self._terminated_in_flight:
            logger.info("Run %s was terminated by the interrupt; not recorded", index)
            self.log_store.discard_run_log(index)
            return None
        return self.log_store.finalize(result)

    def _run_setup(self) -> None:
        argv = self.config.setup_command or ()
        logger.info("Running setup command: %s", " ".join(argv))
        with self.log_store.open_setup_log() as sink:
            try:
                result = self.runner.run(0, argv, sink)
            except RHError as exc:
                raise SessionSetupError(
                    "Setup command could not be started",
                    context={"command": " ".join(argv)},
                    cause=exc,
                ) from exc
        if not result.passed:
            raise SessionSetupError(
                f"Setup command failed ({result.describe_exit()})",
                context={
                    "command": " ".join(argv),
                    "log": self.log_store.session_dir / SETUP_LOG_FILENAME,
                },
            )
        self.log_store.discard_setup_log()

    def _pause(self) -> None:
        deadline = self._monotonic() + self.config.delay_seconds
        while not self.stop_token.should_stop():
            remaining = deadline - self._monotonic()
            if remaining <= 0:
                return
            self._sleep(min(remaining, _PAUSE_SLICE_SECONDS))

    def _on_interrupt(self, signum: int) -> None:
        # Runs inside the signal handler: no output here, the notice is
        # emitted at the next iteration boundary.
        if self.config.terminate_on_interrupt and self.runner.interrupt_active():
            self._terminated_in_flight = True

    def _interrupt(self, aggregator: StatsAggregator) -> NoReturn:
        self.state = SessionState.INTERRUPTED
        self.reporter.session_interrupted(self.stop_token.signum)
        summary = aggregator.summarize()
        summary_path = None
        if self.config.write_summary:
            summary_path = self.log_store.write_summary(summary)
        logger.info("Session interrupted after %s completed run(s)", summary.total)
        raise SessionInterrupted(
            summary=summary,
            session_dir=self.log_store.session_dir,
            exit_code=self.stop_token.exit_code,
            signum=self.stop_token.signum,
            summary_path=summary_path,
        )
