"""Tests for the rich console reporter."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from rh_runner.models.config import RetentionPolicy, SessionConfig
from rh_runner.models.results import RunResult, SessionSummary
from rh_ui.ui.console import (
    SUMMARY_FOOTER,
    SUMMARY_HEADER,
    ConsoleReporter,
    supports_styled_output,
)


pytestmark = pytest.mark.unit_ui


class _TTYStream(io.StringIO):
    def isatty(self) -> bool:
        return True


def _reporter(styled: bool = False) -> tuple[ConsoleReporter, io.StringIO, io.StringIO]:
    out = io.StringIO()
    err = io.StringIO()
    return ConsoleReporter(out, styled=styled, error_stream=err), out, err


def test_session_start_lines(tmp_path: Path) -> None:
    reporter, out, _ = _reporter()
    config = SessionConfig(iterations=7, command=("sudo", "make", "test-e2e"))

    reporter.session_started(config, tmp_path)

    assert out.getvalue().splitlines() == [
        "Running: sudo make test-e2e",
        "Iterations: 7",
        f"Logs directory: {tmp_path}",
        "",
    ]


def test_pass_line_format() -> None:
    reporter, out, _ = _reporter()

    reporter.run_completed(RunResult(index=1, exit_code=0, duration_ms=100), total=3)

    assert out.getvalue() == "[  1/3] PASS (100 ms)\n"


def test_fail_line_echoes_retained_log(tmp_path: Path) -> None:
    log = tmp_path / "run_12.log"
    log.write_bytes(b"boom\nsecond line")
    reporter, out, _ = _reporter()

    reporter.run_completed(
        RunResult(index=12, exit_code=2, duration_ms=140, log_path=log), total=100
    )

    assert out.getvalue().splitlines() == [
        f"[ 12/100] FAIL (140 ms) -> {log}",
        "=== Log for run 12 ===",
        "boom",
        "second line",
    ]


def test_fail_log_with_invalid_utf8_is_replaced(tmp_path: Path) -> None:
    log = tmp_path / "run_1.log"
    log.write_bytes(b"bad \xff byte\n")
    reporter, out, _ = _reporter()

    reporter.run_completed(RunResult(index=1, exit_code=1, duration_ms=5, log_path=log), total=1)

    assert "bad � byte" in out.getvalue()


def test_fail_log_keeps_control_characters(tmp_path: Path) -> None:
    log = tmp_path / "run_3.log"
    log.write_bytes(b"progress 10%\rprogress 100%\r\nbell\x07 tab\there\n")
    reporter, out, _ = _reporter()

    reporter.run_completed(RunResult(index=3, exit_code=1, duration_ms=5, log_path=log), total=3)

    assert out.getvalue().endswith(
        "=== Log for run 3 ===\n"
        "progress 10%\rprogress 100%\r\nbell\x07 tab\there\n"
    )


def test_fail_log_bytes_go_to_binary_buffer_unchanged(tmp_path: Path) -> None:
    payload = b"\x1b[31mred\x1b[0m\r\n\xff raw\tbyte"
    log = tmp_path / "run_1.log"
    log.write_bytes(payload)
    raw = io.BytesIO()
    out = io.TextIOWrapper(raw, encoding="utf-8", newline="")
    reporter = ConsoleReporter(out, styled=False, error_stream=io.StringIO())

    reporter.run_completed(RunResult(index=1, exit_code=1, duration_ms=5, log_path=log), total=1)
    out.flush()

    header = b"=== Log for run 1 ===\n"
    assert header in raw.getvalue()
    assert raw.getvalue().split(header, 1)[1] == payload + b"\n"


def test_log_content_is_not_interpreted_as_markup(tmp_path: Path) -> None:
    log = tmp_path / "run_1.log"
    log.write_bytes(b"[bold]not markup[/bold] [harness] note\n")
    reporter, out, _ = _reporter()

    reporter.run_completed(RunResult(index=1, exit_code=1, duration_ms=5, log_path=log), total=1)

    assert "[bold]not markup[/bold] [harness] note" in out.getvalue()


def test_interrupt_notice() -> None:
    reporter, out, _ = _reporter()

    reporter.session_interrupted(2)
    reporter.session_interrupted(None)

    assert out.getvalue() == (
        "\n[!] Caught interrupt. Stopping tests.\n"
        "\n[!] Stop requested. Stopping tests.\n"
    )


def test_summary_block(tmp_path: Path) -> None:
    reporter, out, _ = _reporter()
    summary = SessionSummary(
        total=3,
        passes=2,
        fails=1,
        pass_rate=66.67,
        fail_rate=33.33,
        min_ms=100,
        avg_ms=120,
        max_ms=140,
        failed_runs=(2,),
    )

    reporter.session_finished(summary, tmp_path, RetentionPolicy.FAILURES_ONLY)

    assert out.getvalue().splitlines() == [
        "",
        SUMMARY_HEADER,
        "Total:   3",
        "Passed:  2 (66.67%)",
        "Failed:  1 (33.33%)",
        "Timing:  avg=120 ms  min=100 ms  max=140 ms",
        "Failed runs: 2",
        f"Logs:    {tmp_path}  (failures kept)",
        SUMMARY_FOOTER,
    ]


def test_empty_summary_uses_zeroes(tmp_path: Path) -> None:
    reporter, out, _ = _reporter()

    reporter.session_finished(SessionSummary(), tmp_path, RetentionPolicy.ALL)

    text = out.getvalue()
    assert "Passed:  0 (0.00%)" in text
    assert "Timing:  avg=0 ms  min=0 ms  max=0 ms" in text
    assert "Failed runs" not in text
    assert "(failures kept; successes too)" in text


def test_harness_error_goes_to_error_stream() -> None:
    reporter, out, err = _reporter()

    reporter.harness_error("Cannot create output root")

    assert out.getvalue() == ""
    assert err.getvalue() == "Error: Cannot create output root\n"


class TestStyling:
    def test_unstyled_output_has_no_escape_codes(self) -> None:
        reporter, out, _ = _reporter(styled=False)

        reporter.run_completed(RunResult(index=1, exit_code=1, duration_ms=1), total=1)

        assert "\x1b[" not in out.getvalue()

    def test_styled_output_is_colored(self) -> None:
        reporter, out, _ = _reporter(styled=True)

        reporter.run_completed(RunResult(index=1, exit_code=0, duration_ms=1), total=1)

        assert "\x1b[" in out.getvalue()
        assert "PASS" in out.getvalue()

    def test_plain_stream_is_not_styled(self) -> None:
        assert supports_styled_output(io.StringIO(), environ={}) is False

    def test_terminal_stream_is_styled(self) -> None:
        assert supports_styled_output(_TTYStream(), environ={}) is True

    def test_no_color_disables_styling(self) -> None:
        assert supports_styled_output(_TTYStream(), environ={"NO_COLOR": "1"}) is False

    def test_reporter_autodetects_from_stream(self) -> None:
        assert ConsoleReporter(io.StringIO(), error_stream=io.StringIO()).styled is False
