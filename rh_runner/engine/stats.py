"""Running counters for a session and the summary derived from them."""

from __future__ import annotations

from dataclasses import dataclass, field

from rh_runner.models.results import RunResult, SessionSummary


@dataclass
class SessionStats:
    """Mutable counters owned by the loop driver.

    Invariant: ``passes + fails == len(durations)`` after every accumulate.
    """

    passes: int = 0
    fails: int = 0
    durations: list[int] = field(default_factory=list)
    failed_runs: list[int] = field(default_factory=list)

    @property
    def completed(self) -> int:
        return self.passes + self.fails


def _rate(count: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round(count * 100 / total, 2)


class StatsAggregator:
    """Fold run results into SessionStats and derive a SessionSummary."""

    def __init__(self, stats: SessionStats | None = None) -> None:
        self.stats = stats or SessionStats()

    def accumulate(self, result: RunResult) -> SessionStats:
        stats = self.stats
        if result.passed:
            stats.passes += 1
        else:
            stats.fails += 1
            stats.failed_runs.append(result.index)
        stats.durations.append(result.duration_ms)
        return stats

    def summarize(self) -> SessionSummary:
        stats = self.stats
        total = stats.completed
        if total == 0:
            return SessionSummary()

        durations = stats.durations
        low = high = durations[0]
        elapsed = 0
        for duration in durations:
            if duration < low:
                low = duration
            if duration > high:
                high = duration
            elapsed += duration

        return SessionSummary(
            total=total,
            passes=stats.passes,
            fails=stats.fails,
            pass_rate=_rate(stats.passes, total),
            fail_rate=_rate(stats.fails, total),
            min_ms=low,
            avg_ms=round(elapsed / total),
            max_ms=high,
            failed_runs=tuple(stats.failed_runs),
        )
