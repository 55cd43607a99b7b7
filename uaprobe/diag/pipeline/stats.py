"""Statistics accumulator: cumulative counters plus a segment throughput meter."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import asdict, dataclass

from uaprobe.diag.config import SEGMENT_SIZE

logger = logging.getLogger(__name__)

NANOS_PER_SEC = 1_000_000_000
NO_DATA = "no data"
RULE = "-" * 61


@dataclass
class RunTotals:
    """Cumulative counters; they only ever grow during a run."""

    lines_total: int = 0
    hits_total: int = 0
    lines_ok: int = 0
    hits_ok: int = 0
    lines_matched: int = 0
    hits_matched: int = 0


@dataclass
class SegmentWindow:
    """Counters for the current segment, reset at every segment boundary."""

    start_ns: int
    start_lines: int = 0
    ambiguities: int = 0
    syntax_errors: int = 0

    def reset(self, now_ns: int, lines_total: int) -> None:
        self.start_ns = now_ns
        self.start_lines = lines_total
        self.ambiguities = 0
        self.syntax_errors = 0


def records_per_second(count: int, elapsed_ns: int) -> int | None:
    """Integer throughput, or None when no time has elapsed."""
    if elapsed_ns <= 0:
        return None
    return NANOS_PER_SEC * count // elapsed_ns


def percentage(part: int, whole: int) -> float | None:
    if whole == 0:
        return None
    return 100.0 * part / whole


def _fmt_pct(value: float | None) -> str:
    return NO_DATA if value is None else f"{value:.2f}%"


def _fmt_rate(value: int | None) -> str:
    return NO_DATA if value is None else f"{value}/sec"


@dataclass(frozen=True)
class RunSummary:
    lines_total: int
    hits_total: int
    lines_ok: int
    hits_ok: int
    lines_matched: int
    hits_matched: int
    elapsed_ns: int

    @property
    def throughput(self) -> int | None:
        return records_per_second(self.lines_total, self.elapsed_ns)

    @property
    def lines_ok_pct(self) -> float | None:
        return percentage(self.lines_ok, self.lines_total)

    @property
    def lines_matched_pct(self) -> float | None:
        return percentage(self.lines_matched, self.lines_total)

    @property
    def hits_ok_pct(self) -> float | None:
        return percentage(self.hits_ok, self.hits_total)

    @property
    def hits_matched_pct(self) -> float | None:
        return percentage(self.hits_matched, self.hits_total)

    def report_lines(self) -> list[str]:
        """Human-readable end-of-run report, one entry per log line."""
        seconds = self.elapsed_ns / NANOS_PER_SEC
        rate = _fmt_rate(self.throughput)
        return [
            RULE,
            f"Performance: {self.lines_total} in {seconds:.1f} sec --> {rate}",
            RULE,
            f"Parse results of {self.lines_total} lines",
            f"Parsed without error: {self.lines_ok} (={_fmt_pct(self.lines_ok_pct)})",
            f"Fully matched       : {self.lines_matched} "
            f"(={_fmt_pct(self.lines_matched_pct)})",
            RULE,
            f"Parse results of {self.hits_total} hits",
            f"Parsed without error: {self.hits_ok} (={_fmt_pct(self.hits_ok_pct)})",
            f"Fully matched       : {self.hits_matched} "
            f"(={_fmt_pct(self.hits_matched_pct)})",
            RULE,
        ]


class StatsAccumulator:
    """Folds per-record verdicts into RunTotals and a SegmentWindow.

    Every ``segment_size`` records a progress line is logged (and returned
    from ``record()``) with the segment's ambiguity and syntax-error counts
    and its throughput, then the segment restarts. Cumulative totals are
    never touched by the segment reset.

    Single-owner: not safe to share between threads.
    """

    def __init__(
        self,
        segment_size: int = SEGMENT_SIZE,
        clock: Callable[[], int] = time.perf_counter_ns,
    ) -> None:
        """
        Args:
            segment_size: Records per progress segment.
            clock:        Monotonic nanosecond clock; injectable for tests.
        """
        if segment_size < 1:
            raise ValueError("segment_size must be at least 1")
        self.segment_size = segment_size
        self._clock = clock
        self.start_ns = clock()
        self.totals = RunTotals()
        self.segment = SegmentWindow(start_ns=self.start_ns)

    def record(
        self,
        weight: int,
        syntax_error: bool,
        fully_matched: bool,
        has_ambiguity: bool,
    ) -> str | None:
        """Account for one decoded record.

        Returns the progress line when this record closes a segment, else None.
        """
        t = self.totals
        t.lines_total += 1
        t.hits_total += weight
        if not syntax_error:
            t.lines_ok += 1
            t.hits_ok += weight
        if fully_matched:
            t.lines_matched += 1
            t.hits_matched += weight

        seg = self.segment
        if has_ambiguity:
            seg.ambiguities += 1
        if syntax_error:
            seg.syntax_errors += 1

        if t.lines_total % self.segment_size:
            return None

        now = self._clock()
        speed = records_per_second(t.lines_total - seg.start_lines, now - seg.start_ns)
        line = (
            f"Lines = {t.lines_total} (A={seg.ambiguities} S={seg.syntax_errors})  "
            f"Speed = {_fmt_rate(speed)}."
        )
        logger.info(line)
        seg.reset(now, t.lines_total)
        return line

    def finalize(self) -> RunSummary:
        """Snapshot the cumulative totals with the elapsed run time."""
        elapsed_ns = self._clock() - self.start_ns
        return RunSummary(**asdict(self.totals), elapsed_ns=elapsed_ns)
