"""Tests for uaprobe.diag.pipeline.stats — cumulative counters and segment meter."""

import logging

import pytest

from uaprobe.diag.pipeline.stats import (
    NO_DATA,
    RunSummary,
    StatsAccumulator,
    percentage,
    records_per_second,
)


# ── helpers ──────────────────────────────────────────────────────────────────


class TestHelpers:
    def test_records_per_second(self):
        assert records_per_second(1000, 1_000_000_000) == 1000
        assert records_per_second(1000, 500_000_000) == 2000

    def test_records_per_second_zero_elapsed(self):
        assert records_per_second(10, 0) is None

    def test_percentage(self):
        assert percentage(1, 4) == pytest.approx(25.0)
        assert percentage(0, 0) is None


# ── cumulative counters ──────────────────────────────────────────────────────


class TestRecord:
    def test_clean_match(self, fake_clock):
        acc = StatsAccumulator(clock=fake_clock)
        acc.record(1, syntax_error=False, fully_matched=True, has_ambiguity=False)
        t = acc.totals
        assert (t.lines_total, t.hits_total) == (1, 1)
        assert (t.lines_ok, t.hits_ok) == (1, 1)
        assert (t.lines_matched, t.hits_matched) == (1, 1)

    def test_weight_counts_hits_not_lines(self, fake_clock):
        acc = StatsAccumulator(clock=fake_clock)
        acc.record(5, syntax_error=False, fully_matched=False, has_ambiguity=False)
        assert acc.totals.lines_total == 1
        assert acc.totals.hits_total == 5
        assert acc.totals.hits_ok == 5
        assert acc.totals.hits_matched == 0

    def test_syntax_error_not_ok(self, fake_clock):
        acc = StatsAccumulator(clock=fake_clock)
        acc.record(2, syntax_error=True, fully_matched=False, has_ambiguity=False)
        assert acc.totals.lines_ok == 0
        assert acc.totals.hits_ok == 0
        assert acc.segment.syntax_errors == 1

    def test_matched_independent_of_syntax_error(self, fake_clock):
        acc = StatsAccumulator(clock=fake_clock)
        acc.record(1, syntax_error=True, fully_matched=True, has_ambiguity=False)
        assert acc.totals.lines_ok == 0
        assert acc.totals.lines_matched == 1  # may exceed lines_ok

    def test_ambiguity_counted_in_segment(self, fake_clock):
        acc = StatsAccumulator(clock=fake_clock)
        acc.record(1, syntax_error=False, fully_matched=True, has_ambiguity=True)
        assert acc.segment.ambiguities == 1

    def test_ok_never_exceeds_total(self, fake_clock):
        acc = StatsAccumulator(clock=fake_clock)
        for i in range(50):
            acc.record(
                i % 3 + 1,
                syntax_error=i % 4 == 0,
                fully_matched=i % 2 == 0,
                has_ambiguity=False,
            )
        t = acc.totals
        assert t.lines_ok <= t.lines_total
        assert t.hits_ok <= t.hits_total
        assert t.hits_total == sum(i % 3 + 1 for i in range(50))


# ── segments ─────────────────────────────────────────────────────────────────


class TestSegments:
    def test_progress_once_per_segment(self, fake_clock):
        acc = StatsAccumulator(segment_size=1000, clock=fake_clock)
        lines = [acc.record(1, False, True, False) for _ in range(2500)]
        emitted = [line for line in lines if line is not None]
        assert len(emitted) == 2
        assert lines[999] is not None
        assert lines[1999] is not None

    def test_progress_line_content(self, fake_clock):
        acc = StatsAccumulator(segment_size=3, clock=fake_clock)
        acc.record(1, syntax_error=True, fully_matched=False, has_ambiguity=True)
        acc.record(1, syntax_error=False, fully_matched=True, has_ambiguity=True)
        line = acc.record(
            1, syntax_error=True, fully_matched=False, has_ambiguity=False
        )
        assert line.startswith("Lines = 3 (A=2 S=2)")
        assert line.endswith("/sec.")

    def test_segment_resets_after_emission(self, fake_clock):
        acc = StatsAccumulator(segment_size=2, clock=fake_clock)
        acc.record(1, True, False, True)
        acc.record(1, True, False, True)
        assert acc.segment.ambiguities == 0
        assert acc.segment.syntax_errors == 0
        assert acc.segment.start_lines == 2
        # cumulative counters untouched
        assert acc.totals.lines_total == 2

    def test_segment_throughput(self):
        ticks = iter([0, 2_000_000_000])  # start, first boundary
        acc = StatsAccumulator(segment_size=1000, clock=lambda: next(ticks))
        line = None
        for _ in range(1000):
            line = acc.record(1, False, True, False)
        assert "Speed = 500/sec." in line

    def test_progress_is_logged(self, fake_clock, caplog):
        acc = StatsAccumulator(segment_size=1, clock=fake_clock)
        with caplog.at_level(logging.INFO, logger="uaprobe"):
            acc.record(1, False, True, False)
        assert any(r.getMessage().startswith("Lines = 1 ") for r in caplog.records)

    def test_invalid_segment_size(self):
        with pytest.raises(ValueError):
            StatsAccumulator(segment_size=0)


# ── summary ──────────────────────────────────────────────────────────────────


class TestSummary:
    def test_finalize(self, fake_clock):
        acc = StatsAccumulator(clock=fake_clock)
        acc.record(3, syntax_error=False, fully_matched=True, has_ambiguity=False)
        acc.record(1, syntax_error=True, fully_matched=False, has_ambiguity=False)
        s = acc.finalize()
        assert s.lines_total == 2
        assert s.hits_total == 4
        assert s.lines_ok_pct == pytest.approx(50.0)
        assert s.hits_ok_pct == pytest.approx(75.0)
        assert s.lines_matched_pct == pytest.approx(50.0)
        assert s.hits_matched_pct == pytest.approx(75.0)
        assert s.elapsed_ns > 0

    def test_empty_run_reports_no_data(self, fake_clock):
        s = StatsAccumulator(clock=fake_clock).finalize()
        assert s.lines_ok_pct is None
        assert s.hits_matched_pct is None
        report = "\n".join(s.report_lines())
        assert NO_DATA in report
        assert "Parse results of 0 lines" in report

    def test_zero_elapsed_throughput(self):
        s = RunSummary(1, 1, 1, 1, 1, 1, elapsed_ns=0)
        assert s.throughput is None

    def test_report_lines(self):
        s = RunSummary(
            lines_total=4, hits_total=10, lines_ok=3, hits_ok=9,
            lines_matched=2, hits_matched=5, elapsed_ns=2_000_000_000,
        )
        report = s.report_lines()
        assert "Performance: 4 in 2.0 sec --> 2/sec" in report
        assert "Parsed without error: 3 (=75.00%)" in report
        assert "Fully matched       : 5 (=50.00%)" in report
