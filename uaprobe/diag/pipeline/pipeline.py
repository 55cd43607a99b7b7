"""DiagnosticPipeline: decode → classify → grade → count → render."""

from __future__ import annotations

import contextlib
import logging
import sys
import time
from collections.abc import Callable, Iterable
from typing import TextIO

from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

from uaprobe.diag.config import SEGMENT_SIZE, RunConfig, RunMode
from uaprobe.diag.engine.base import BaseEngine
from uaprobe.diag.engine.engine import RuleEngine
from uaprobe.diag.engine.models import ClassificationResult
from uaprobe.diag.errors import DecodeError
from uaprobe.diag.pipeline.adapter import ClassificationAdapter
from uaprobe.diag.pipeline.decoder import (
    decode_line,
    is_record_line,
    strip_line_ending,
)
from uaprobe.diag.pipeline.formatter import BaseFormatter, make_formatter
from uaprobe.diag.pipeline.models import SKIP
from uaprobe.diag.pipeline.quality import classify_quality
from uaprobe.diag.pipeline.stats import RunSummary, StatsAccumulator

logger = logging.getLogger(__name__)


class DiagnosticPipeline:
    """Single pass, single thread driver for one diagnostic run.

    Three mutually exclusive modes
    ------------------------------
    >>> pipeline.run_single("Mozilla/5.0 ...")     # one payload, header + record
    >>> pipeline.run_flatten(lines, RunMode.FULL_FLATTEN)
    >>> summary = pipeline.run_batch(lines)        # decode, classify, count, render

    ``run(config)`` dispatches on ``config.mode`` and opens the input file.

    Records go to *out* (stdout by default); progress lines and the end-of-run
    summary go to the ``uaprobe`` loggers, which the CLI routes to stderr.
    """

    def __init__(
        self,
        adapter: ClassificationAdapter,
        formatter: BaseFormatter,
        *,
        bad_only: bool = False,
        out: TextIO | None = None,
        segment_size: int = SEGMENT_SIZE,
        clock: Callable[[], int] = time.perf_counter_ns,
        progress_bar: bool = False,
    ) -> None:
        """
        Args:
            adapter:      Owner of the classification engine.
            formatter:    Output renderer (CSV, JSON or YAML).
            bad_only:     Render only records that are not fully matched.
            out:          Record sink.  Defaults to ``sys.stdout``.
            segment_size: Records per progress line.
            clock:        Nanosecond clock for the throughput meter.
            progress_bar: Show a tqdm bar on stderr during batch runs.
        """
        self.adapter = adapter
        self.formatter = formatter
        self.bad_only = bad_only
        self._out = out
        self.segment_size = segment_size
        self._clock = clock
        self.progress_bar = progress_bar

    @classmethod
    def from_config(
        cls, config: RunConfig, engine: BaseEngine | None = None, **kwargs
    ) -> DiagnosticPipeline:
        """Build a pipeline (and, unless given, a RuleEngine) for *config*.

        Keyword arguments override the matching constructor options.
        """
        engine = engine or RuleEngine(config.rules_path, verbose=config.debug)
        adapter = ClassificationAdapter(engine)
        formatter = make_formatter(config.output_format, adapter.all_field_names())
        kwargs.setdefault("bad_only", config.bad_only)
        kwargs.setdefault("progress_bar", config.progress_bar)
        return cls(adapter, formatter, **kwargs)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _emit(self, text: str) -> None:
        print(text, file=self._out or sys.stdout)

    def _emit_header(self) -> None:
        header = self.formatter.header()
        if header is not None:
            self._emit(header)

    # ------------------------------------------------------------------
    # Modes
    # ------------------------------------------------------------------

    def run_single(self, payload: str) -> ClassificationResult:
        """Classify one payload and render it with its header."""
        result = self.adapter.classify(payload)
        self._emit_header()
        self._emit(self.formatter.render(result, payload))
        return result

    def run_flatten(self, lines: Iterable[str], mode: RunMode) -> int:
        """Dump parse-tree paths for each input line.

        Returns the number of payloads flattened.
        """
        if mode is RunMode.FULL_FLATTEN:
            flatten = self.adapter.flatten_all
        elif mode is RunMode.MATCHED_FLATTEN:
            flatten = self.adapter.flatten_matched
        else:
            raise ValueError(f"{mode} is not a flatten mode")

        count = 0
        for raw in lines:
            line = strip_line_ending(raw)
            if not is_record_line(line):
                continue
            for entry in flatten(line):
                self._emit(entry)
            count += 1
        return count

    def run_batch(self, lines: Iterable[str]) -> RunSummary:
        """Process every record in *lines* and return the final statistics.

        A DecodeError or OSError aborts the run; the partial statistics are
        logged before the exception propagates.
        """
        stats = StatsAccumulator(segment_size=self.segment_size, clock=self._clock)
        standard = self.adapter.standard_field_names()
        logger.info("Start @ %d", stats.start_ns)
        self._emit_header()

        redirect = (
            logging_redirect_tqdm() if self.progress_bar else contextlib.nullcontext()
        )
        try:
            with redirect:
                bar = tqdm(
                    lines,
                    desc="Classifying",
                    unit="line",
                    file=sys.stderr,
                    disable=not self.progress_bar,
                )
                for line_no, raw in enumerate(bar, start=1):
                    record = decode_line(raw, line_no)
                    if record is SKIP:
                        continue

                    result = self.adapter.classify(record.payload)
                    verdict = classify_quality(result, standard)
                    stats.record(
                        record.weight,
                        verdict.syntax_error,
                        verdict.fully_matched,
                        result.has_ambiguity,
                    )

                    if self.bad_only and not verdict.is_bad:
                        continue
                    self._emit(self.formatter.render(result, record.payload))
        except (DecodeError, OSError) as exc:
            summary = stats.finalize()
            logger.error("Run aborted: %s", exc)
            logger.error("Partial statistics up to the failure:")
            for line in summary.report_lines():
                logger.error(line)
            raise

        summary = stats.finalize()
        logger.info("Stop  @ %d", stats.start_ns + summary.elapsed_ns)
        for line in summary.report_lines():
            logger.info(line)
        return summary

    def run(self, config: RunConfig) -> RunSummary | None:
        """Run the mode selected by *config*.  Returns the summary for batch runs."""
        mode = config.mode
        if mode is RunMode.SINGLE:
            self.run_single(config.payload)
            return None

        logger.debug("Reading %s (%s mode)", config.in_file, mode.value)
        with open(config.in_file, encoding="utf-8", errors="replace") as fh:
            if mode is RunMode.BATCH:
                return self.run_batch(fh)
            self.run_flatten(fh, mode)
        return None
