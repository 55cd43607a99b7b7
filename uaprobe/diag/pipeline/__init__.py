"""uaprobe.diag.pipeline — batch diagnostic pipeline with adapter pattern.

Quick start
-----------
>>> from uaprobe.diag.config import make_run_config
>>> from uaprobe.diag.pipeline import DiagnosticPipeline
>>> config = make_run_config(in_file="agents.txt", csv_format=True)
>>> summary = DiagnosticPipeline.from_config(config).run(config)

Step-by-step
------------
>>> record  = decode_line("12\\tMozilla/5.0 (X11; Linux x86_64)")
>>> result  = adapter.classify(record.payload)
>>> verdict = classify_quality(result, adapter.standard_field_names())
>>> stats.record(
...     record.weight, verdict.syntax_error, verdict.fully_matched, result.has_ambiguity
... )

Custom adapters
---------------
>>> from uaprobe.diag.pipeline import ClassificationAdapter, DiagnosticPipeline
>>> from uaprobe.diag.pipeline import JsonFormatter
>>> adapter = ClassificationAdapter(MyEngine())
>>> formatter = JsonFormatter(adapter.all_field_names())
>>> pipeline = DiagnosticPipeline(adapter, formatter, bad_only=True)
"""

from uaprobe.diag.pipeline.adapter import ClassificationAdapter
from uaprobe.diag.pipeline.decoder import decode_line, is_record_line
from uaprobe.diag.pipeline.formatter import (
    BaseFormatter,
    CsvFormatter,
    JsonFormatter,
    YamlFormatter,
    make_formatter,
)
from uaprobe.diag.pipeline.models import SKIP, QualityVerdict, Skip, WeightedRecord
from uaprobe.diag.pipeline.pipeline import DiagnosticPipeline
from uaprobe.diag.pipeline.quality import classify_quality
from uaprobe.diag.pipeline.stats import (
    RunSummary,
    RunTotals,
    SegmentWindow,
    StatsAccumulator,
)

__all__ = [
    # Pipeline
    "DiagnosticPipeline",
    "ClassificationAdapter",
    # Data models
    "WeightedRecord",
    "Skip",
    "SKIP",
    "QualityVerdict",
    # Steps
    "decode_line",
    "is_record_line",
    "classify_quality",
    # Statistics
    "StatsAccumulator",
    "RunTotals",
    "SegmentWindow",
    "RunSummary",
    # Formatters
    "BaseFormatter",
    "CsvFormatter",
    "JsonFormatter",
    "YamlFormatter",
    "make_formatter",
]
