"""uaprobe.diag — batch diagnostics for user-agent classification engines.

Quick start
-----------
>>> from uaprobe.diag.engine import RuleEngine
>>> from uaprobe.diag.pipeline import ClassificationAdapter, DiagnosticPipeline
>>> from uaprobe.diag.pipeline import make_formatter
>>> adapter = ClassificationAdapter(RuleEngine())
>>> formatter = make_formatter("csv", adapter.all_field_names())
>>> pipeline = DiagnosticPipeline(adapter, formatter)
>>> with open("agents.txt") as fh:
...     summary = pipeline.run_batch(fh)
"""

__version__ = "0.1.0"
