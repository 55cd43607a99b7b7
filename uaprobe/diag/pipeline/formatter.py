"""Adapter interface and implementations for rendering classification results.

Each ``render()`` call returns exactly one output record without a trailing
newline: a single line for CSV and JSON (JSON Lines framing), a single YAML
document for YAML.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod

import yaml

from uaprobe.diag.config import CSV_TRAILING_COLUMN, OutputFormat
from uaprobe.diag.engine.models import ClassificationResult


class BaseFormatter(ABC):
    """Abstract interface for turning a ClassificationResult into text."""

    def __init__(self, field_names: list[str]) -> None:
        self.field_names = sorted(field_names)

    def header(self) -> str | None:
        """Text to print once before the first record, or None."""
        return None

    @abstractmethod
    def render(self, result: ClassificationResult, payload: str | None = None) -> str:
        """Render one result.  *payload* defaults to ``result.payload``."""
        ...


def _csv_cell(value: str) -> str:
    # Column separators and line breaks inside a value would shift columns
    return value.replace("\t", " ").replace("\r", " ").replace("\n", " ")


class CsvFormatter(BaseFormatter):
    """Tab-separated columns: every field name, sorted, then the original payload."""

    def header(self) -> str:
        return "\t".join([*self.field_names, CSV_TRAILING_COLUMN])

    def render(self, result: ClassificationResult, payload: str | None = None) -> str:
        payload = result.payload if payload is None else payload
        cells = [_csv_cell(result.get_value(name) or "") for name in self.field_names]
        cells.append(_csv_cell(payload))
        return "\t".join(cells)


class JsonFormatter(BaseFormatter):
    """One JSON object per record holding every field that has a value."""

    def render(self, result: ClassificationResult, payload: str | None = None) -> str:
        d = result.to_dict()
        if payload is not None:
            d["Useragent"] = payload
        return json.dumps(d, ensure_ascii=False)


class YamlFormatter(BaseFormatter):
    """A replayable test-case document: input, expected values and their confidence.

    Payloads with a syntax error get a ``# Syntax error:`` comment line first.
    """

    def render(self, result: ClassificationResult, payload: str | None = None) -> str:
        payload = result.payload if payload is None else payload
        present = result.present_fields()
        doc = [
            {
                "test": {
                    "input": {"user_agent_string": payload},
                    "expected": {name: fv.value for name, fv in present.items()},
                    "confidence": {
                        name: fv.confidence for name, fv in present.items()
                    },
                }
            }
        ]
        text = yaml.safe_dump(
            doc,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
            width=4096,
        ).rstrip("\n")
        if result.has_syntax_error:
            # A comment must stay on one line or the rest becomes YAML content
            text = f"# Syntax error: {' '.join(payload.splitlines())}\n{text}"
        return text


_FORMATTERS: dict[OutputFormat, type[BaseFormatter]] = {
    OutputFormat.CSV: CsvFormatter,
    OutputFormat.JSON: JsonFormatter,
    OutputFormat.YAML: YamlFormatter,
}


def make_formatter(
    output_format: OutputFormat | str, field_names: list[str]
) -> BaseFormatter:
    """Return the formatter for *output_format* (an OutputFormat or its name)."""
    if isinstance(output_format, str):
        output_format = OutputFormat(output_format.lower())
    return _FORMATTERS[output_format](field_names)
