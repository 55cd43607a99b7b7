"""Tests for uaprobe.diag.pipeline.formatter — CSV, JSON lines and YAML output."""

import json

import pytest
import yaml

from uaprobe.diag.config import CSV_TRAILING_COLUMN, OutputFormat
from uaprobe.diag.engine.models import ClassificationResult, FieldValue
from uaprobe.diag.pipeline.formatter import (
    CsvFormatter,
    JsonFormatter,
    YamlFormatter,
    make_formatter,
)

FIELDS = ["OperatingSystemName", "AgentName", "DeviceClass", "AgentVersion"]


@pytest.fixture()
def result() -> ClassificationResult:
    return ClassificationResult(
        payload="Mozilla/5.0 (X11; Linux x86_64)",
        fields={
            "DeviceClass": FieldValue("Desktop", 10),
            "OperatingSystemName": FieldValue("Linux", 10),
            "AgentName": FieldValue(None, -1),
        },
    )


# ── CSV ──────────────────────────────────────────────────────────────────────


class TestCsvFormatter:
    def test_header_sorted_with_trailing_column(self):
        header = CsvFormatter(FIELDS).header()
        assert header.split("\t") == sorted(FIELDS) + [CSV_TRAILING_COLUMN]

    def test_record_columns_match_header(self, result):
        fmt = CsvFormatter(FIELDS)
        assert len(fmt.render(result).split("\t")) == len(fmt.header().split("\t"))

    def test_record_values(self, result):
        cells = CsvFormatter(FIELDS).render(result).split("\t")
        # AgentName, AgentVersion, DeviceClass, OperatingSystemName, Useragent
        assert cells == ["", "", "Desktop", "Linux", "Mozilla/5.0 (X11; Linux x86_64)"]

    def test_single_line(self, result):
        assert "\n" not in CsvFormatter(FIELDS).render(result)

    def test_tabs_in_payload_do_not_shift_columns(self):
        r = ClassificationResult(
            payload="a\tb", fields={"DeviceClass": FieldValue("x\ty", 1)}
        )
        fmt = CsvFormatter(FIELDS)
        line = fmt.render(r)
        assert len(line.split("\t")) == len(FIELDS) + 1
        assert line.endswith("a b")


# ── JSON ─────────────────────────────────────────────────────────────────────


class TestJsonFormatter:
    def test_no_header(self):
        assert JsonFormatter(FIELDS).header() is None

    def test_one_object_per_line(self, result):
        line = JsonFormatter(FIELDS).render(result)
        assert "\n" not in line
        obj = json.loads(line)
        assert obj == {
            "Useragent": "Mozilla/5.0 (X11; Linux x86_64)",
            "DeviceClass": "Desktop",
            "OperatingSystemName": "Linux",
        }

    def test_includes_non_standard_fields(self):
        r = ClassificationResult(payload="p", fields={"Custom": FieldValue("v", 3)})
        assert json.loads(JsonFormatter([]).render(r))["Custom"] == "v"

    def test_unicode_kept(self):
        r = ClassificationResult(payload="Agënt", fields={})
        assert "Agënt" in JsonFormatter([]).render(r)


# ── YAML ─────────────────────────────────────────────────────────────────────


class TestYamlFormatter:
    def test_no_header(self):
        assert YamlFormatter(FIELDS).header() is None

    def test_test_case_document(self, result):
        doc = yaml.safe_load(YamlFormatter(FIELDS).render(result))
        case = doc[0]["test"]
        assert case["input"]["user_agent_string"] == "Mozilla/5.0 (X11; Linux x86_64)"
        assert case["expected"] == {
            "DeviceClass": "Desktop",
            "OperatingSystemName": "Linux",
        }
        assert case["confidence"] == {"DeviceClass": 10, "OperatingSystemName": 10}

    def test_syntax_error_comment(self):
        r = ClassificationResult(payload="Mozilla/5.0 (broken", has_syntax_error=True)
        text = YamlFormatter([]).render(r)
        assert text.splitlines()[0] == "# Syntax error: Mozilla/5.0 (broken"
        # still a valid document
        case = yaml.safe_load(text)[0]["test"]
        assert case["input"]["user_agent_string"] == "Mozilla/5.0 (broken"

    def test_syntax_error_comment_with_line_break(self):
        payload = "Mozilla/5.0 (x\nfoo: ["
        r = ClassificationResult(payload=payload, has_syntax_error=True)
        text = YamlFormatter([]).render(r)
        assert text.splitlines()[0] == "# Syntax error: Mozilla/5.0 (x foo: ["
        assert yaml.safe_load(text)[0]["test"]["input"]["user_agent_string"] == payload

    def test_no_trailing_newline(self, result):
        assert not YamlFormatter(FIELDS).render(result).endswith("\n")


# ── factory ──────────────────────────────────────────────────────────────────


class TestMakeFormatter:
    @pytest.mark.parametrize(
        "fmt, cls",
        [
            (OutputFormat.CSV, CsvFormatter),
            (OutputFormat.JSON, JsonFormatter),
            (OutputFormat.YAML, YamlFormatter),
            ("csv", CsvFormatter),
            ("JSON", JsonFormatter),
        ],
    )
    def test_dispatch(self, fmt, cls):
        assert isinstance(make_formatter(fmt, FIELDS), cls)

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            make_formatter("xml", FIELDS)
