"""Run configuration dataclass and the factory that validates it."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from uaprobe.diag.errors import UsageError

# Records per progress segment
SEGMENT_SIZE = 1000

# Input line conventions
COMMENT_MARKER = "#"
WEIGHT_SEPARATOR = "\t"

# Last CSV column, holds the original payload
CSV_TRAILING_COLUMN = "Useragent"


class OutputFormat(str, Enum):
    CSV = "csv"
    JSON = "json"
    YAML = "yaml"


class RunMode(str, Enum):
    SINGLE = "single"
    FULL_FLATTEN = "full_flatten"
    MATCHED_FLATTEN = "matched_flatten"
    BATCH = "batch"


DEFAULT_FORMAT = OutputFormat.YAML


@dataclass
class RunConfig:
    # Input: exactly one of these is set
    payload: str | None = None
    in_file: Path | None = None

    # Output
    output_format: OutputFormat = DEFAULT_FORMAT
    bad_only: bool = False

    # Diagnostics
    debug: bool = False
    progress_bar: bool = False

    # Dump modes, full_flatten wins when both are set
    full_flatten: bool = False
    matched_flatten: bool = False

    # Engine ruleset, None means the bundled default
    rules_path: Path | None = None

    @property
    def mode(self) -> RunMode:
        if self.payload is not None:
            return RunMode.SINGLE
        if self.full_flatten:
            return RunMode.FULL_FLATTEN
        if self.matched_flatten:
            return RunMode.MATCHED_FLATTEN
        return RunMode.BATCH


def make_run_config(
    *,
    payload: str | None = None,
    in_file: str | Path | None = None,
    yaml_format: bool = False,
    csv_format: bool = False,
    json_format: bool = False,
    bad_only: bool = False,
    debug: bool = False,
    full_flatten: bool = False,
    matched_flatten: bool = False,
    rules_path: str | Path | None = None,
    progress_bar: bool = False,
) -> RunConfig:
    """Validate raw command-line selections and return a RunConfig.

    Raises UsageError when no input is given, when both a payload and a file
    are given, or when more than one output format is requested.
    """
    if payload is None and in_file is None:
        raise UsageError("No input specified.")
    if payload is not None and in_file is not None:
        raise UsageError("Specify either a single payload or an input file, not both.")

    selected = [
        fmt
        for fmt, flag in (
            (OutputFormat.YAML, yaml_format),
            (OutputFormat.CSV, csv_format),
            (OutputFormat.JSON, json_format),
        )
        if flag
    ]
    if len(selected) > 1:
        names = ", ".join(f.value for f in selected)
        raise UsageError(f"Only one output format may be selected (got {names}).")

    return RunConfig(
        payload=payload,
        in_file=Path(in_file) if in_file is not None else None,
        output_format=selected[0] if selected else DEFAULT_FORMAT,
        bad_only=bad_only,
        debug=debug,
        progress_bar=progress_bar,
        full_flatten=full_flatten,
        matched_flatten=matched_flatten,
        rules_path=Path(rules_path) if rules_path is not None else None,
    )
