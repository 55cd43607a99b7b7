"""Record decoder: one raw input line → a WeightedRecord or SKIP.

Input lines are either a bare payload (weight 1) or ``<count>\\t<payload>``.
Blank lines, ``#`` comments and indented lines are not records.
"""

from __future__ import annotations

import re

from uaprobe.diag.config import COMMENT_MARKER, WEIGHT_SEPARATOR
from uaprobe.diag.errors import DecodeError
from uaprobe.diag.pipeline.models import SKIP, Skip, WeightedRecord

_WEIGHT_RE = re.compile(r"[+-]?\d+")


def strip_line_ending(line: str) -> str:
    return line.rstrip("\r\n")


def is_record_line(line: str) -> bool:
    """Return False for blank, comment and indented lines."""
    return bool(line) and not line.startswith(COMMENT_MARKER) and not line[0].isspace()


def decode_line(line: str, line_no: int | None = None) -> WeightedRecord | Skip:
    """Decode one input line (line ending already stripped or not).

    The weight is everything before the first tab; the payload is the rest of
    the line, further tabs included.

    Raises:
        DecodeError: the weight field is not an integer, or is below 1.
    """
    line = strip_line_ending(line)
    if not is_record_line(line):
        return SKIP

    if WEIGHT_SEPARATOR not in line:
        return WeightedRecord(payload=line, weight=1, line_no=line_no)

    weight_field, _, payload = line.partition(WEIGHT_SEPARATOR)
    if not _WEIGHT_RE.fullmatch(weight_field):
        raise DecodeError(
            f"weight field {weight_field!r} is not an integer", line, line_no
        )
    weight = int(weight_field)
    if weight < 1:
        raise DecodeError(f"weight {weight} must be at least 1", line, line_no)
    return WeightedRecord(payload=payload, weight=weight, line_no=line_no)
