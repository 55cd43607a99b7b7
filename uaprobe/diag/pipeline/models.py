"""Core data structures for the batch pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Skip(Enum):
    """Marker returned by the decoder for lines that are not records."""

    SKIP = "skip"


SKIP = Skip.SKIP


@dataclass(frozen=True)
class WeightedRecord:
    payload: str
    weight: int = 1  # always >= 1
    line_no: int | None = None


@dataclass(frozen=True)
class QualityVerdict:
    syntax_error: bool
    fully_matched: bool

    @property
    def is_bad(self) -> bool:
        return not self.fully_matched
