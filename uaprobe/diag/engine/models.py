"""Data structures exchanged with a classification engine."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FieldValue:
    value: str | None
    confidence: int  # < 0 means the field was not reliably determined


@dataclass
class ClassificationResult:
    """The engine's structured answer for one payload.

    ``fields`` preserves the order in which the engine produced the fields.
    A field missing from the mapping is reported with confidence ``-1``.
    """

    payload: str
    fields: dict[str, FieldValue] = field(default_factory=dict)
    has_syntax_error: bool = False
    has_ambiguity: bool = False

    def get_value(self, name: str) -> str | None:
        fv = self.fields.get(name)
        return fv.value if fv is not None else None

    def get_confidence(self, name: str) -> int:
        fv = self.fields.get(name)
        return fv.confidence if fv is not None else -1

    def present_fields(self) -> dict[str, FieldValue]:
        """Fields that carry a value, in engine order."""
        return {name: fv for name, fv in self.fields.items() if fv.value is not None}

    def to_dict(self) -> dict:
        d = {"Useragent": self.payload}
        d.update({name: fv.value for name, fv in self.present_fields().items()})
        return d


@dataclass(frozen=True)
class TreeNode:
    path: str
    value: str
    consulted: bool = False  # the active ruleset looked at this path
