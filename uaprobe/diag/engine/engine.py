"""RuleEngine: a small path/regex rule matcher over the flattened agent tree."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

from uaprobe.diag.engine.base import BaseEngine, TreeObserver
from uaprobe.diag.engine.models import ClassificationResult, FieldValue
from uaprobe.diag.engine.rules import RuleSet, load_ruleset
from uaprobe.diag.engine.tree import flatten_agent

logger = logging.getLogger(__name__)


class RuleEngine(BaseEngine):
    """Classify user-agent strings with a YAML ruleset.

    Every rule is tried against every tree node. Per field the candidate with
    the highest confidence wins; distinct values tied at that confidence mark
    the result as ambiguous (the first one seen is kept).

    Not reentrant: ``verbose`` and the ruleset are plain instance state.
    """

    def __init__(
        self,
        rules_path: str | Path | None = None,
        *,
        ruleset: RuleSet | None = None,
        verbose: bool = False,
    ) -> None:
        """
        Args:
            rules_path: YAML ruleset file.  Defaults to the bundled ruleset.
            ruleset:    Pre-built RuleSet; takes precedence over *rules_path*.
            verbose:    Log every rule firing at DEBUG level.
        """
        self._ruleset = ruleset or load_ruleset(rules_path)
        self._field_names = self._ruleset.field_names()
        self.verbose = verbose
        logger.debug(
            "Loaded %d rules producing %d fields",
            len(self._ruleset.rules),
            len(self._field_names),
        )

    def all_field_names(self) -> list[str]:
        return list(self._field_names)

    def standard_field_names(self) -> set[str]:
        return set(self._ruleset.standard_fields)

    def analyze(self, payload: str) -> ClassificationResult:
        nodes, syntax_error = flatten_agent(payload)

        candidates: dict[str, list[FieldValue]] = {}
        for node in nodes:
            for rule in self._ruleset.rules:
                assigned = rule.apply(node)
                if not assigned:
                    continue
                if self.verbose:
                    logger.debug(
                        "Rule %s fired on %s=%r", rule.name, node.path, node.value
                    )
                for name, fv in assigned.items():
                    candidates.setdefault(name, []).append(fv)

        fields: dict[str, FieldValue] = {}
        ambiguous = False
        for name in self._field_names:
            options = candidates.get(name)
            if not options:
                continue
            best = max(fv.confidence for fv in options)
            top = [fv for fv in options if fv.confidence == best]
            values = {fv.value for fv in top}
            if len(values) > 1:
                ambiguous = True
                if self.verbose:
                    logger.debug("Ambiguous %s: %s", name, sorted(values))
            fields[name] = top[0]

        return ClassificationResult(
            payload=payload,
            fields=fields,
            has_syntax_error=syntax_error,
            has_ambiguity=ambiguous,
        )

    def walk(self, payload: str, observer: TreeObserver) -> None:
        nodes, _ = flatten_agent(payload)
        for node in nodes:
            observer.inform(replace(node, consulted=self._ruleset.consults(node.path)))
