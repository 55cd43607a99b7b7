"""YAML rulesets for the bundled RuleEngine.

A ruleset file looks like::

    requires: ">=0.1.0,<1.0.0"        # optional PEP 440 specifier
    standard_fields: [DeviceClass, AgentName]
    fields: [AgentVersion]            # optional, extra field names
    rules:
      - name: agent-firefox
        path: "agent.(*)product"      # fnmatch pattern over tree paths
        match: '^Firefox/(\\S+)$'     # optional regex on the node value
        set:
          AgentName: [Firefox, 100]
          AgentVersion: ['\\1', 100]  # templates may use regex groups

Every path a rule's ``path`` pattern selects counts as *consulted*, whether
or not the ``match`` regex then accepts the value.
"""

from __future__ import annotations

import importlib.metadata
import importlib.resources
import re
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path

import yaml
from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import Version

from uaprobe.diag import __version__
from uaprobe.diag.engine.models import FieldValue, TreeNode
from uaprobe.diag.errors import EngineError

DEFAULT_RULES_RESOURCE = "default_rules.yaml"

_GROUP_REF = re.compile(r"\\(\d+)")


@dataclass
class Rule:
    name: str
    path: str
    sets: dict[str, tuple[str, int]]
    match: re.Pattern | None = None

    def consults(self, path: str) -> bool:
        return fnmatchcase(path, self.path)

    def apply(self, node: TreeNode) -> dict[str, FieldValue] | None:
        """Return the field values this rule assigns for *node*, or None."""
        if not self.consults(node.path):
            return None
        if self.match is None:
            return {
                name: FieldValue(value, conf)
                for name, (value, conf) in self.sets.items()
            }
        m = self.match.search(node.value)
        if m is None:
            return None
        return {
            name: FieldValue(m.expand(value) if "\\" in value else value, conf)
            for name, (value, conf) in self.sets.items()
        }


@dataclass
class RuleSet:
    rules: list[Rule]
    standard_fields: set[str]
    extra_fields: list[str] = field(default_factory=list)

    def field_names(self) -> list[str]:
        """Rule fields, then standard and extra fields, in first-seen order."""
        names: dict[str, None] = {}
        for rule in self.rules:
            names.update(dict.fromkeys(rule.sets))
        names.update(dict.fromkeys(sorted(self.standard_fields)))
        names.update(dict.fromkeys(self.extra_fields))
        return list(names)

    def consults(self, path: str) -> bool:
        return any(rule.consults(path) for rule in self.rules)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _package_version() -> Version:
    try:
        return Version(importlib.metadata.version("uaprobe-diag"))
    except importlib.metadata.PackageNotFoundError:
        return Version(__version__)  # running from a source checkout


def _check_compatibility(source: str, requires: str) -> None:
    try:
        spec = SpecifierSet(requires)
    except InvalidSpecifier as exc:
        raise EngineError(
            f"Ruleset {source}: invalid 'requires' specifier {requires!r}"
        ) from exc
    pkg_ver = _package_version()
    if pkg_ver not in spec:
        raise EngineError(
            f"Ruleset {source} requires uaprobe-diag{requires} (you have {pkg_ver})."
        )


def _parse_confidence(confidence, where: str) -> int:
    try:
        return int(confidence)
    except (TypeError, ValueError) as exc:
        raise EngineError(
            f"{where}: confidence must be an integer, got {confidence!r}"
        ) from exc


def _parse_rule(raw: dict, index: int, source: str) -> Rule:
    if not isinstance(raw, dict):
        raise EngineError(f"Ruleset {source}: rule #{index} must be a mapping")
    name = raw.get("name") or f"rule-{index}"
    if "path" not in raw or "set" not in raw:
        raise EngineError(
            f"Ruleset {source}: rule '{name}' needs both 'path' and 'set'"
        )
    if not isinstance(raw["set"], dict):
        raise EngineError(
            f"Ruleset {source}: rule '{name}' 'set' must map field names "
            "to [value, confidence]"
        )

    sets: dict[str, tuple[str, int]] = {}
    for field_name, pair in raw["set"].items():
        where = f"Ruleset {source}: rule '{name}' field '{field_name}'"
        if not isinstance(pair, (list, tuple)) or len(pair) != 2:
            raise EngineError(f"{where} must be [value, confidence]")
        value, confidence = pair
        sets[field_name] = (str(value), _parse_confidence(confidence, where))

    pattern = None
    if raw.get("match") is not None:
        try:
            pattern = re.compile(raw["match"])
        except re.error as exc:
            raise EngineError(
                f"Ruleset {source}: rule '{name}' has a bad regex: {exc}"
            ) from exc

    groups = pattern.groups if pattern is not None else 0
    for field_name, (value, _) in sets.items():
        refs = [int(g) for g in _GROUP_REF.findall(value)]
        if refs and max(refs) > groups:
            raise EngineError(
                f"Ruleset {source}: rule '{name}' field '{field_name}' references "
                f"group {max(refs)} but the regex has {groups}"
            )

    return Rule(name=name, path=str(raw["path"]), sets=sets, match=pattern)


def parse_ruleset(data: dict, source: str = "<memory>") -> RuleSet:
    """Build a RuleSet from an already-parsed YAML document."""
    if not isinstance(data, dict):
        raise EngineError(f"Ruleset {source}: top level must be a mapping")
    if data.get("requires"):
        _check_compatibility(source, str(data["requires"]))

    raw_rules = data.get("rules") or []
    if not isinstance(raw_rules, list):
        raise EngineError(f"Ruleset {source}: 'rules' must be a list")
    rules = [_parse_rule(raw, i, source) for i, raw in enumerate(raw_rules, start=1)]
    standard = set(data.get("standard_fields") or [])
    if not standard:
        raise EngineError(f"Ruleset {source}: 'standard_fields' must not be empty")
    return RuleSet(
        rules=rules,
        standard_fields=standard,
        extra_fields=list(data.get("fields") or []),
    )


def load_ruleset(path: str | Path | None = None) -> RuleSet:
    """Load a ruleset from *path*, or the bundled default when *path* is None."""
    try:
        if path is None:
            package = importlib.resources.files("uaprobe.diag.engine")
            text = (package / DEFAULT_RULES_RESOURCE).read_text(encoding="utf-8")
            source = DEFAULT_RULES_RESOURCE
        else:
            text = Path(path).read_text(encoding="utf-8")
            source = str(path)
    except OSError as exc:
        raise EngineError(f"Cannot read ruleset: {exc}") from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise EngineError(f"Ruleset {source} is not valid YAML: {exc}") from exc
    return parse_ruleset(data, source)
