"""uaprobe.diag.engine — classification engine interface and the bundled RuleEngine.

Custom engines
--------------
Subclass ``BaseEngine`` and hand an instance to ``ClassificationAdapter``::

    from uaprobe.diag.engine import BaseEngine
    from uaprobe.diag.pipeline import ClassificationAdapter

    adapter = ClassificationAdapter(MyEngine())
"""

from uaprobe.diag.engine.base import (
    AllPathsObserver,
    BaseEngine,
    ConsultedPathsObserver,
    TreeObserver,
)
from uaprobe.diag.engine.engine import RuleEngine
from uaprobe.diag.engine.models import ClassificationResult, FieldValue, TreeNode
from uaprobe.diag.engine.rules import Rule, RuleSet, load_ruleset, parse_ruleset

__all__ = [
    # Engines
    "BaseEngine",
    "RuleEngine",
    # Data models
    "ClassificationResult",
    "FieldValue",
    "TreeNode",
    # Tree observers
    "TreeObserver",
    "AllPathsObserver",
    "ConsultedPathsObserver",
    # Rulesets
    "Rule",
    "RuleSet",
    "load_ruleset",
    "parse_ruleset",
]
