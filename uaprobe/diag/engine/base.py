"""Engine interface and the tree observers used by the flatten modes."""

from __future__ import annotations

from abc import ABC, abstractmethod

from uaprobe.diag.engine.models import ClassificationResult, TreeNode


class BaseEngine(ABC):
    """Abstract interface for a user-agent classification engine.

    Engines are not expected to be reentrant. The pipeline only ever talks to
    an engine through a ClassificationAdapter, which owns it exclusively.
    """

    @abstractmethod
    def analyze(self, payload: str) -> ClassificationResult:
        """Classify *payload* into fields with per-field confidence."""
        ...

    @abstractmethod
    def all_field_names(self) -> list[str]:
        """Every field name this engine can produce."""
        ...

    @abstractmethod
    def standard_field_names(self) -> set[str]:
        """Fields that must all be determined for a fully matched payload."""
        ...

    @abstractmethod
    def walk(self, payload: str, observer: TreeObserver) -> None:
        """Decompose *payload* into its parse tree; inform *observer* of every node."""
        ...


class TreeObserver(ABC):
    """Receives parse-tree nodes from ``BaseEngine.walk`` and collects output lines."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    @abstractmethod
    def inform(self, node: TreeNode) -> None:
        ...


class AllPathsObserver(TreeObserver):
    """Collects the path of every node in the tree."""

    def inform(self, node: TreeNode) -> None:
        self.lines.append(node.path)


class ConsultedPathsObserver(TreeObserver):
    """Collects ``path value`` for the nodes the active ruleset consulted."""

    def inform(self, node: TreeNode) -> None:
        if node.consulted:
            self.lines.append(f"{node.path} {node.value}")
