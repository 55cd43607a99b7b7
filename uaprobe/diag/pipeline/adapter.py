"""ClassificationAdapter: the single owner of a classification engine."""

from __future__ import annotations

import threading

from uaprobe.diag.engine.base import (
    AllPathsObserver,
    BaseEngine,
    ConsultedPathsObserver,
    TreeObserver,
)
from uaprobe.diag.engine.models import ClassificationResult
from uaprobe.diag.errors import EngineOwnershipError


class ClassificationAdapter:
    """Wraps one engine instance for exclusive use by one pipeline.

    Engines are not reentrant, so the adapter binds to the thread that
    created it and refuses calls from any other thread instead of locking.
    Construct one adapter (and one engine) per run.
    """

    def __init__(self, engine: BaseEngine) -> None:
        self._engine = engine
        self._owner = threading.get_ident()
        self._standard = frozenset(engine.standard_field_names())
        self._all_fields = list(engine.all_field_names())

    def _check_owner(self) -> None:
        if threading.get_ident() != self._owner:
            raise EngineOwnershipError(
                "ClassificationAdapter used from a thread that does not own it"
            )

    # ------------------------------------------------------------------
    # Engine metadata
    # ------------------------------------------------------------------

    def all_field_names(self) -> list[str]:
        return list(self._all_fields)

    def standard_field_names(self) -> frozenset[str]:
        return self._standard

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def classify(self, payload: str) -> ClassificationResult:
        self._check_owner()
        return self._engine.analyze(payload)

    def flatten(self, payload: str, observer: TreeObserver) -> list[str]:
        """Walk the parse tree of *payload* into *observer* and return its lines."""
        self._check_owner()
        self._engine.walk(payload, observer)
        return observer.lines

    def flatten_all(self, payload: str) -> list[str]:
        """Every node path of the parse tree."""
        return self.flatten(payload, AllPathsObserver())

    def flatten_matched(self, payload: str) -> list[str]:
        """``path value`` for every node the engine's ruleset consulted."""
        return self.flatten(payload, ConsultedPathsObserver())
