"""Quality classifier: reduce a ClassificationResult to a QualityVerdict."""

from __future__ import annotations

from collections.abc import Iterable

from uaprobe.diag.engine.models import ClassificationResult
from uaprobe.diag.pipeline.models import QualityVerdict


def classify_quality(
    result: ClassificationResult, standard_fields: Iterable[str]
) -> QualityVerdict:
    """A result is fully matched when every standard field has confidence >= 0.

    Fields missing from the result count as undetermined.
    """
    fully_matched = all(result.get_confidence(name) >= 0 for name in standard_fields)
    return QualityVerdict(
        syntax_error=result.has_syntax_error, fully_matched=fully_matched
    )
