"""
Assessment aggregation.

Collapses the per-item results of a data-usage approval into one overall
status. Precedence is consent > approved > denied; only ``result[0]`` of each
item is inspected.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from verify_privacy.domain.models import (
    CONSENT_REQUIRED_MESSAGE_ID,
    AssessmentStatus,
    DecodedAssessment,
    MalformedAssessment,
    ValidAssessment,
)


def decode_assessment(payload: Any) -> DecodedAssessment:
    """Check the approval response is a list before any aggregation runs."""
    if isinstance(payload, list):
        return ValidAssessment(results=payload)
    return MalformedAssessment(actual_type=type(payload).__name__)


def first_result(item: Any) -> Mapping[str, Any] | None:
    if not isinstance(item, Mapping):
        return None
    results = item.get("result")
    if not isinstance(results, list) or not results:
        return None
    first = results[0]
    return first if isinstance(first, Mapping) else None


def requires_consent(result: Mapping[str, Any]) -> bool:
    reason = result.get("reason")
    if not isinstance(reason, Mapping):
        return False
    return reason.get("messageId") == CONSENT_REQUIRED_MESSAGE_ID


def aggregate_status(results: list[Any]) -> AssessmentStatus:
    """
    Reduce item results to a single status.

    Every item is scanned. Items that are neither approved nor flagged as
    needing consent are neutral and do not affect the outcome.
    """
    status: AssessmentStatus | None = None

    for item in results:
        result = first_result(item)
        if result is None:
            continue

        if result.get("approved"):
            if status is None:
                status = AssessmentStatus.APPROVED
            continue

        if requires_consent(result):
            status = AssessmentStatus.CONSENT

    return status or AssessmentStatus.DENIED
