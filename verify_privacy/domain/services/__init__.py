"""Domain services."""

from verify_privacy.domain.services.assessment import aggregate_status, decode_assessment
from verify_privacy.domain.services.metadata import normalize_items
from verify_privacy.domain.services.privacy import Privacy

__all__ = [
    "Privacy",
    "aggregate_status",
    "decode_assessment",
    "normalize_items",
]
