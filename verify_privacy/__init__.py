"""Privacy assessment and consent metadata client for IBM Security Verify."""

from verify_privacy.core.config import ConfigurationError, Settings, get_settings
from verify_privacy.domain.models import (
    CONSENT_REQUIRED_MESSAGE_ID,
    AssessmentStatus,
    ConsentStatus,
    MetadataStatus,
    RequestItem,
    SubjectContext,
    WrappedAssessment,
    WrappedMetadata,
)
from verify_privacy.domain.services.privacy import Privacy

__all__ = [
    "CONSENT_REQUIRED_MESSAGE_ID",
    "AssessmentStatus",
    "ConfigurationError",
    "ConsentStatus",
    "MetadataStatus",
    "Privacy",
    "RequestItem",
    "Settings",
    "SubjectContext",
    "WrappedAssessment",
    "WrappedMetadata",
    "get_settings",
]
