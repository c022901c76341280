from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from verify_privacy.schemas.consent import ConsentMetadata

DEFAULT_ACCESS_TYPE = "default"

# Verify message id returned when the subject still has to give consent
CONSENT_REQUIRED_MESSAGE_ID = "CSIBT0033I"

INVALID_DATATYPE_MESSAGE_ID = "INVALID_DATATYPE"


class AssessmentStatus(str, Enum):
    APPROVED = "approved"
    CONSENT = "consent"
    DENIED = "denied"
    ERROR = "error"


class MetadataStatus(str, Enum):
    DONE = "done"
    ERROR = "error"


class ConsentStatus(str, Enum):
    """Current state of a subject's consent for one slot."""

    NONE = "NONE"
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"


def slot_key(purpose_id: str, attribute_id: str | None, access_type_id: str | None) -> str:
    """Build the ``purpose/attribute.accessType`` key used to match catalog records."""
    return f"{purpose_id}/{attribute_id or ''}.{access_type_id or ''}"


@dataclass(frozen=True, slots=True)
class SubjectContext:
    """Data subject on whose behalf requests are made."""

    subject_id: str | None = None
    is_external_subject: bool | None = None
    ip_address: str | None = None

    @classmethod
    def from_value(cls, value: SubjectContext | Mapping[str, Any] | None) -> SubjectContext:
        if value is None:
            return cls()
        if isinstance(value, SubjectContext):
            return value
        return cls(
            subject_id=value.get("subjectId"),
            is_external_subject=value.get("isExternalSubject"),
            ip_address=value.get("ipAddress"),
        )

    def to_payload(self) -> dict[str, Any]:
        """Request body fields carrying the subject, omitting unset ones."""
        payload: dict[str, Any] = {}
        if self.subject_id:
            payload["subjectId"] = self.subject_id
        if self.is_external_subject is not None:
            payload["isExternalSubject"] = self.is_external_subject
        if self.ip_address:
            payload["geoIP"] = self.ip_address
        return payload


@dataclass(frozen=True, slots=True)
class RequestItem:
    """A single data-usage slot the caller wants evaluated."""

    purpose_id: str
    access_type_id: str | None = None
    attribute_id: str | None = None
    attribute_value: str | None = None

    @classmethod
    def from_value(cls, value: RequestItem | Mapping[str, Any]) -> RequestItem:
        if isinstance(value, RequestItem):
            return value
        return cls(
            purpose_id=value["purposeId"],
            access_type_id=value.get("accessTypeId"),
            attribute_id=value.get("attributeId"),
            attribute_value=value.get("attributeValue"),
        )

    def with_default_access_type(self) -> RequestItem:
        if self.access_type_id:
            return self
        return replace(self, access_type_id=DEFAULT_ACCESS_TYPE)

    @property
    def key(self) -> str:
        return slot_key(self.purpose_id, self.attribute_id, self.access_type_id)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"purposeId": self.purpose_id}
        if self.access_type_id is not None:
            payload["accessTypeId"] = self.access_type_id
        if self.attribute_id is not None:
            payload["attributeId"] = self.attribute_id
        if self.attribute_value is not None:
            payload["attributeValue"] = self.attribute_value
        return payload


# Decoded approval response


@dataclass(frozen=True, slots=True)
class ValidAssessment:
    results: list[Any]


@dataclass(frozen=True, slots=True)
class MalformedAssessment:
    actual_type: str


DecodedAssessment = ValidAssessment | MalformedAssessment


# Collaborator failures


@dataclass(frozen=True, slots=True)
class RemoteFailureWithPayload:
    """The remote service answered with a structured error body."""

    detail: Any


@dataclass(frozen=True, slots=True)
class OpaqueRemoteFailure:
    """A failure with nothing to forward to the caller."""

    reason: str = ""


RemoteFailure = RemoteFailureWithPayload | OpaqueRemoteFailure


@dataclass(slots=True)
class WrappedAssessment:
    """Overall assessment status plus the raw per-item results."""

    status: AssessmentStatus
    assessment: list[Any] | None = None
    data: dict[str, str] | None = None
    detail: Any = None

    @classmethod
    def malformed(cls, actual_type: str) -> WrappedAssessment:
        return cls(
            status=AssessmentStatus.ERROR,
            data={
                "messageId": INVALID_DATATYPE_MESSAGE_ID,
                "messageDescription": (
                    f"'assessment' is expected to be a list. Received {actual_type}"
                ),
            },
        )

    @classmethod
    def failed(cls, failure: RemoteFailure) -> WrappedAssessment:
        if isinstance(failure, RemoteFailureWithPayload):
            return cls(status=AssessmentStatus.ERROR, detail=failure.detail)
        return cls(status=AssessmentStatus.ERROR)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"status": self.status.value}
        if self.assessment is not None:
            result["assessment"] = self.assessment
        if self.data is not None:
            result["data"] = self.data
        if self.detail is not None:
            result["detail"] = self.detail
        return result


@dataclass(slots=True)
class WrappedMetadata:
    """Consent metadata for rendering a consent page."""

    status: MetadataStatus
    metadata: ConsentMetadata | None = None
    detail: Any = None

    @classmethod
    def failed(cls, failure: RemoteFailure) -> WrappedMetadata:
        if isinstance(failure, RemoteFailureWithPayload):
            return cls(status=MetadataStatus.ERROR, detail=failure.detail)
        return cls(status=MetadataStatus.ERROR)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"status": self.status.value}
        if self.metadata is not None:
            result["metadata"] = self.metadata.to_dict()
        if self.detail is not None:
            result["detail"] = self.detail
        return result


@dataclass(slots=True)
class NormalizedRequest:
    """Items with defaults applied, plus the lookups derived from them."""

    items: list[RequestItem] = field(default_factory=list)
    purposes: list[str] = field(default_factory=list)
    requested_keys: set[str] = field(default_factory=set)
