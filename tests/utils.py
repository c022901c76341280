from __future__ import annotations

from collections.abc import Collection
from typing import Any

from verify_privacy.domain.catalog import build_consent_metadata
from verify_privacy.domain.models import CONSENT_REQUIRED_MESSAGE_ID
from verify_privacy.schemas.consent import ConsentMetadata


def approved(purpose_id: str, access_type_id: str = "default", **extra: Any) -> dict[str, Any]:
    return {
        "purposeId": purpose_id,
        "accessTypeId": access_type_id,
        **extra,
        "result": [{"approved": True}],
    }


def denied(
    purpose_id: str,
    message_id: str = "CSIBT0034E",
    description: str = "The request is denied.",
    **extra: Any,
) -> dict[str, Any]:
    return {
        "purposeId": purpose_id,
        "accessTypeId": "default",
        **extra,
        "result": [
            {
                "approved": False,
                "reason": {"messageId": message_id, "messageDescription": description},
            }
        ],
    }


def consent_required(purpose_id: str, **extra: Any) -> dict[str, Any]:
    return denied(
        purpose_id,
        message_id=CONSENT_REQUIRED_MESSAGE_ID,
        description="Consent is required.",
        **extra,
    )


def purpose(
    purpose_id: str,
    *,
    name: str | None = None,
    category: str = "default",
    access_types: list[dict[str, Any]] | None = None,
    attributes: list[dict[str, Any]] | None = None,
    duration: int | None = 365,
) -> dict[str, Any]:
    """Build a catalog purpose entry as returned by data-subject-presentation."""
    entry: dict[str, Any] = {
        "id": purpose_id,
        "name": name or purpose_id.title(),
        "category": category,
        "accessTypes": access_types
        if access_types is not None
        else [{"id": "default", "name": "Default", "assentUIDefault": True}],
        "attributes": attributes or [],
    }
    if duration is not None:
        entry["defaultConsentDuration"] = duration
    return entry


def attribute(attribute_id: str, *access_type_ids: str, name: str | None = None) -> dict[str, Any]:
    return {
        "id": attribute_id,
        "name": name or attribute_id,
        "accessTypes": [
            {"id": access_type_id, "name": access_type_id.title()}
            for access_type_id in access_type_ids
        ],
    }


def consent(
    purpose_id: str,
    *,
    attribute_id: str | None = None,
    access_type_id: str | None = "default",
    status: int = 1,
    start_time: int = 1_700_000_000,
    **extra: Any,
) -> dict[str, Any]:
    record: dict[str, Any] = {
        "purposeId": purpose_id,
        "status": status,
        "state": 1,
        "isGlobal": False,
        "startTime": start_time,
        "endTime": start_time + 86_400,
        **extra,
    }
    if attribute_id is not None:
        record["attributeId"] = attribute_id
    if access_type_id is not None:
        record["accessTypeId"] = access_type_id
    return record


def catalog(*purposes: dict[str, Any], consents: list[dict[str, Any]] | None = None) -> dict:
    return {
        "purposes": {entry["id"]: entry for entry in purposes},
        "consents": consents or [],
    }


class FakeDPCMClient:
    """In-memory consent service client for testing."""

    def __init__(
        self,
        approval: Any = None,
        catalog_response: Any = None,
        error: Exception | None = None,
    ) -> None:
        self.approval = approval if approval is not None else []
        self.catalog_response = catalog_response if catalog_response is not None else {}
        self.error = error
        self.calls: list[tuple[str, Any]] = []

    async def request_approval(self, items: Any) -> Any:
        self.calls.append(("request_approval", items))
        if self.error is not None:
            raise self.error
        return self.approval

    async def get_consent_metadata(self, purpose_ids: list[str]) -> Any:
        self.calls.append(("get_consent_metadata", purpose_ids))
        if self.error is not None:
            raise self.error
        return self.catalog_response

    async def process_consent_metadata(
        self, requested_keys: Collection[str], response: Any
    ) -> ConsentMetadata:
        self.calls.append(("process_consent_metadata", set(requested_keys)))
        return build_consent_metadata(requested_keys, response)
