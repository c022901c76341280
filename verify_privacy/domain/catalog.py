"""
Consent catalog normalization.

Expands the purposes returned by the data-subject-presentation endpoint into
one record per (purpose, attribute, access type) slot, keeps only the slots the
caller asked about, and merges each with the subject's matching consent.
"""

from __future__ import annotations

from collections.abc import Collection, Iterator
from typing import Any

from verify_privacy.domain.models import DEFAULT_ACCESS_TYPE, ConsentStatus, slot_key
from verify_privacy.schemas.consent import (
    CatalogAccessType,
    CatalogPurpose,
    CatalogResponse,
    ConsentMetadata,
    ConsentRecord,
    MetadataRecord,
)

_IMPLICIT_ACCESS_TYPES = (CatalogAccessType(id=DEFAULT_ACCESS_TYPE),)


def consent_key(consent: ConsentRecord) -> str:
    return slot_key(
        consent.purpose_id,
        consent.attribute_id,
        consent.access_type_id or DEFAULT_ACCESS_TYPE,
    )


def _prefer(current: ConsentRecord | None, candidate: ConsentRecord) -> ConsentRecord:
    if current is None:
        return candidate
    if current.is_active != candidate.is_active:
        return candidate if candidate.is_active else current
    if (candidate.start_time or 0) >= (current.start_time or 0):
        return candidate
    return current


def index_consents(consents: list[ConsentRecord]) -> dict[str, ConsentRecord]:
    """Map slot keys to the consent that decides their status."""
    indexed: dict[str, ConsentRecord] = {}
    for consent in consents:
        key = consent_key(consent)
        indexed[key] = _prefer(indexed.get(key), consent)
    return indexed


def consent_status(consent: ConsentRecord | None) -> ConsentStatus:
    if consent is None:
        return ConsentStatus.NONE
    if consent.is_active:
        return ConsentStatus.ACTIVE
    return ConsentStatus.EXPIRED


def expand_purpose(purpose_id: str, purpose: CatalogPurpose) -> Iterator[MetadataRecord]:
    """Yield one record per slot the purpose defines."""
    purpose_access_types = purpose.access_types or list(_IMPLICIT_ACCESS_TYPES)

    for access_type in purpose_access_types:
        yield MetadataRecord(
            purpose_id=purpose_id,
            purpose_name=purpose.name,
            access_type_id=access_type.id,
            access_type=access_type.name,
            default_consent_duration=purpose.default_consent_duration,
            assent_ui_default=access_type.assent_ui_default,
        )

    for attribute in purpose.attributes:
        duration = attribute.default_consent_duration
        if duration is None:
            duration = purpose.default_consent_duration
        for access_type in attribute.access_types or purpose_access_types:
            yield MetadataRecord(
                purpose_id=purpose_id,
                purpose_name=purpose.name,
                access_type_id=access_type.id,
                access_type=access_type.name,
                attribute_id=attribute.id,
                attribute_name=attribute.name,
                default_consent_duration=duration,
                assent_ui_default=access_type.assent_ui_default,
            )


def record_key(record: MetadataRecord) -> str:
    return slot_key(record.purpose_id, record.attribute_id, record.access_type_id)


def build_consent_metadata(
    requested_keys: Collection[str], response: CatalogResponse | dict[str, Any]
) -> ConsentMetadata:
    """Filter the catalog to ``requested_keys`` and bucket it into eula/default."""
    catalog = (
        response
        if isinstance(response, CatalogResponse)
        else CatalogResponse.model_validate(response)
    )
    consents = index_consents(catalog.consents)
    metadata = ConsentMetadata()
    seen: set[str] = set()

    for purpose_key, purpose in catalog.purposes.items():
        purpose_id = purpose.id or purpose_key
        bucket = metadata.eula if purpose.is_eula else metadata.default
        for record in expand_purpose(purpose_id, purpose):
            key = record_key(record)
            if key not in requested_keys or key in seen:
                continue
            seen.add(key)

            consent = consents.get(key)
            record.consent = consent
            record.status = consent_status(consent)
            bucket.append(record)

    return metadata
