"""Pydantic schemas for DPCM catalog payloads and consent metadata records."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from verify_privacy.domain.models import ConsentStatus


class _WireModel(BaseModel):
    """Camel-case wire model that tolerates unknown fields."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# --- Catalog (data-subject-presentation response) ---


class CatalogAccessType(_WireModel):
    id: str
    name: str | None = None
    assent_ui_default: bool = Field(default=False, alias="assentUIDefault")

    @field_validator("assent_ui_default", mode="before")
    @classmethod
    def _none_assent(cls, value: Any) -> Any:
        return False if value is None else value


class CatalogAttribute(_WireModel):
    id: str
    name: str | None = None
    default_consent_duration: int | None = Field(default=None, alias="defaultConsentDuration")
    access_types: list[CatalogAccessType] = Field(default_factory=list, alias="accessTypes")

    @field_validator("access_types", mode="before")
    @classmethod
    def _none_access_types(cls, value: Any) -> Any:
        return value or []


class CatalogPurpose(_WireModel):
    id: str | None = None
    name: str | None = None
    category: str = "default"
    default_consent_duration: int | None = Field(default=None, alias="defaultConsentDuration")
    access_types: list[CatalogAccessType] = Field(default_factory=list, alias="accessTypes")
    attributes: list[CatalogAttribute] = Field(default_factory=list)

    @field_validator("category", mode="before")
    @classmethod
    def _none_category(cls, value: Any) -> Any:
        return "default" if value is None else value

    @field_validator("access_types", "attributes", mode="before")
    @classmethod
    def _none_lists(cls, value: Any) -> Any:
        return value or []

    @property
    def is_eula(self) -> bool:
        return self.category.lower() == "eula"


class CustomAttribute(_WireModel):
    key: str
    value: Any = None


class ConsentRecord(_WireModel):
    """A user consent record that may or may not be active.

    ``status``: 1 active, 2 expired, 3 inactive, 8 new consent required.
    ``state``: 1 allow, 2 deny, 3 opt-in, 4 opt-out, 5 transparent.
    """

    purpose_id: str = Field(alias="purposeId")
    attribute_id: str | None = Field(default=None, alias="attributeId")
    access_type_id: str | None = Field(default=None, alias="accessTypeId")
    attribute_value: str | None = Field(default=None, alias="attributeValue")
    start_time: int | None = Field(default=None, alias="startTime")
    end_time: int | None = Field(default=None, alias="endTime")
    is_global: bool | None = Field(default=None, alias="isGlobal")
    status: int | None = None
    state: int | None = None
    geo_ip: str | None = Field(default=None, alias="geoIP")
    custom_attributes: list[CustomAttribute] = Field(
        default_factory=list, alias="customAttributes"
    )

    @field_validator("custom_attributes", mode="before")
    @classmethod
    def _none_custom_attributes(cls, value: Any) -> Any:
        return value or []

    @property
    def is_active(self) -> bool:
        return self.status == 1


class CatalogResponse(_WireModel):
    purposes: dict[str, CatalogPurpose] = Field(default_factory=dict)
    consents: list[ConsentRecord] = Field(default_factory=list)

    @field_validator("purposes", mode="before")
    @classmethod
    def _none_purposes(cls, value: Any) -> Any:
        return value or {}

    @field_validator("consents", mode="before")
    @classmethod
    def _consent_values(cls, value: Any) -> Any:
        # The service may key consents by id
        if value is None:
            return []
        if isinstance(value, dict):
            return list(value.values())
        return value


# --- Normalized metadata ---


class MetadataRecord(_WireModel):
    purpose_id: str = Field(alias="purposeId")
    purpose_name: str | None = Field(default=None, alias="purposeName")
    access_type_id: str = Field(alias="accessTypeId")
    access_type: str | None = Field(default=None, alias="accessType")
    attribute_id: str | None = Field(default=None, alias="attributeId")
    attribute_name: str | None = Field(default=None, alias="attributeName")
    default_consent_duration: int | None = Field(default=None, alias="defaultConsentDuration")
    assent_ui_default: bool = Field(default=False, alias="assentUIDefault")
    status: ConsentStatus = ConsentStatus.NONE
    consent: ConsentRecord | None = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ConsentMetadata(_WireModel):
    eula: list[MetadataRecord] = Field(default_factory=list)
    default: list[MetadataRecord] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "eula": [record.to_dict() for record in self.eula],
            "default": [record.to_dict() for record in self.default],
        }
