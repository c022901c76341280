"""
Privacy assessment and consent metadata for IBM Security Verify.

Used to check whether requested attributes may be used for a purpose, and to
gather the metadata needed to build a consent experience.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

import structlog
from verify_privacy.core.config import Settings, get_settings, require
from verify_privacy.domain.models import (
    MalformedAssessment,
    MetadataStatus,
    OpaqueRemoteFailure,
    RemoteFailure,
    RemoteFailureWithPayload,
    RequestItem,
    SubjectContext,
    WrappedAssessment,
    WrappedMetadata,
)
from verify_privacy.domain.services.assessment import aggregate_status, decode_assessment
from verify_privacy.domain.services.metadata import normalize_items
from verify_privacy.libs.dpcm_client import DPCMAPIError, DPCMClient, DPCMClientProtocol

logger = structlog.get_logger(__name__)

RequestItems = Iterable[RequestItem | Mapping[str, Any]]


def remote_failure(exc: Exception) -> RemoteFailure:
    """Classify a collaborator failure by whether it carries an error body."""
    if isinstance(exc, DPCMAPIError) and exc.detail:
        return RemoteFailureWithPayload(detail=exc.detail)
    return OpaqueRemoteFailure(reason=str(exc))


class Privacy:
    """
    Privacy evaluation bound to one tenant and subject.

    ``config`` must hold ``tenantUrl`` and ``auth`` must hold ``accessToken``.
    ``context`` optionally carries ``subjectId``, ``isExternalSubject`` and
    ``ipAddress``; when used from a backend, the IP should be the user agent's
    address taken from the request headers.
    """

    def __init__(
        self,
        config: Mapping[str, Any],
        auth: Mapping[str, Any],
        context: SubjectContext | Mapping[str, Any] | None = None,
        *,
        client: DPCMClientProtocol | None = None,
    ) -> None:
        tenant_url = require(
            config, "tenantUrl", "Cannot find property 'tenantUrl' in configuration settings."
        )
        access_token = require(auth, "accessToken", "Cannot find property 'accessToken' in auth")

        self._config = MappingProxyType(dict(config))
        self._auth = MappingProxyType(dict(auth))
        self._context = SubjectContext.from_value(context)
        self._client: DPCMClientProtocol = client or DPCMClient(
            tenant_url, access_token, self._context
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        context: SubjectContext | Mapping[str, Any] | None = None,
    ) -> Privacy:
        settings = settings or get_settings()
        return cls(settings.tenant_config(), settings.auth_config(), context)

    @property
    def tenant_url(self) -> str:
        return self._config["tenantUrl"]

    @property
    def context(self) -> SubjectContext:
        return self._context

    async def assess(self, items: RequestItems) -> WrappedAssessment:
        """
        Evaluate the attributes requested for approval.

        The overall status is ``approved`` when approved items exist and none
        need consent, ``consent`` when any item needs consent, ``denied``
        otherwise, and ``error`` for malformed responses or failed requests.
        """
        try:
            payload = await self._client.request_approval(list(items))
        except Exception as exc:
            failure = remote_failure(exc)
            await self._log_failure("privacy_assess_failed", exc, failure)
            return WrappedAssessment.failed(failure)

        await logger.adebug("privacy_assess_response", assessment=payload)

        decoded = decode_assessment(payload)
        if isinstance(decoded, MalformedAssessment):
            await logger.awarning(
                "privacy_assess_malformed", received_type=decoded.actual_type
            )
            return WrappedAssessment.malformed(decoded.actual_type)

        status = aggregate_status(decoded.results)
        return WrappedAssessment(status=status, assessment=decoded.results)

    async def get_consent_metadata(self, items: RequestItems) -> WrappedMetadata:
        """
        Get consent metadata used to build the consent page for the subject.

        Items without an access type are looked up under ``default``.
        """
        try:
            request = normalize_items(items)
            await logger.adebug(
                "privacy_metadata_request",
                items=[item.to_payload() for item in request.items],
                purposes=request.purposes,
            )
            response = await self._client.get_consent_metadata(request.purposes)
            await logger.adebug("privacy_metadata_response", response=response)

            metadata = await self._client.process_consent_metadata(
                request.requested_keys, response
            )
        except Exception as exc:
            failure = remote_failure(exc)
            await self._log_failure("privacy_metadata_failed", exc, failure)
            return WrappedMetadata.failed(failure)

        await logger.adebug(
            "privacy_metadata_processed",
            eula=len(metadata.eula),
            default=len(metadata.default),
        )
        return WrappedMetadata(status=MetadataStatus.DONE, metadata=metadata)

    @staticmethod
    async def _log_failure(event: str, exc: Exception, failure: RemoteFailure) -> None:
        if isinstance(failure, RemoteFailureWithPayload):
            await logger.adebug(event, detail=failure.detail)
        else:
            await logger.adebug(event, error=str(exc), error_type=type(exc).__name__)
