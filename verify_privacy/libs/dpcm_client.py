"""
DPCM client for IBM Security Verify privacy endpoints.

Provides async HTTP client for data-usage approval and consent metadata
with retry logic and exponential backoff.
"""

from __future__ import annotations

import asyncio
from collections.abc import Collection, Iterable, Mapping
from typing import Any, Protocol

import httpx
import structlog
from pydantic import ValidationError
from verify_privacy.core.config import get_settings
from verify_privacy.domain.catalog import build_consent_metadata
from verify_privacy.domain.models import RequestItem, SubjectContext
from verify_privacy.schemas.consent import CatalogResponse, ConsentMetadata

logger = structlog.get_logger(__name__)

APPROVAL_PATH = "/v1.0/privacy/data-usage-approval"
PRESENTATION_PATH = "/v1.0/privacy/data-subject-presentation"


class DPCMClientError(Exception):
    """Base exception for DPCM client errors."""


class DPCMTimeoutError(DPCMClientError):
    """Raised when request times out."""


class DPCMAPIError(DPCMClientError):
    """Raised for non-success responses; ``detail`` holds the parsed error body."""

    def __init__(
        self, message: str, status_code: int | None = None, detail: Any = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class DPCMResponseError(DPCMClientError):
    """Raised when a response body cannot be decoded."""


class DPCMClientProtocol(Protocol):
    """Protocol for the consent service client (allows mocking)."""

    async def request_approval(self, items: Iterable[RequestItem | Mapping[str, Any]]) -> Any:
        """Ask the service to approve each item."""
        ...

    async def get_consent_metadata(self, purpose_ids: list[str]) -> Any:
        """Fetch the catalog and consents for the purposes."""
        ...

    async def process_consent_metadata(
        self, requested_keys: Collection[str], response: Any
    ) -> ConsentMetadata:
        """Filter and bucket a catalog response."""
        ...


def _error_detail(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


class DPCMClient:
    """Async DPCM API client with retry logic."""

    def __init__(
        self,
        tenant_url: str,
        access_token: str,
        context: SubjectContext | Mapping[str, Any] | None = None,
        timeout_seconds: int | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = tenant_url.rstrip("/")
        self.access_token = access_token
        self.context = SubjectContext.from_value(context)

        # Environment settings are only read for values not passed in
        if None in (timeout_seconds, max_retries, backoff_seconds):
            settings = get_settings()
            if timeout_seconds is None:
                timeout_seconds = settings.request_timeout_seconds
            if max_retries is None:
                max_retries = settings.max_retries
            if backoff_seconds is None:
                backoff_seconds = settings.retry_backoff_seconds

        self.timeout = timeout_seconds
        self.max_retries = max(1, max_retries)
        self.backoff = backoff_seconds
        self._transport = transport

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    async def request_approval(self, items: Iterable[RequestItem | Mapping[str, Any]]) -> Any:
        """Request approval to use each item for its purpose and access type."""
        payload = {
            "trace": False,
            "items": [RequestItem.from_value(item).to_payload() for item in items],
            **self.context.to_payload(),
        }
        return await self._post(APPROVAL_PATH, payload)

    async def get_consent_metadata(self, purpose_ids: list[str]) -> Any:
        """Fetch purposes, attributes, access types and current consents."""
        payload = {"purposeId": list(purpose_ids), **self.context.to_payload()}
        return await self._post(PRESENTATION_PATH, payload)

    async def process_consent_metadata(
        self, requested_keys: Collection[str], response: Any
    ) -> ConsentMetadata:
        """Keep only requested slots and merge them with consent state."""
        if not isinstance(response, Mapping):
            raise DPCMResponseError(
                f"Consent metadata must be an object. Received {type(response).__name__}"
            )
        try:
            catalog = CatalogResponse.model_validate(response)
        except ValidationError as exc:
            raise DPCMResponseError(f"Invalid consent metadata: {exc}") from exc
        return build_consent_metadata(requested_keys, catalog)

    async def _post(self, path: str, payload: dict[str, Any]) -> Any:
        """
        POST with retry logic.

        Retries timeouts, connection failures, 429 and 5xx responses with
        exponential backoff; other client errors fail immediately.
        """
        url = f"{self.base_url}{path}"
        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout, transport=self._transport
                ) as client:
                    response = await client.post(url, headers=self.headers, json=payload)

                if response.status_code in (200, 201):
                    try:
                        return response.json()
                    except ValueError as exc:
                        raise DPCMResponseError(
                            f"Response from {path} was not valid JSON"
                        ) from exc

                error = DPCMAPIError(
                    f"DPCM error {response.status_code} on {path}",
                    status_code=response.status_code,
                    detail=_error_detail(response),
                )
                if response.status_code != 429 and response.status_code < 500:
                    raise error

                last_error = error
                await logger.awarning(
                    "dpcm_retryable_status",
                    path=path,
                    status_code=response.status_code,
                    attempt=attempt + 1,
                    max_retries=self.max_retries,
                )

            except httpx.TimeoutException:
                last_error = DPCMTimeoutError(
                    f"Request to {path} timed out (attempt {attempt + 1})"
                )
                await logger.awarning(
                    "dpcm_timeout",
                    path=path,
                    attempt=attempt + 1,
                    timeout_seconds=self.timeout,
                )

            except httpx.RequestError as e:
                last_error = DPCMClientError(f"Request failed: {e}")
                await logger.awarning(
                    "dpcm_request_error",
                    path=path,
                    error=str(e),
                    attempt=attempt + 1,
                )

            if attempt < self.max_retries - 1:
                await asyncio.sleep(self.backoff * 2**attempt)

        # All retries exhausted
        raise last_error or DPCMClientError("All retries exhausted")
