"""Shared library helpers."""

from verify_privacy.libs.dpcm_client import (
    DPCMAPIError,
    DPCMClient,
    DPCMClientError,
    DPCMClientProtocol,
    DPCMResponseError,
    DPCMTimeoutError,
)

__all__ = [
    "DPCMAPIError",
    "DPCMClient",
    "DPCMClientError",
    "DPCMClientProtocol",
    "DPCMResponseError",
    "DPCMTimeoutError",
]
