from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest
from verify_privacy.core.config import get_settings
from verify_privacy.domain.services.privacy import Privacy

from tests.utils import FakeDPCMClient

TENANT_URL = "https://tenant.verify.example.com"
ACCESS_TOKEN = "test-access-token"


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def tenant_config() -> dict[str, str]:
    return {"tenantUrl": TENANT_URL}


@pytest.fixture()
def auth_config() -> dict[str, str]:
    return {"accessToken": ACCESS_TOKEN}


@pytest.fixture()
def subject_context() -> dict[str, Any]:
    return {"subjectId": "user-123", "isExternalSubject": False, "ipAddress": "10.0.0.8"}


@pytest.fixture()
def fake_client() -> FakeDPCMClient:
    return FakeDPCMClient()


@pytest.fixture()
def privacy(
    tenant_config: dict[str, str],
    auth_config: dict[str, str],
    subject_context: dict[str, Any],
    fake_client: FakeDPCMClient,
) -> Privacy:
    return Privacy(tenant_config, auth_config, subject_context, client=fake_client)
