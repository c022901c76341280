#!/usr/bin/env python3
"""
Run a privacy assessment and a consent metadata lookup against the tenant.

Usage:
    python scripts/check_consent.py <purposeId>[:<attributeId>[:<accessTypeId>]] ...

Reads VERIFY_TENANT_URL and VERIFY_ACCESS_TOKEN from the environment or .env.
VERIFY_SUBJECT_ID optionally sets the data subject.
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
from pathlib import Path

# REQUIRED: Add parent directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from verify_privacy import ConfigurationError, Privacy, RequestItem, get_settings
from verify_privacy.core.logging import setup_logging


def parse_item(value: str) -> RequestItem:
    purpose_id, _, rest = value.partition(":")
    attribute_id, _, access_type_id = rest.partition(":")
    return RequestItem(
        purpose_id=purpose_id,
        attribute_id=attribute_id or None,
        access_type_id=access_type_id or None,
    )


async def run(items: list[RequestItem]) -> None:
    settings = get_settings()
    setup_logging(settings.log_level)

    context = {}
    subject_id = os.environ.get("VERIFY_SUBJECT_ID")
    if subject_id:
        context["subjectId"] = subject_id

    privacy = Privacy.from_settings(settings, context)

    print("=" * 60)
    print(f"  TENANT: {privacy.tenant_url}")
    print("=" * 60)

    assessment = await privacy.assess(items)
    print("\nAssessment:")
    print(json.dumps(assessment.to_dict(), indent=2))

    metadata = await privacy.get_consent_metadata(items)
    print("\nConsent metadata:")
    print(json.dumps(metadata.to_dict(), indent=2))


def main() -> None:
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    items = [parse_item(arg) for arg in sys.argv[1:]]
    try:
        asyncio.run(run(items))
    except ConfigurationError as e:
        print(f"❌ {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
