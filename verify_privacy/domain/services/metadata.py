"""Request normalization for consent metadata lookups."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from verify_privacy.domain.models import NormalizedRequest, RequestItem


def normalize_items(items: Iterable[RequestItem | Mapping[str, Any]]) -> NormalizedRequest:
    """
    Apply the default access type and derive the purpose and slot-key sets.

    Returns new items; the caller's objects are left untouched.
    """
    normalized = NormalizedRequest()
    seen_purposes: set[str] = set()

    for raw in items:
        item = RequestItem.from_value(raw).with_default_access_type()
        normalized.items.append(item)

        if item.purpose_id not in seen_purposes:
            seen_purposes.add(item.purpose_id)
            normalized.purposes.append(item.purpose_id)

        normalized.requested_keys.add(item.key)

    return normalized
