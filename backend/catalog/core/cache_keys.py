"""Cache Key Generator — deterministic fingerprints for filter/pagination payloads.

Invariants:
    - Same semantic payload (any key insertion order) → same key, always
    - Any differing scalar → different key (sha256; a collision is a bug)
    - Output format: "<namespace>:<64 hex chars>"
    - Pure: no IO, no clock, no randomness

Design Decisions:
    - Canonicalize first, then json.dumps(sort_keys=True): sets and tuples have
      no JSON form, so they are normalized to sorted lists / lists up front
    - Key is sha256 hex of the canonical JSON: 64 chars however large the
      filter payload grows
"""

import hashlib
import json
from enum import Enum

from catalog.core.domain_types import CacheKey

QUERY_NAMESPACE = "marketplace:query"


def canonicalize(value: object) -> object:
    """Recursively normalize a payload into JSON-native, order-free form."""
    if isinstance(value, Enum):
        return canonicalize(value.value)
    if isinstance(value, dict):
        return {str(k): canonicalize(v) for k, v in sorted(value.items(), key=lambda kv: str(kv[0]))}
    if isinstance(value, (list, tuple)):
        return [canonicalize(v) for v in value]
    if isinstance(value, (set, frozenset)):
        items = [canonicalize(v) for v in value]
        return sorted(items, key=lambda v: json.dumps(v, sort_keys=True))
    return value


def canonical_json(payload: object) -> str:
    """Compact, key-sorted JSON of the canonical payload."""
    return json.dumps(
        canonicalize(payload), sort_keys=True, separators=(",", ":"),
        ensure_ascii=False, default=str,
    )


def generate_key(namespace: str, payload: object) -> CacheKey:
    digest = hashlib.sha256(canonical_json(payload).encode("utf-8")).hexdigest()
    return CacheKey(f"{namespace}:{digest}")


def query_cache_key(
    namespace: str, filters: dict, page: int, items_per_page: int,
) -> CacheKey:
    """Fingerprint for one orchestrator request."""
    return generate_key(namespace, {
        "filters": filters,
        "page": page,
        "items_per_page": items_per_page,
    })
