"""
Content-addressed fingerprint of a canonical schema model.

The model is dumped with null, empty and default-valued fields omitted,
encoded as JSON with sorted keys and compact separators, and hashed with
SHA-256.  Because the canonical model is already order-independent, two
schemas that differ only in comments, whitespace or declaration order
share a fingerprint.
"""

from __future__ import annotations

import hashlib
import json

from protosign.canonical.model import CanonicalFile


def canonical_json(canonical: CanonicalFile) -> str:
    """Deterministic JSON encoding of ``canonical``."""
    payload = canonical.model_dump(mode="json", exclude_none=True, exclude_defaults=True)
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def compute_fingerprint(canonical: CanonicalFile) -> str:
    """Return the 64-character hex SHA-256 digest of ``canonical``."""
    return hashlib.sha256(canonical_json(canonical).encode("utf-8")).hexdigest()
