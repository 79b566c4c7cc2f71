"""Content fingerprinting and first-seen tracking for review records."""

import hashlib
import json
import threading
from typing import Set

from airport_reviews.models import ReviewRecord


def canonical_payload(record: ReviewRecord) -> str:
    return json.dumps(
        dict(record.fields),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def compute_fingerprint(record: ReviewRecord) -> str:
    """SHA-256 over the record's sorted, compact JSON content."""
    return hashlib.sha256(canonical_payload(record).encode("utf-8")).hexdigest()


class Deduplicator:
    """Accepts each distinct record content at most once for its lifetime."""

    def __init__(self) -> None:
        self._seen: Set[str] = set()
        self._lock = threading.Lock()

    def should_accept(self, record: ReviewRecord) -> bool:
        fingerprint = compute_fingerprint(record)
        with self._lock:
            if fingerprint in self._seen:
                return False
            self._seen.add(fingerprint)
        return True

    def __contains__(self, fingerprint: object) -> bool:
        with self._lock:
            return fingerprint in self._seen

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)
