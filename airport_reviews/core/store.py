"""In-memory storage of accepted reviews, grouped per airport."""

import logging
import threading
from typing import Dict, List, Optional, Set, Tuple

from airport_reviews.models import ReviewRecord

logger = logging.getLogger(__name__)


class _Bucket:
    __slots__ = ("lock", "records")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.records: List[ReviewRecord] = []


class ReviewStore:
    """Append-only review buckets keyed by airport name.

    Appends to one airport serialize on that bucket's lock; the registry lock
    is held only long enough to look up or create a bucket, so different
    airports never wait on each other.
    """

    def __init__(self) -> None:
        self._buckets: Dict[str, _Bucket] = {}
        self._registry_lock = threading.Lock()

    def _bucket_for(self, airport_name: str) -> _Bucket:
        with self._registry_lock:
            bucket = self._buckets.get(airport_name)
            if bucket is None:
                bucket = _Bucket()
                self._buckets[airport_name] = bucket
                logger.debug("Created bucket for airport %s", airport_name)
            return bucket

    def append(self, record: ReviewRecord) -> None:
        if not record.airport_name:
            raise ValueError("airport_name is required to store a review")
        bucket = self._bucket_for(record.airport_name)
        with bucket.lock:
            bucket.records.append(record)

    def get(self, airport_name: str) -> Optional[Tuple[ReviewRecord, ...]]:
        """Snapshot of an airport's reviews in acceptance order, or ``None``."""
        with self._registry_lock:
            bucket = self._buckets.get(airport_name)
        if bucket is None:
            return None
        with bucket.lock:
            return tuple(bucket.records)

    def all_airport_names(self) -> Set[str]:
        with self._registry_lock:
            return set(self._buckets)

    def __contains__(self, airport_name: object) -> bool:
        with self._registry_lock:
            return airport_name in self._buckets

    def __len__(self) -> int:
        with self._registry_lock:
            buckets = list(self._buckets.values())
        total = 0
        for bucket in buckets:
            with bucket.lock:
                total += len(bucket.records)
        return total
