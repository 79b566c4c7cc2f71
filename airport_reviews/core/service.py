"""Review operations exposed to the HTTP and CLI entrypoints."""

from typing import Any, Iterable, List, Mapping, Optional

from airport_reviews.core.dedup import Deduplicator
from airport_reviews.core.stats import filtered_sorted_reviews, global_stats, per_airport_stats
from airport_reviews.core.store import ReviewStore
from airport_reviews.etl.pipeline import IngestionOutcome, IngestionPipeline
from airport_reviews.models import AggregateStats, AirportReviewCount, ReviewRecord


class ReviewService:
    """Owns one review store and its dedup index.

    Unknown airports come back as ``None`` from the lookups rather than as
    empty results.
    """

    def __init__(self, store: Optional[ReviewStore] = None, deduplicator: Optional[Deduplicator] = None) -> None:
        self.store = store if store is not None else ReviewStore()
        self.deduplicator = deduplicator if deduplicator is not None else Deduplicator()

    def ingest(self, rows: Iterable[Mapping[Any, Any]], *, source: str = "upload") -> IngestionOutcome:
        pipeline = IngestionPipeline(self.store, self.deduplicator, source=source)
        return pipeline.run(rows)

    def get_airport_reviews(
        self, airport_name: str, rating_threshold: Optional[float] = None
    ) -> Optional[List[ReviewRecord]]:
        records = self.store.get(airport_name)
        if records is None:
            return None
        return filtered_sorted_reviews(records, rating_threshold)

    def get_airport_stats(self, airport_name: str) -> Optional[AggregateStats]:
        records = self.store.get(airport_name)
        if records is None:
            return None
        return per_airport_stats(airport_name, records)

    def get_all_stats(self) -> List[AirportReviewCount]:
        return global_stats(self.store)
