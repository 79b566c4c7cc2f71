"""Aggregate statistics and listings over stored reviews."""

from typing import Iterable, List, Optional, Sequence

from airport_reviews.core.store import ReviewStore
from airport_reviews.models import AggregateStats, AirportReviewCount, ReviewRecord


def per_airport_stats(airport_name: str, records: Sequence[ReviewRecord]) -> AggregateStats:
    """Count reviews and recommendations and average the ratings that are present.

    The average is a running mean in encounter order; unrated reviews do not
    move it. With no rated review at all it stays at 0.
    """
    recommendation_count = 0
    average = 0.0
    rated = 0
    for record in records:
        if record.recommended is True:
            recommendation_count += 1
        if record.overall_rating is not None:
            average = (rated * average + record.overall_rating) / (rated + 1)
            rated += 1

    return AggregateStats(
        airport_name=airport_name,
        review_count=len(records),
        recommendation_count=recommendation_count,
        average_overall_rating=average,
    )


def global_stats(store: ReviewStore) -> List[AirportReviewCount]:
    """Review counts per airport, largest first; equal counts by name."""
    counts = []
    for airport_name in store.all_airport_names():
        records = store.get(airport_name)
        if records is None:
            continue
        counts.append(AirportReviewCount(airport_name=airport_name, review_count=len(records)))
    counts.sort(key=lambda entry: (-entry.review_count, entry.airport_name))
    return counts


def _date_sort_key(record: ReviewRecord) -> float:
    # Undated reviews rank as the oldest.
    if record.date is None:
        return float("-inf")
    return record.date.timestamp()


def filtered_sorted_reviews(
    records: Iterable[ReviewRecord], rating_threshold: Optional[float] = None
) -> List[ReviewRecord]:
    selected = list(records)
    if rating_threshold is not None:
        selected = [
            record
            for record in selected
            if record.overall_rating is not None and record.overall_rating >= rating_threshold
        ]
    selected.sort(key=_date_sort_key, reverse=True)
    return selected
