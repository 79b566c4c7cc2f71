"""Core data models shared by the review ingestion pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

Scalar = Union[str, int, float, bool]


def _iso_timestamp(value: datetime) -> str:
    """UTC with millisecond precision and a ``Z`` suffix, e.g. ``2015-07-28T00:00:00.000Z``."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True, slots=True)
class ReviewRecord:
    """Normalized airport review accepted from a CSV row.

    ``fields`` holds every coerced column exactly as it arrived and is the
    content used for fingerprinting; the typed attributes are views over it.
    """

    airport_name: str
    date: Optional[datetime] = None
    overall_rating: Optional[Union[int, float]] = None
    recommended: bool = False
    fields: Mapping[str, Scalar] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.fields, MappingProxyType):
            object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def to_dict(self) -> Dict[str, Any]:
        entry: Dict[str, Any] = dict(self.fields)
        entry["airport_name"] = self.airport_name
        entry["date"] = _iso_timestamp(self.date) if self.date is not None else None
        entry["recommended"] = self.recommended
        if self.overall_rating is None:
            entry.pop("overall_rating", None)
        return entry


@dataclass(frozen=True, slots=True)
class AggregateStats:
    airport_name: str
    review_count: int
    recommendation_count: int
    average_overall_rating: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "airportName": self.airport_name,
            "reviewCount": self.review_count,
            "recommendationCount": self.recommendation_count,
            "averageOverallRating": self.average_overall_rating,
        }


@dataclass(frozen=True, slots=True)
class AirportReviewCount:
    airport_name: str
    review_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"airportName": self.airport_name, "reviewCount": self.review_count}
