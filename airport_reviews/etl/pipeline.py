"""Ingestion pipeline driving raw CSV rows into the review store."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from airport_reviews.core.dedup import Deduplicator
from airport_reviews.core.store import ReviewStore
from airport_reviews.etl.transform import normalize_row

logger = logging.getLogger(__name__)


class StructuralIngestionError(RuntimeError):
    """Raised by a row source when the stream itself is broken or unreachable."""


class IngestionState(str, enum.Enum):
    RECEIVING = "receiving"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class IngestionOutcome:
    state: IngestionState
    rows_seen: int = 0
    accepted: int = 0
    duplicates: int = 0
    rejected: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state is IngestionState.COMPLETED

    def to_dict(self) -> dict:
        payload = {
            "status": self.state.value,
            "rows": self.rows_seen,
            "accepted": self.accepted,
            "duplicates": self.duplicates,
            "rejected": self.rejected,
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload


class IngestionPipeline:
    """Consumes one row stream; reports completion or failure exactly once.

    Rejected and duplicate rows are counted and skipped. Only a
    StructuralIngestionError from the row source fails the run, and rows
    stored before the failure are kept.
    """

    def __init__(self, store: ReviewStore, deduplicator: Deduplicator, *, source: str = "upload") -> None:
        self.store = store
        self.deduplicator = deduplicator
        self.source = source
        self.state = IngestionState.RECEIVING
        self._outcome: Optional[IngestionOutcome] = None

    def _process_row(self, raw_row: Mapping[Any, Any], counters: dict) -> None:
        record = normalize_row(raw_row)
        if record is None:
            counters["rejected"] += 1
            logger.debug("Skipping row without airport_name from %s", self.source)
            return
        if not self.deduplicator.should_accept(record):
            counters["duplicates"] += 1
            return
        self.store.append(record)
        counters["accepted"] += 1

    def run(self, rows: Iterable[Mapping[Any, Any]]) -> IngestionOutcome:
        if self._outcome is not None:
            raise RuntimeError(f"pipeline for {self.source} already finished as {self.state.value}")

        logger.info("Ingesting reviews from %s", self.source)
        counters = {"rows_seen": 0, "accepted": 0, "duplicates": 0, "rejected": 0}
        error: Optional[str] = None
        try:
            for raw_row in rows:
                counters["rows_seen"] += 1
                self._process_row(raw_row, counters)
        except StructuralIngestionError as exc:
            error = str(exc)
            self.state = IngestionState.FAILED
            logger.error(
                "Ingestion from %s failed after %d rows (%d stored): %s",
                self.source,
                counters["rows_seen"],
                counters["accepted"],
                exc,
            )
        else:
            self.state = IngestionState.COMPLETED
            logger.info(
                "Ingested %s: rows=%d accepted=%d duplicates=%d rejected=%d",
                self.source,
                counters["rows_seen"],
                counters["accepted"],
                counters["duplicates"],
                counters["rejected"],
            )

        self._outcome = IngestionOutcome(state=self.state, error=error, **counters)
        return self._outcome
