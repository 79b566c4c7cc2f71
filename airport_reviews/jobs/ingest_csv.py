"""CLI job to ingest review CSVs and print the resulting statistics."""

import argparse
import json
import logging
import sys
from typing import List, Optional, Sequence

from airport_reviews.core.config import get_settings
from airport_reviews.core.service import ReviewService
from airport_reviews.etl.pipeline import IngestionOutcome, IngestionState
from airport_reviews.vendors.csv_source import rows_from_stream, rows_from_url

logger = logging.getLogger(__name__)


def _is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def ingest_source(service: ReviewService, source: str) -> IngestionOutcome:
    settings = get_settings()
    if _is_url(source):
        rows = rows_from_url(
            source,
            timeout=settings.fetch_timeout,
            chunk_size=settings.chunk_size,
            encoding=settings.csv_encoding,
        )
        return service.ingest(rows, source=source)

    try:
        fh = open(source, "rb")
    except OSError as exc:
        logger.error("Cannot open %s: %s", source, exc)
        return IngestionOutcome(state=IngestionState.FAILED, error=f"cannot open {source}: {exc}")
    with fh:
        rows = rows_from_stream(fh, chunk_size=settings.chunk_size, encoding=settings.csv_encoding)
        return service.ingest(rows, source=source)


def run_ingest_job(
    *,
    sources: Sequence[str],
    airport: Optional[str] = None,
    service: Optional[ReviewService] = None,
) -> int:
    service = service or ReviewService()
    failed: List[str] = []

    for source in sources:
        outcome = ingest_source(service, source)
        if not outcome.ok:
            failed.append(source)

    if airport:
        stats = service.get_airport_stats(airport)
        if stats is None:
            logger.error("No reviews stored for airport %s", airport)
            return 2
        print(json.dumps(stats.to_dict(), indent=2))
    else:
        print(json.dumps([entry.to_dict() for entry in service.get_all_stats()], indent=2))

    if failed:
        logger.error("Failed sources: %s", ", ".join(failed))
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ingest airport review CSVs and print statistics")
    parser.add_argument("sources", nargs="+", help="CSV file paths or http(s) URLs, ingested in order")
    parser.add_argument("--airport", dest="airport", help="Print stats for this airport only")
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=get_settings().log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s - %(message)s")

    sys.exit(run_ingest_job(sources=args.sources, airport=args.airport))


if __name__ == "__main__":
    main()
