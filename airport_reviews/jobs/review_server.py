"""HTTP entrypoint exposing CSV upload and airport review statistics."""

from __future__ import annotations

import logging
from typing import Any, Optional

from flask import Flask, jsonify, request

from airport_reviews.core.config import get_settings
from airport_reviews.core.service import ReviewService
from airport_reviews.etl.pipeline import IngestionOutcome
from airport_reviews.vendors.csv_source import rows_from_stream, rows_from_url

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App & service ----------
app = Flask(__name__)
_service = ReviewService()

# ---------- Routes ----------


@app.get("/")
def root() -> Any:
    """Simple root to avoid 404 on GET /"""
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    return (
        jsonify(
            {
                "status": "ok",
                "airports": len(_service.store.all_airport_names()),
                "reviews": len(_service.store),
            }
        ),
        200,
    )


@app.post("/api/upload")
def upload_csv() -> Any:
    """
    Ingest a CSV of airport reviews.
    Either JSON/form field ``url`` pointing at a remote CSV, or a multipart
    ``file`` upload. The response is sent once the whole stream is consumed.
    """
    settings = get_settings()
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}
    url = payload.get("url") or request.form.get("url")

    if url:
        url = str(url).strip()
        if not url.lower().startswith(("http://", "https://")):
            return jsonify({"error": "url must be an http(s) URL"}), 400
        logger.info("Handle CSV from %s", url)
        rows = rows_from_url(
            url,
            timeout=settings.fetch_timeout,
            chunk_size=settings.chunk_size,
            encoding=settings.csv_encoding,
        )
        return _ingest_response(_service.ingest(rows, source=url))

    upload = request.files.get("file")
    if upload is None:
        return jsonify({"error": "a CSV file or url is required"}), 400

    logger.info("Handle file %s", upload.filename)
    rows = rows_from_stream(upload.stream, chunk_size=settings.chunk_size, encoding=settings.csv_encoding)
    return _ingest_response(_service.ingest(rows, source=upload.filename or "upload"))


@app.get("/api/all/stats")
def all_stats() -> Any:
    return jsonify([entry.to_dict() for entry in _service.get_all_stats()]), 200


@app.get("/api/<airport_name>/stats")
def airport_stats(airport_name: str) -> Any:
    stats = _service.get_airport_stats(airport_name)
    if stats is None:
        return jsonify({"error": f"Review for the airport {airport_name} doesn't exist"}), 404
    return jsonify(stats.to_dict()), 200


@app.get("/api/<airport_name>/reviews")
def airport_reviews(airport_name: str) -> Any:
    threshold_raw = request.args.get("ratingThreshold")
    rating_threshold: Optional[float] = None
    if threshold_raw:
        try:
            rating_threshold = float(threshold_raw)
        except (TypeError, ValueError):
            return jsonify({"error": "ratingThreshold must be numeric"}), 400

    reviews = _service.get_airport_reviews(airport_name, rating_threshold)
    if reviews is None:
        return jsonify({"error": f"Review for the airport {airport_name} doesn't exist"}), 404
    return jsonify([record.to_dict() for record in reviews]), 200


# ---------- Internals ----------


def _ingest_response(outcome: IngestionOutcome) -> Any:
    if not outcome.ok:
        return jsonify({"error": f"Error has been occurred: {outcome.error}", "data": outcome.to_dict()}), 500
    return jsonify({"message": "CSV has been parsed successfully", "data": outcome.to_dict()}), 200


def main() -> None:
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level)
    logger.info("[BOOT] Binding on 0.0.0.0:%d", settings.port)
    app.run(host="0.0.0.0", port=settings.port, threaded=True)


if __name__ == "__main__":
    main()
