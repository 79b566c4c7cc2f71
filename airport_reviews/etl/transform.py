"""Utilities for transforming raw CSV rows into review records."""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from airport_reviews.models import ReviewRecord, Scalar

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")
_BOOL_VALUES = {"true": True, "false": False}

# Tried in order after ISO-8601; numeric day/month forms are month-first.
_DATE_FORMATS = (
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%d %B %Y",
    "%d %b %Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%Y/%m/%d",
    "%Y-%m-%d %H:%M:%S",
)


def coerce_value(value: Any) -> Optional[Scalar]:
    """Type-check a single CSV cell; ``None`` means the cell is empty."""
    if value is None:
        return None
    if isinstance(value, (bool, int, float)):
        return value
    text = str(value).strip()
    if not text:
        return None
    lowered = text.lower()
    if lowered in _BOOL_VALUES:
        return _BOOL_VALUES[lowered]
    if _INT_RE.match(text):
        return int(text)
    if _FLOAT_RE.match(text):
        return float(text)
    return text


def coerce_row(raw_row: Mapping[Any, Any]) -> Dict[str, Scalar]:
    fields: Dict[str, Scalar] = {}
    for key, value in raw_row.items():
        # csv.DictReader files surplus cells under a None key.
        if key is None:
            continue
        name = str(key).strip()
        if not name:
            continue
        coerced = coerce_value(value)
        if coerced is not None:
            fields[name] = coerced
    return fields


def parse_review_date(value: Any) -> Optional[datetime]:
    """Parse a free-form review date into an aware UTC datetime.

    Numbers are read as epoch milliseconds. Anything that cannot be parsed
    returns ``None``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    text = str(value).strip()
    if not text:
        return None

    parsed: Optional[datetime] = None
    iso_text = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        parsed = datetime.fromisoformat(iso_text)
    except ValueError:
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        logger.debug("Unparsable review date: %r", text)
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _extract_rating(value: Optional[Scalar]) -> Optional[Scalar]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def normalize_row(raw_row: Mapping[Any, Any]) -> Optional[ReviewRecord]:
    """Build a ReviewRecord from a raw CSV row, or ``None`` when it has no airport."""
    fields = coerce_row(raw_row)

    airport_name = fields.get("airport_name")
    if airport_name is None or not str(airport_name).strip():
        return None

    return ReviewRecord(
        airport_name=str(airport_name).strip(),
        date=parse_review_date(fields.get("date")),
        overall_rating=_extract_rating(fields.get("overall_rating")),
        recommended=bool(fields.get("recommended", False)),
        fields=fields,
    )
