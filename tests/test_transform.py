from datetime import datetime, timezone

from airport_reviews.etl import transform


def test_coerce_value_types():
    assert transform.coerce_value("7") == 7
    assert transform.coerce_value("-3") == -3
    assert transform.coerce_value("4.5") == 4.5
    assert transform.coerce_value("1e2") == 100.0
    assert transform.coerce_value("TRUE") is True
    assert transform.coerce_value("false") is False
    assert transform.coerce_value("  Heathrow  ") == "Heathrow"
    assert transform.coerce_value("nan") == "nan"
    assert transform.coerce_value("") is None
    assert transform.coerce_value("   ") is None
    assert transform.coerce_value(None) is None
    assert transform.coerce_value(3.0) == 3.0


def test_coerce_row_drops_empty_and_surplus_cells():
    row = {"airport_name": "a", "content": "", " title ": "Nice", None: ["x", "y"], "": "z"}
    assert transform.coerce_row(row) == {"airport_name": "a", "title": "Nice"}


def test_normalize_row_builds_record():
    record = transform.normalize_row(
        {
            "airport_name": "london-heathrow-airport",
            "date": "2015-07-28",
            "overall_rating": "8",
            "recommended": "1",
            "author": "Jane",
        }
    )

    assert record is not None
    assert record.airport_name == "london-heathrow-airport"
    assert record.date == datetime(2015, 7, 28, tzinfo=timezone.utc)
    assert record.overall_rating == 8
    assert record.recommended is True
    assert record.fields["author"] == "Jane"
    assert record.fields["date"] == "2015-07-28"


def test_normalize_row_rejects_missing_airport_name():
    assert transform.normalize_row({"date": "2015-07-28", "overall_rating": "8"}) is None
    assert transform.normalize_row({"airport_name": "   ", "overall_rating": "8"}) is None


def test_normalize_row_drops_malformed_rating():
    record = transform.normalize_row({"airport_name": "a", "overall_rating": "eight"})
    assert record.overall_rating is None
    assert "overall_rating" not in record.to_dict()

    flagged = transform.normalize_row({"airport_name": "a", "overall_rating": "true"})
    assert flagged.overall_rating is None


def test_normalize_row_recommended_truthiness():
    assert transform.normalize_row({"airport_name": "a", "recommended": "0"}).recommended is False
    assert transform.normalize_row({"airport_name": "a"}).recommended is False
    assert transform.normalize_row({"airport_name": "a", "recommended": "yes"}).recommended is True
    assert transform.normalize_row({"airport_name": "a", "recommended": "false"}).recommended is False


def test_normalize_row_keeps_row_with_bad_date():
    record = transform.normalize_row({"airport_name": "a", "date": "sometime last year"})
    assert record is not None
    assert record.date is None
    assert record.to_dict()["date"] is None


def test_parse_review_date_formats():
    expected = datetime(2014, 3, 9, tzinfo=timezone.utc)
    assert transform.parse_review_date("2014-03-09") == expected
    assert transform.parse_review_date("03/09/2014") == expected
    assert transform.parse_review_date("9 March 2014") == expected
    assert transform.parse_review_date("Mar 9, 2014") == expected
    assert transform.parse_review_date("2014-03-09T00:00:00Z") == expected
    assert transform.parse_review_date("2014-03-09T02:00:00+02:00") == expected
    assert transform.parse_review_date(int(expected.timestamp() * 1000)) == expected


def test_parse_review_date_invalid():
    assert transform.parse_review_date(None) is None
    assert transform.parse_review_date("") is None
    assert transform.parse_review_date("not a date") is None
    assert transform.parse_review_date(True) is None


def test_parse_review_date_reads_numeric_dates_month_first():
    assert transform.parse_review_date("03/09/2014") == datetime(2014, 3, 9, tzinfo=timezone.utc)
    assert transform.parse_review_date("03-09-2014") == datetime(2014, 3, 9, tzinfo=timezone.utc)
    assert transform.parse_review_date("12/31/2014") == datetime(2014, 12, 31, tzinfo=timezone.utc)
    # No thirteenth month, so a day-first reading is not attempted.
    assert transform.parse_review_date("31/12/2014") is None


def test_to_dict_renders_dates_as_utc_milliseconds():
    record = transform.normalize_row({"airport_name": "a", "date": "2015-07-28T10:30:00+02:00"})
    assert record.to_dict()["date"] == "2015-07-28T08:30:00.000Z"

    dated = transform.normalize_row({"airport_name": "a", "date": "2015-07-28"})
    assert dated.to_dict()["date"] == "2015-07-28T00:00:00.000Z"
