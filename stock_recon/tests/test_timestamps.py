from datetime import date, datetime, timedelta, timezone

import pytest

from stock_recon.data.models.timestamps import parse_timestamp

from .builders import IST, at


@pytest.mark.parametrize("value", [None, "", "   "])
def test_empty_values_are_none(value):
    assert parse_timestamp(value, IST) is None


def test_naive_iso_is_taken_in_reference_zone():
    assert parse_timestamp("2025-03-11T09:00:00", IST) == at(2025, 3, 11, 9)


def test_iso_offsets_and_utc_suffix_are_kept():
    parsed = parse_timestamp("2025-03-11T03:30:00Z", IST)
    assert parsed.utcoffset() == timedelta(0)
    assert parsed == at(2025, 3, 11, 9)
    assert parse_timestamp("2025-03-11T09:00:00+05:30", IST) == at(2025, 3, 11, 9)


@pytest.mark.parametrize("value", ["11/03/2025, 09:00:00", "11/03/2025 09:00:00"])
def test_legacy_format_is_day_first(value):
    assert parse_timestamp(value, IST) == at(2025, 3, 11, 9)


def test_legacy_date_only_is_start_of_day():
    assert parse_timestamp("11/03/2025", IST) == at(2025, 3, 11, 0)


def test_dates_and_datetimes():
    assert parse_timestamp(date(2025, 3, 11), IST) == at(2025, 3, 11, 0)
    utc = datetime(2025, 3, 11, 3, 30, tzinfo=timezone.utc)
    assert parse_timestamp(utc, IST) is utc


@pytest.mark.parametrize("value", ["31/02/2025, 10:00:00", "not a timestamp", 20250311])
def test_unparseable_values_raise(value):
    with pytest.raises(ValueError):
        parse_timestamp(value, IST)
