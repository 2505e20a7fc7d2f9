"""Unit tests for day windows and bucket apportioning."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from childtrack.stats.buckets import InvalidWindowError, Window, empty_buckets, get_timezone


def test_keys_cover_closed_interval_in_order():
    window = Window(date(2024, 1, 30), date(2024, 2, 2))
    assert window.keys() == ["2024-01-30", "2024-01-31", "2024-02-01", "2024-02-02"]
    assert window.length == 4


def test_single_day_window():
    window = Window(date(2024, 3, 5), date(2024, 3, 5))
    assert window.keys() == ["2024-03-05"]


def test_end_before_start_raises():
    with pytest.raises(InvalidWindowError):
        Window(date(2024, 1, 2), date(2024, 1, 1))


def test_missing_bound_raises_type_error():
    with pytest.raises(TypeError):
        Window(None, date(2024, 1, 1))


def test_datetimes_are_truncated_to_days():
    window = Window(datetime(2024, 1, 1, 15, 0), datetime(2024, 1, 2, 3, 0))
    assert (window.start, window.end) == (date(2024, 1, 1), date(2024, 1, 2))


def test_ending_on_and_previous():
    window = Window.ending_on(date(2024, 1, 7), 7)
    assert window.start == date(2024, 1, 1)
    previous = window.previous()
    assert (previous.start, previous.end) == (date(2023, 12, 25), date(2023, 12, 31))


def test_ending_on_rejects_empty_window():
    with pytest.raises(InvalidWindowError):
        Window.ending_on(date(2024, 1, 7), 0)


def test_empty_buckets_zero_filled():
    window = Window(date(2024, 1, 1), date(2024, 1, 3))
    assert empty_buckets(window) == {"2024-01-01": 0.0, "2024-01-02": 0.0, "2024-01-03": 0.0}
    assert empty_buckets(window, list)["2024-01-02"] == []


def test_day_key_uses_reference_zone():
    paris = ZoneInfo("Europe/Paris")
    window = Window(date(2024, 1, 1), date(2024, 1, 2), paris)
    # 23:30 UTC on Jan 1 is already Jan 2 in Paris
    assert window.day_key(datetime(2024, 1, 1, 23, 30, tzinfo=timezone.utc)) == "2024-01-02"
    assert window.day_key(datetime(2024, 1, 3, 0, 30, tzinfo=paris)) is None
    assert window.day_key(None) is None


def test_apportion_across_midnight():
    window = Window(date(2024, 1, 1), date(2024, 1, 2))
    shares = window.apportion(datetime(2024, 1, 1, 22, 0), datetime(2024, 1, 2, 6, 0))
    assert shares == {"2024-01-01": 2 * 3600, "2024-01-02": 6 * 3600}


def test_apportion_clips_to_window():
    window = Window(date(2024, 1, 2), date(2024, 1, 2))
    shares = window.apportion(datetime(2024, 1, 1, 20, 0), datetime(2024, 1, 3, 8, 0))
    assert shares == {"2024-01-02": 24 * 3600}


def test_apportion_outside_window_is_empty():
    window = Window(date(2024, 1, 5), date(2024, 1, 6))
    assert window.apportion(datetime(2024, 1, 1, 1, 0), datetime(2024, 1, 1, 3, 0)) == {}
    assert window.apportion(datetime(2024, 1, 5, 1, 0), None) == {}


def test_apportion_counts_real_length_of_dst_day():
    new_york = ZoneInfo("America/New_York")
    window = Window(date(2024, 3, 10), date(2024, 3, 10), new_york)
    start = datetime(2024, 3, 10, 0, 0, tzinfo=new_york)
    shares = window.apportion(start, start + timedelta(days=1))
    # Spring-forward day is 23 hours long
    assert shares == {"2024-03-10": 23 * 3600}


def test_get_timezone_utc_and_named():
    assert get_timezone("UTC") is timezone.utc
    assert get_timezone("Europe/Paris") == ZoneInfo("Europe/Paris")
