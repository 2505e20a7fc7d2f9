"""Unit tests for the legacy details parser."""

from datetime import date, datetime, timedelta, timezone

import pytest

from childtrack.models.details import FeedingDetails, GrowthDetails, SleepDetails, TemperatureDetails
from childtrack.stats.details import (
    extract_label,
    format_details,
    format_record,
    parse_details,
    parse_duration_minutes,
    parse_number,
    split_list,
)


# ---------------------------------------------------------------------------
# Primitive extractors
# ---------------------------------------------------------------------------

def test_extract_label_first_match_wins():
    text = "Type: Wet\nNotes: first\nType: Dirty"
    assert extract_label(text, "Type") == "Wet"


def test_extract_label_is_case_insensitive_and_trims():
    assert extract_label("  quality :  Excellent  ", "Quality") == "Excellent"


def test_extract_label_missing_or_empty_is_none():
    assert extract_label("Quality: good", "Location") is None
    assert extract_label("Location:   ", "Location") is None
    assert extract_label("", "Quality") is None
    assert extract_label(None, "Quality") is None


def test_extract_label_does_not_match_longer_label():
    assert extract_label("Medication Name: Amoxicillin", "Medication") is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("120ml", 120.0),
        ("9,5 kg", 9.5),
        ("  3.25 ", 3.25),
        ("-1", -1.0),
        ("n/a", None),
        (None, None),
        (4, 4.0),
    ],
)
def test_parse_number(raw, expected):
    assert parse_number(raw) == expected


def test_split_list_trims_and_drops_empty_items():
    assert split_list(" 08:00 , 14:00,, 20:00 ") == ["08:00", "14:00", "20:00"]
    assert split_list(None) == []


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("90", 90),
        ("1.5 hours", 90),
        ("1h 30m", 90),
        ("2 hr 15 min", 135),
        ("1:45", 105),
        ("soon", None),
        (None, None),
    ],
)
def test_parse_duration_minutes(raw, expected):
    assert parse_duration_minutes(raw) == expected


@pytest.mark.parametrize("raw", ["9" * 400, "9" * 400 + " kg", float("inf"), float("nan"), 10 ** 400])
def test_parse_number_non_finite_is_absent(raw):
    assert parse_number(raw) is None


@pytest.mark.parametrize("raw", ["9" * 400 + " hours", "9" * 400 + ":30", "9" * 308 + " " + "9" * 308])
def test_parse_duration_minutes_overflow_is_absent(raw):
    assert parse_duration_minutes(raw) is None


# ---------------------------------------------------------------------------
# Sleep
# ---------------------------------------------------------------------------

_NIGHT = datetime(2024, 1, 1, 22, 0)


def test_sleep_defaults_for_empty_details():
    record = parse_details("sleeping", "", timestamp=_NIGHT)
    assert isinstance(record, SleepDetails)
    assert record.quality == "good"
    assert record.start_time == _NIGHT
    assert record.end_time is None
    assert record.duration_minutes == 0


def test_sleep_clock_end_rolls_past_midnight():
    text = "Quality: Excellent\nStart Time: 22:00\nEnd Time: 06:00\nLocation: Crib"
    record = parse_details("sleeping", text, timestamp=_NIGHT)
    assert record.quality == "excellent"
    assert record.end_time == datetime(2024, 1, 2, 6, 0)
    assert record.duration_minutes == 480
    assert record.location == "Crib"


def test_sleep_unknown_quality_defaults_to_good():
    record = parse_details("sleeping", "Quality: dreamy", timestamp=_NIGHT)
    assert record.quality == "good"


def test_sleep_very_poor_maps_to_poor():
    record = parse_details("sleeping", "Quality: Very Poor", timestamp=_NIGHT)
    assert record.quality == "poor"


def test_sleep_duration_label_sets_end():
    record = parse_details("sleeping", "Duration: 1h 30m", timestamp=_NIGHT)
    assert record.duration_minutes == 90
    assert record.end_time == _NIGHT + timedelta(minutes=90)


def test_sleep_value_in_hours_is_fallback():
    record = parse_details("sleeping", "", timestamp=_NIGHT, value=2.5)
    assert record.duration_minutes == 150
    assert record.end_time == _NIGHT + timedelta(hours=2.5)


def test_sleep_explicit_end_time_wins_over_text():
    end = datetime(2024, 1, 2, 5, 0)
    record = parse_details("sleeping", "End Time: 06:00", timestamp=_NIGHT, end_time=end)
    assert record.end_time == end
    assert record.duration_minutes == 420


def test_sleep_huge_duration_is_not_fatal():
    record = parse_details("sleeping", "Duration: " + "9" * 400 + " hours", timestamp=_NIGHT)
    assert record.end_time is None
    assert record.duration_minutes == 0


def test_sleep_duration_past_calendar_end_is_dropped():
    record = parse_details("sleeping", "Duration: 99999999999", timestamp=_NIGHT)
    assert record.end_time is None
    assert record.duration_minutes == 0


@pytest.mark.parametrize("value", [float("nan"), float("inf"), 1e308])
def test_sleep_unusable_value_is_absent(value):
    record = parse_details("sleeping", "", timestamp=_NIGHT, value=value)
    assert record.end_time is None
    assert record.duration_minutes == 0


def test_feeding_overflowing_amount_falls_back_to_value():
    record = parse_details("feeding", "Amount: " + "9" * 400, timestamp=_NIGHT, value=60)
    assert record.amount == 60


def test_sleep_aware_timestamp_keeps_zone():
    start = datetime(2024, 1, 1, 22, 0, tzinfo=timezone.utc)
    record = parse_details("sleeping", "End Time: 06:00", timestamp=start)
    assert record.end_time == datetime(2024, 1, 2, 6, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Other categories
# ---------------------------------------------------------------------------

def test_feeding_amount_unit_and_type():
    record = parse_details("feeding", "Type: Bottle\nAmount: 120ml\nDuration: 15")
    assert isinstance(record, FeedingDetails)
    assert record.type == "Bottle"
    assert record.amount == 120
    assert record.unit == "ml"
    assert record.duration_minutes == 15


def test_feeding_unparseable_amount_falls_back_to_value():
    record = parse_details("feeding", "Amount: lots", value=4.0)
    assert record.amount == 4.0


def test_feeding_duration_from_end_time():
    start = datetime(2024, 1, 1, 8, 0)
    record = parse_details("feeding", "", timestamp=start, end_time=start + timedelta(minutes=20))
    assert record.duration_minutes == 20


def test_diaper_type_lowercased_and_contents_split():
    record = parse_details("diaper", "Type: Wet\nContents: urine, mucus")
    assert record.type == "wet"
    assert record.contents == ["urine", "mucus"]


def test_growth_units_default_to_metric():
    record = parse_details("growth", "Weight: 7.2\nHeight: 65.5")
    assert isinstance(record, GrowthDetails)
    assert record.weight == 7.2
    assert record.weight_unit == "kg"
    assert record.height_unit == "cm"


def test_growth_weight_falls_back_to_value():
    record = parse_details("growth", "Height: 24in", value=6.8)
    assert record.weight == 6.8
    assert record.height_unit == "in"


def test_medication_fields():
    text = (
        "Medication Name: Amoxicillin\n"
        "Dosage: 5 ml\n"
        "Frequency: Twice daily\n"
        "Start Date: 2024-01-01\n"
        "End Date: 01/10/2024\n"
        "Time of Day: 08:00, 20:00\n"
        "Status: Active"
    )
    record = parse_details("medication", text)
    assert record.medication == "Amoxicillin"
    assert record.dosage == "5 ml"
    assert record.start_date == date(2024, 1, 1)
    assert record.end_date == date(2024, 1, 10)
    assert record.time_of_day == ["08:00", "20:00"]
    assert record.status == "active"


def test_medication_status_defaults_to_active():
    assert parse_details("medication", "Medication: Vitamin D").status == "active"


def test_temperature_fahrenheit_detected():
    record = parse_details("temperature", "Temperature: 100.4 °F\nMethod: Oral")
    assert isinstance(record, TemperatureDetails)
    assert record.temperature == 100.4
    assert record.unit == "fahrenheit"
    assert record.method == "oral"


def test_temperature_defaults_to_celsius_and_value():
    record = parse_details("temperature", "", value=37.2)
    assert record.temperature == 37.2
    assert record.unit == "celsius"


def test_unknown_event_type_raises():
    with pytest.raises(ValueError):
        parse_details("bath", "Notes: fun")


# ---------------------------------------------------------------------------
# Formatting round-trip
# ---------------------------------------------------------------------------

def test_format_details_skips_empty_values():
    text = format_details({"Quality": "good", "Location": None, "Notes": "", "Contents": []})
    assert text == "Quality: good"


def test_format_then_extract_returns_written_values():
    fields = {
        "Medication": "Ibuprofen",
        "Dosage": "2.5 ml",
        "Time of Day": "08:00",
        "Reason": "Teething pain",
    }
    text = format_details(fields)
    for label, value in fields.items():
        assert extract_label(text, label) == value


def test_format_record_reparses_to_same_record():
    record = FeedingDetails(type="Bottle", amount=90, unit="ml", duration_minutes=12, notes="Calm")
    assert parse_details("feeding", format_record(record)) == record
