"""Unit tests for the medication schedule helpers."""

from datetime import date, datetime, timezone
from itertools import count

from childtrack.models.event import Event
from childtrack.stats.medication import active_medications, next_dose, upcoming_refills

_ids = count(1)

_TODAY = date(2024, 5, 10)


def _medication(details: str, event_type: str = "medication") -> Event:
    ts = datetime(2024, 5, 1, 8, 0)
    return Event(
        id=next(_ids), child_id=1, event_type=event_type, timestamp=ts, details=details, created_at=ts,
    )


def test_active_excludes_completed_and_expired():
    running = _medication("Medication: Vitamin D\nStatus: Active")
    completed = _medication("Medication: Amoxicillin\nStatus: Completed")
    expired = _medication("Medication: Ibuprofen\nEnd Date: 2024-05-09")
    ends_today = _medication("Medication: Saline\nEnd Date: 2024-05-10")
    active = active_medications([running, completed, expired, ends_today], _TODAY)
    assert [e.id for e in active] == [running.id, ends_today.id]


def test_active_ignores_other_event_types():
    assert active_medications([_medication("Status: active", "feeding")], _TODAY) == []


def test_next_dose_is_earliest_remaining_time_today():
    events = [
        _medication("Medication: Amoxicillin\nDosage: 5 ml\nTime of Day: 08:00, 14:00, 20:00"),
        _medication("Medication: Vitamin D\nTime of Day: 6:00 PM"),
    ]
    dose = next_dose(events, datetime(2024, 5, 10, 12, 30))
    assert dose.medication == "Amoxicillin"
    assert dose.dosage == "5 ml"
    assert dose.time == datetime(2024, 5, 10, 14, 0)

    later = next_dose(events, datetime(2024, 5, 10, 15, 0))
    assert later.medication == "Vitamin D"
    assert later.time == datetime(2024, 5, 10, 18, 0)


def test_next_dose_none_when_day_is_done():
    events = [_medication("Medication: Amoxicillin\nTime of Day: 08:00, bedtime")]
    assert next_dose(events, datetime(2024, 5, 10, 21, 0)) is None


def test_next_dose_keeps_reference_zone():
    events = [_medication("Medication: Amoxicillin\nTime of Day: 20:00")]
    dose = next_dose(events, datetime(2024, 5, 10, 9, 0, tzinfo=timezone.utc))
    assert dose.time == datetime(2024, 5, 10, 20, 0, tzinfo=timezone.utc)


def test_upcoming_refills_within_a_week():
    soon = _medication("Medication: Amoxicillin\nEnd Date: 2024-05-15")
    later = _medication("Medication: Iron\nEnd Date: 2024-06-30")
    open_ended = _medication("Medication: Vitamin D")
    assert upcoming_refills([soon, later, open_ended], _TODAY) == [soon]
