"""Unit tests for sleep scoring helpers."""

from datetime import datetime, timedelta
from itertools import count

import pytest

from childtrack.models.details import SleepDetails
from childtrack.models.event import Event
from childtrack.stats.sleep import (
    format_sleep_duration,
    is_nap,
    recommended_sleep_hours,
    sleep_score,
    sleep_score_label,
)

_ids = count(1)


def _night(start: datetime, hours: float, quality: str = "good") -> Event:
    end = start + timedelta(hours=hours)
    return Event(
        id=next(_ids),
        child_id=1,
        event_type="sleeping",
        timestamp=start,
        data=SleepDetails(
            quality=quality, start_time=start, end_time=end, duration_minutes=hours * 60
        ),
        created_at=start,
    )


@pytest.mark.parametrize(
    "minutes, expected",
    [(45, "45 min"), (120, "2 hr"), (90, "1 hr 30 min"), (-5, "0 min"), (119.6, "2 hr")],
)
def test_format_sleep_duration(minutes, expected):
    assert format_sleep_duration(minutes) == expected


def test_is_nap():
    assert is_nap(datetime(2024, 1, 1, 22, 0), 90)
    assert is_nap(datetime(2024, 1, 1, 10, 0), 240)
    assert not is_nap(datetime(2024, 1, 1, 20, 0), 600)


def test_recommended_hours_by_age():
    assert recommended_sleep_hours(2) == 14.0
    assert recommended_sleep_hours(18) == 12.0
    assert recommended_sleep_hours(200) == 8.5


def test_no_sleep_scores_zero():
    assert sleep_score([], 6) == 0


def test_consistent_recommended_sleep_scores_high():
    # 13 h per day for a 6-month-old, all "excellent", identical nights
    events = [_night(datetime(2024, 1, d, 19, 0), 13, "excellent") for d in range(1, 8)]
    assert sleep_score(events, 6) == 100


def test_poor_short_irregular_sleep_scores_low():
    events = [
        _night(datetime(2024, 1, 1, 19, 0), 4, "poor"),
        _night(datetime(2024, 1, 2, 19, 0), 9, "poor"),
        _night(datetime(2024, 1, 3, 19, 0), 2, "poor"),
    ]
    score = sleep_score(events, 6)
    assert 0 <= score < 45


def test_non_sleep_events_are_ignored():
    feeding = Event(
        id=next(_ids), child_id=1, event_type="feeding",
        timestamp=datetime(2024, 1, 1, 8, 0), created_at=datetime(2024, 1, 1, 8, 0),
    )
    assert sleep_score([feeding], 6) == 0


@pytest.mark.parametrize(
    "score, label",
    [(95, "Excellent"), (80, "Very Good"), (60, "Good"), (50, "Fair"), (30, "Poor"), (10, "Very Poor")],
)
def test_sleep_score_label(score, label):
    assert sleep_score_label(score) == label
