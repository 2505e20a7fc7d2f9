"""Medication schedule: active prescriptions, next dose, refills due."""

import logging
from collections.abc import Sequence
from datetime import date, datetime, timedelta
from typing import Optional

from childtrack.models.aggregate import NextDose
from childtrack.models.event import Event

from .details import parse_clock, resolve_details

logger = logging.getLogger(__name__)

INACTIVE_STATUSES = frozenset({"completed", "discontinued", "stopped", "inactive"})


def active_medications(events: Sequence[Event], today: date) -> list[Event]:
    """Medication events still running on `today`."""
    active = []
    for event in events:
        if event.event_type != "medication":
            continue
        details = resolve_details(event)
        if details.status in INACTIVE_STATUSES:
            continue
        if details.end_date is not None and details.end_date < today:
            continue
        active.append(event)
    return active


def next_dose(events: Sequence[Event], now: datetime) -> Optional[NextDose]:
    """Earliest scheduled time-of-day dose later today among active medications."""
    best: Optional[NextDose] = None
    for event in active_medications(events, now.date()):
        details = resolve_details(event)
        for slot in details.time_of_day:
            clock = parse_clock(slot)
            if clock is None:
                logger.debug("Unparseable dose time %r on event %s", slot, event.id)
                continue
            dose_time = datetime.combine(now.date(), clock, tzinfo=now.tzinfo)
            if dose_time > now and (best is None or dose_time < best.time):
                best = NextDose(
                    event_id=event.id,
                    time=dose_time,
                    medication=details.medication,
                    dosage=details.dosage,
                )
    return best


def upcoming_refills(events: Sequence[Event], today: date, days: int = 7) -> list[Event]:
    """Active medications whose course ends within the next `days` days."""
    horizon = today + timedelta(days=days)
    return [
        event for event in active_medications(events, today)
        if (end := resolve_details(event).end_date) is not None and end <= horizon
    ]
