"""Parser for the legacy ``Label: value`` details text.

Events logged by older clients carry their structured data inside a single
free-text blob, one ``Label: value`` pair per line::

    Quality: Good
    Start Time: 22:00
    Notes: Slept through the night

Labels may be missing, reordered or malformed. Nothing here raises for bad
data: every field falls back to a documented default (``None`` unless the
record model says otherwise). Numbers that overflow to infinity or are not
numbers at all count as absent.
"""

import logging
import math
import re
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta
from typing import Optional

from childtrack.models.details import (
    DEFAULT_MEDICATION_STATUS,
    DEFAULT_SLEEP_QUALITY,
    SLEEP_QUALITIES,
    DiaperDetails,
    EventDetails,
    FeedingDetails,
    GrowthDetails,
    MedicationDetails,
    SleepDetails,
    TemperatureDetails,
)
from childtrack.models.event import Event

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"[-+]?\d+(?:[.,]\d+)?")
_UNIT_RE = re.compile(r"[-+]?\d+(?:[.,]\d+)?\s*([A-Za-z°]+)")
_CLOCK_DURATION_RE = re.compile(r"^(\d+):([0-5]\d)$")
_DURATION_PART_RE = re.compile(
    r"(\d+(?:[.,]\d+)?)\s*(hours|hour|hrs|hr|h|minutes|minute|mins|min|m)?(?![a-z])",
    re.IGNORECASE,
)
_TEMPERATURE_UNIT_RE = re.compile(r"\d\s*°?\s*([cf])(?![a-z])", re.IGNORECASE)

_CLOCK_FORMATS = ("%H:%M", "%H:%M:%S", "%I:%M %p", "%I:%M%p", "%I %p")
_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%b %d, %Y", "%B %d, %Y")


# ─── Primitive extractors ─────────────────────────────────────────────────────

def extract_label(text: Optional[str], label: str) -> Optional[str]:
    """Return the value of the first ``label: value`` line, or None.

    The value runs to the end of the line and is stripped. An empty value is
    treated as absent.
    """
    if not text:
        return None
    pattern = re.compile(
        rf"^[ \t]*{re.escape(label)}[ \t]*:[ \t]*(.*)$",
        re.IGNORECASE | re.MULTILINE,
    )
    match = pattern.search(text)
    if not match:
        return None
    value = match.group(1).strip()
    return value or None


def finite(number) -> Optional[float]:
    """`number` as a float, or None when it is infinite, NaN or too large."""
    try:
        number = float(number)
    except (OverflowError, ValueError):
        return None
    if not math.isfinite(number):
        logger.debug("Non-finite number treated as absent")
        return None
    return number


def parse_number(text) -> Optional[float]:
    """Leading decimal number of a value such as ``120ml`` or ``9,5 kg``."""
    if text is None:
        return None
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        return finite(text)
    match = _NUMBER_RE.search(str(text))
    if not match:
        return None
    return finite(match.group(0).replace(",", "."))


def parse_unit(text: Optional[str]) -> Optional[str]:
    """Unit written right after the number (``120ml`` → ``ml``)."""
    if not text:
        return None
    match = _UNIT_RE.search(text)
    return match.group(1).lower() if match else None


def split_list(text: Optional[str]) -> list[str]:
    """Split a comma-separated value into trimmed, non-empty items."""
    if not text:
        return []
    return [item.strip() for item in text.split(",") if item.strip()]


def parse_duration_minutes(text: Optional[str]) -> Optional[float]:
    """Duration in minutes from ``90``, ``1.5 hours``, ``1h 30m`` or ``1:30``.

    A bare number means minutes.
    """
    if not text:
        return None
    text = text.strip()
    clock = _CLOCK_DURATION_RE.match(text)
    if clock:
        return finite(int(clock.group(1)) * 60 + int(clock.group(2)))

    total = 0.0
    found = False
    for match in _DURATION_PART_RE.finditer(text):
        amount = float(match.group(1).replace(",", "."))
        unit = (match.group(2) or "").lower()
        total += amount * 60 if unit.startswith("h") else amount
        found = True
    return finite(total) if found else None


def parse_date(text: Optional[str]) -> Optional[date]:
    if not text:
        return None
    text = text.strip()
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_clock(text: str) -> Optional[time]:
    for fmt in _CLOCK_FORMATS:
        try:
            return datetime.strptime(text.strip().upper(), fmt).time()
        except ValueError:
            continue
    return None


def align_awareness(dt: Optional[datetime], anchor: Optional[datetime]) -> Optional[datetime]:
    """Give `dt` the same awareness as `anchor` so the two compare.

    A naive `dt` takes the anchor's zone; an aware one facing a naive anchor
    keeps its wall-clock reading.
    """
    if dt is None or anchor is None:
        return dt
    if dt.tzinfo is None and anchor.tzinfo is not None:
        return dt.replace(tzinfo=anchor.tzinfo)
    if dt.tzinfo is not None and anchor.tzinfo is None:
        return dt.replace(tzinfo=None)
    return dt


def parse_instant(text: Optional[str], anchor: Optional[datetime]) -> Optional[datetime]:
    """Parse an ISO datetime, or a clock time placed on the anchor's day."""
    if not text:
        return None
    try:
        return align_awareness(datetime.fromisoformat(text.strip().replace("Z", "+00:00")), anchor)
    except ValueError:
        pass
    clock = parse_clock(text)
    if clock is None or anchor is None:
        return None
    return datetime.combine(anchor.date(), clock, tzinfo=anchor.tzinfo)


def _is_clock_only(text: Optional[str]) -> bool:
    return bool(text) and parse_clock(text) is not None


def _shift(instant: datetime, minutes: float) -> Optional[datetime]:
    try:
        return instant + timedelta(minutes=minutes)
    except OverflowError:
        logger.debug("Offset of %s minutes from %s is out of range", minutes, instant)
        return None


# ─── Per-category parsers ─────────────────────────────────────────────────────

def _normalize_quality(raw: Optional[str]) -> str:
    if not raw:
        return DEFAULT_SLEEP_QUALITY
    quality = raw.strip().lower()
    if quality == "very poor":
        return "poor"
    if quality in SLEEP_QUALITIES:
        return quality
    logger.debug("Unrecognized sleep quality %r, using default", raw)
    return DEFAULT_SLEEP_QUALITY


def _parse_sleep(text, timestamp, end_time, value) -> SleepDetails:
    start_raw = extract_label(text, "Start Time")
    end_raw = extract_label(text, "End Time")

    start = parse_instant(start_raw, timestamp) or timestamp
    end = align_awareness(end_time, start) if end_time is not None else parse_instant(end_raw, start)
    # A clock-only end at or before the start means the session ran past midnight
    if end is not None and start is not None and end_time is None and end <= start and _is_clock_only(end_raw):
        end = _shift(end, 24 * 60)

    duration = parse_duration_minutes(extract_label(text, "Duration"))
    if end is None and start is not None:
        if duration is None and value is not None and value > 0:
            duration = finite(value * 60)
        if duration is not None:
            end = _shift(start, duration)
            if end is None:
                duration = None
    if duration is None:
        if start is not None and end is not None and end > start:
            duration = (end - start).total_seconds() / 60
        else:
            duration = 0

    return SleepDetails(
        quality=_normalize_quality(extract_label(text, "Quality")),
        start_time=start,
        end_time=end,
        duration_minutes=max(0.0, duration),
        location=extract_label(text, "Location"),
        notes=extract_label(text, "Notes"),
    )


def _parse_feeding(text, timestamp, end_time, value) -> FeedingDetails:
    amount_raw = extract_label(text, "Amount")
    amount = parse_number(amount_raw)
    if amount is None:
        amount = value
    duration = parse_duration_minutes(extract_label(text, "Duration"))
    if duration is None and timestamp is not None and end_time is not None:
        end = align_awareness(end_time, timestamp)
        if end > timestamp:
            duration = (end - timestamp).total_seconds() / 60
    return FeedingDetails(
        type=extract_label(text, "Type"),
        amount=amount,
        unit=parse_unit(amount_raw),
        duration_minutes=duration,
        notes=extract_label(text, "Notes"),
    )


def _parse_diaper(text, timestamp, end_time, value) -> DiaperDetails:
    diaper_type = extract_label(text, "Type")
    return DiaperDetails(
        type=diaper_type.lower() if diaper_type else None,
        contents=split_list(extract_label(text, "Contents")),
        notes=extract_label(text, "Notes"),
    )


def _parse_growth(text, timestamp, end_time, value) -> GrowthDetails:
    weight_raw = extract_label(text, "Weight")
    height_raw = extract_label(text, "Height")
    weight = parse_number(weight_raw)
    if weight is None:
        weight = value
    return GrowthDetails(
        weight=weight,
        weight_unit=parse_unit(weight_raw) or "kg",
        height=parse_number(height_raw),
        height_unit=parse_unit(height_raw) or "cm",
        head_circumference=parse_number(extract_label(text, "Head Circumference")),
        notes=extract_label(text, "Notes"),
    )


def _parse_medication(text, timestamp, end_time, value) -> MedicationDetails:
    status = extract_label(text, "Status")
    return MedicationDetails(
        medication=extract_label(text, "Medication") or extract_label(text, "Medication Name"),
        dosage=extract_label(text, "Dosage"),
        frequency=extract_label(text, "Frequency"),
        start_date=parse_date(extract_label(text, "Start Date")),
        end_date=parse_date(extract_label(text, "End Date")),
        time_of_day=split_list(extract_label(text, "Time of Day")),
        status=status.lower() if status else DEFAULT_MEDICATION_STATUS,
        instructions=extract_label(text, "Instructions"),
        reason=extract_label(text, "Reason"),
        administered_at=parse_instant(extract_label(text, "Administered At"), timestamp),
        administered_dose=extract_label(text, "Administered Dose"),
        administered_by=extract_label(text, "Administered By"),
        notes=extract_label(text, "Notes"),
    )


def _parse_temperature(text, timestamp, end_time, value) -> TemperatureDetails:
    raw = extract_label(text, "Temperature")
    reading = parse_number(raw)
    if reading is None:
        reading = value
    unit_match = _TEMPERATURE_UNIT_RE.search(raw) if raw else None
    unit = "fahrenheit" if unit_match and unit_match.group(1).lower() == "f" else "celsius"
    method = extract_label(text, "Method")
    return TemperatureDetails(
        temperature=reading,
        unit=unit,
        method=method.lower() if method else None,
        notes=extract_label(text, "Notes"),
    )


_PARSERS = {
    "sleeping": _parse_sleep,
    "feeding": _parse_feeding,
    "diaper": _parse_diaper,
    "growth": _parse_growth,
    "medication": _parse_medication,
    "temperature": _parse_temperature,
}


def parse_details(
    event_type: str,
    details: Optional[str],
    *,
    timestamp: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
    value: Optional[float] = None,
) -> EventDetails:
    """Build the typed record for one event from its legacy details text.

    Raises ValueError only for an unknown event type.
    """
    try:
        parser = _PARSERS[event_type]
    except KeyError:
        raise ValueError(f"Unknown event type: {event_type!r}") from None
    if value is not None:
        value = finite(value)
    return parser(details or "", timestamp, end_time, value)


def align_record(record: EventDetails, timestamp: datetime) -> EventDetails:
    """Copy of a typed record whose datetimes share the event timestamp's awareness."""
    if isinstance(record, SleepDetails):
        start = align_awareness(record.start_time, timestamp)
        end = align_awareness(record.end_time, start or timestamp)
        return record.model_copy(update={"start_time": start, "end_time": end})
    if isinstance(record, MedicationDetails) and record.administered_at is not None:
        return record.model_copy(
            update={"administered_at": align_awareness(record.administered_at, timestamp)}
        )
    return record


def resolve_details(event: Event) -> EventDetails:
    """Typed details of a stored event, parsing the legacy text if needed."""
    if event.data is not None:
        return event.data
    return parse_details(
        event.event_type,
        event.details,
        timestamp=event.timestamp,
        end_time=event.end_time,
        value=event.value,
    )


# ─── Formatting ───────────────────────────────────────────────────────────────

def _format_value(value) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def format_details(fields: Mapping[str, object]) -> str:
    """Write labels in the ``Label: value`` convention, one per line.

    Empty values (None, empty string, empty list) are skipped.
    """
    lines = []
    for label, value in fields.items():
        if value is None or value == "" or value == [] or value == ():
            continue
        lines.append(f"{label}: {_format_value(value)}")
    return "\n".join(lines)


_LABELS = {
    "sleeping": (
        ("Quality", "quality"), ("Start Time", "start_time"), ("End Time", "end_time"),
        ("Duration", "duration_minutes"), ("Location", "location"), ("Notes", "notes"),
    ),
    "feeding": (
        ("Type", "type"), ("Amount", "amount"), ("Duration", "duration_minutes"),
        ("Notes", "notes"),
    ),
    "diaper": (("Type", "type"), ("Contents", "contents"), ("Notes", "notes")),
    "growth": (
        ("Weight", "weight"), ("Height", "height"),
        ("Head Circumference", "head_circumference"), ("Notes", "notes"),
    ),
    "medication": (
        ("Medication", "medication"), ("Dosage", "dosage"), ("Frequency", "frequency"),
        ("Start Date", "start_date"), ("End Date", "end_date"), ("Time of Day", "time_of_day"),
        ("Status", "status"), ("Instructions", "instructions"), ("Reason", "reason"),
        ("Administered At", "administered_at"), ("Administered Dose", "administered_dose"),
        ("Administered By", "administered_by"), ("Notes", "notes"),
    ),
    "temperature": (("Temperature", "temperature"), ("Method", "method"), ("Notes", "notes")),
}


def format_record(record: EventDetails) -> str:
    """Render a typed record back into legacy details text."""
    fields: dict[str, object] = {}
    for label, attr in _LABELS[record.kind]:
        fields[label] = getattr(record, attr)
    if isinstance(record, FeedingDetails) and record.amount is not None and record.unit:
        fields["Amount"] = f"{record.amount:g}{record.unit}"
    elif isinstance(record, GrowthDetails):
        if record.weight is not None:
            fields["Weight"] = f"{record.weight:g}{record.weight_unit}"
        if record.height is not None:
            fields["Height"] = f"{record.height:g}{record.height_unit}"
    elif isinstance(record, TemperatureDetails) and record.temperature is not None:
        fields["Temperature"] = f"{record.temperature:g} {'°F' if record.unit == 'fahrenheit' else '°C'}"
    return format_details(fields)
