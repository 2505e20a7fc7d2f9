"""Child reports: assembly from aggregate results, and persistence."""

import logging
from datetime import date, datetime

import aiosqlite

from childtrack.models.child import Child
from childtrack.models.event import Event
from childtrack.models.report import (
    ChildReport,
    ReportRow,
    ReportType,
    SavedReport,
    SavedReportSummary,
)
from childtrack.stats.aggregator import (
    diaper_aggregate,
    feeding_aggregate,
    growth_series,
    medication_aggregate,
    sleep_aggregate,
    sleep_interval,
    temperature_aggregate,
)
from childtrack.stats.buckets import Window
from childtrack.stats.details import resolve_details

logger = logging.getLogger(__name__)

_REPORT_CATEGORIES = ("sleeping", "feeding", "diaper", "growth", "medication", "temperature")


# ─── Assembly ─────────────────────────────────────────────────────────────────

def _row_value(event: Event, details) -> tuple[float | None, str]:
    """Headline number of an event and how it reads in a table."""
    if event.event_type == "sleeping":
        start, end = sleep_interval(event, details)
        minutes = (end - start).total_seconds() / 60 if end else details.duration_minutes
        hours, rest = divmod(int(minutes), 60)
        return round(minutes / 60, 2), f"{hours}h {rest}m"
    if event.event_type == "feeding":
        if details.amount is None:
            return None, details.type or ""
        return details.amount, f"{details.amount:.1f} {details.unit or 'oz/ml'}"
    if event.event_type == "growth":
        if details.weight is None:
            return None, f"{details.height:.1f} {details.height_unit}" if details.height else ""
        return details.weight, f"{details.weight:.2f} {details.weight_unit}"
    if event.event_type == "temperature":
        if details.temperature is None:
            return None, ""
        symbol = "°F" if details.unit == "fahrenheit" else "°C"
        return details.temperature, f"{details.temperature:.1f}{symbol}"
    if event.event_type == "medication":
        label = " ".join(part for part in (details.medication, details.dosage) if part)
        return event.value, label
    return event.value, details.type or ""


def _rows(events: list[Event], window: Window) -> list[ReportRow]:
    rows = []
    for event in sorted(events, key=lambda e: (window.localize(e.timestamp), e.id)):
        details = resolve_details(event)
        start = event.timestamp
        end = event.end_time
        if event.event_type == "sleeping":
            start, end = sleep_interval(event, details)
        value, label = _row_value(event, details)
        rows.append(
            ReportRow(
                day=window.localize(event.timestamp).date(),
                start_time=start,
                end_time=end,
                event_type=event.event_type,
                value=value,
                value_label=label,
                notes=details.notes or "",
            )
        )
    return rows


def build_report(
    child: Child,
    report_type: ReportType,
    events: list[Event],
    window: Window,
    now: datetime,
) -> ChildReport:
    """Summary figures, aggregates and detail rows for one child over a window.

    ``report_type="all"`` covers every category; otherwise only events of
    that type are reported.
    """
    categories = _REPORT_CATEGORIES if report_type == "all" else (report_type,)
    in_window = [
        e for e in events if e.event_type in categories and window.contains(e.timestamp)
    ]

    summary: dict[str, float | None] = {}
    aggregates = []
    growth = None

    if "feeding" in categories:
        feeding = feeding_aggregate(events, window, compare=False)
        aggregates.append(feeding)
        summary["feeding_total_amount"] = feeding.total
        summary["feeding_average_amount"] = feeding.average
    if "sleeping" in categories:
        sleep = sleep_aggregate(events, window, compare=False)
        aggregates.append(sleep)
        summary["sleep_total_hours"] = round(sleep.total, 1)
        summary["sleep_average_hours_per_day"] = round(sleep.average, 1)
    if "diaper" in categories:
        diapers = diaper_aggregate(events, window, compare=False)
        aggregates.append(diapers)
        summary["diaper_changes"] = diapers.total
    if "growth" in categories:
        growth = growth_series(events, window)
        weights = [p.weight for p in growth.points if p.weight is not None]
        summary["growth_starting_weight"] = weights[0] if weights else None
        summary["growth_current_weight"] = weights[-1] if weights else None
        summary["growth_weight_gain"] = growth.weight_gain
    if "temperature" in categories:
        temperature = temperature_aggregate(events, window)
        aggregates.append(temperature)
        summary["temperature_average"] = temperature.average
        summary["temperature_highest"] = temperature.maximum
        summary["temperature_lowest"] = temperature.minimum
    if "medication" in categories:
        medication = medication_aggregate(events, window)
        aggregates.append(medication)
        summary["medication_doses"] = medication.total

    logger.debug(
        "Built %s report for child %s: %d entries over %s..%s",
        report_type, child.id, len(in_window), window.start, window.end,
    )
    return ChildReport(
        child_id=child.id,
        child_name=child.name,
        report_type=report_type,
        start_date=window.start,
        end_date=window.end,
        generated_at=now,
        total_entries=len(in_window),
        summary=summary,
        aggregates=aggregates,
        growth=growth,
        rows=_rows(in_window, window),
    )


# ─── Persistence ──────────────────────────────────────────────────────────────

def _row_to_report(row: aiosqlite.Row) -> SavedReport:
    return SavedReport(
        id=row["id"],
        child_id=row["child_id"],
        report_type=row["report_type"],
        start_date=date.fromisoformat(row["start_date"]),
        end_date=date.fromisoformat(row["end_date"]),
        report=ChildReport.model_validate_json(row["payload_json"]),
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def _row_to_summary(row: aiosqlite.Row) -> SavedReportSummary:
    return SavedReportSummary(
        id=row["id"],
        child_id=row["child_id"],
        report_type=row["report_type"],
        start_date=date.fromisoformat(row["start_date"]),
        end_date=date.fromisoformat(row["end_date"]),
        created_at=datetime.fromisoformat(row["created_at"]),
    )


async def save_report(db: aiosqlite.Connection, report: ChildReport) -> SavedReport:
    """Persist a generated report and return the full record."""
    cursor = await db.execute(
        """INSERT INTO reports (child_id, report_type, start_date, end_date, payload_json)
           VALUES (?, ?, ?, ?, ?)""",
        (
            report.child_id,
            report.report_type,
            report.start_date.isoformat(),
            report.end_date.isoformat(),
            report.model_dump_json(),
        ),
    )
    await db.commit()
    rows = await db.execute_fetchall(
        "SELECT * FROM reports WHERE id = ?", (cursor.lastrowid,)
    )
    return _row_to_report(rows[0])


async def get_report(db: aiosqlite.Connection, report_id: int) -> SavedReport | None:
    """Return a specific report by id."""
    async with db.execute("SELECT * FROM reports WHERE id = ?", (report_id,)) as cur:
        row = await cur.fetchone()
    return _row_to_report(row) if row else None


async def list_reports(
    db: aiosqlite.Connection,
    child_id: int,
    limit: int = 20,
) -> list[SavedReportSummary]:
    """Return the most recent report summaries for a child."""
    rows = await db.execute_fetchall(
        """SELECT id, child_id, report_type, start_date, end_date, created_at
           FROM reports
           WHERE child_id = ?
           ORDER BY created_at DESC, id DESC
           LIMIT ?""",
        (child_id, limit),
    )
    return [_row_to_summary(r) for r in rows]


async def delete_report(db: aiosqlite.Connection, report_id: int) -> bool:
    """Delete a report. Returns True if deleted."""
    cursor = await db.execute("DELETE FROM reports WHERE id = ?", (report_id,))
    await db.commit()
    return cursor.rowcount > 0
