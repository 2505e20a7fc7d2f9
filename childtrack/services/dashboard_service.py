"""Dashboard and stats payloads assembled from already-fetched events.

Nothing here touches the store or the clock: callers pass the events and
the reference instant ``now``.
"""

import logging
import os
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional

from childtrack.models.child import Child
from childtrack.models.event import Event
from childtrack.models.report import (
    ChildStats,
    Dashboard,
    DiaperPanel,
    FeedingPanel,
    GrowthPanel,
    MedicationPanel,
    SleepPanel,
    SleepStats,
    SleepToday,
)
from childtrack.stats.aggregator import (
    diaper_breakdown,
    event_counts,
    feeding_count_aggregate,
    growth_series,
    percent_change,
    sleep_aggregate,
    sleep_quality_distribution,
    total_sleep_minutes,
)
from childtrack.stats.buckets import Window, get_timezone
from childtrack.stats.details import resolve_details
from childtrack.stats.medication import active_medications, next_dose, upcoming_refills
from childtrack.stats.sleep import sleep_score, sleep_score_label

logger = logging.getLogger(__name__)

DASHBOARD_TREND_DAYS = int(os.getenv("DASHBOARD_TREND_DAYS", "7"))
GROWTH_TREND_MONTHS = int(os.getenv("GROWTH_TREND_MONTHS", "6"))
RECENT_ACTIVITY_LIMIT = 10


def months_before(day: date, months: int) -> date:
    """Same day-of-month `months` earlier, clamped to the month's last day."""
    month_index = day.year * 12 + day.month - 1 - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = (date(year + month // 12, month % 12 + 1, 1) - timedelta(days=1)).day
    return date(year, month, min(day.day, last_day))


def _localize(instant: datetime, tz: tzinfo) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=tz)
    return instant.astimezone(tz)


def _newest(events: list[Event], event_type: str, window: Window, now: datetime) -> Optional[Event]:
    candidates = [
        e for e in events
        if e.event_type == event_type and window.localize(e.timestamp) <= now
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda e: (window.localize(e.timestamp), e.id))


def _sleep_today(events: list[Event], today: Window) -> SleepToday:
    start, end = today.bounds()
    minutes = total_sleep_minutes(events, start, end)
    yesterday_start, yesterday_end = today.previous().bounds()
    yesterday = total_sleep_minutes(events, yesterday_start, yesterday_end)
    return SleepToday(
        hours=minutes // 60,
        minutes=minutes % 60,
        total_minutes=minutes,
        percent_change=percent_change(minutes, yesterday),
    )


def build_dashboard(
    child: Child,
    events: list[Event],
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> Dashboard:
    """Today's figures, short trends, medications and growth for one child."""
    tz = tz or get_timezone()
    now = _localize(now, tz)
    today = Window(now.date(), now.date(), tz)
    trend_window = Window.ending_on(now.date(), DASHBOARD_TREND_DAYS, tz)
    growth_window = Window(months_before(now.date(), GROWTH_TREND_MONTHS), now.date(), tz)

    last_sleep = _newest(events, "sleeping", today, now)
    sleep_panel = SleepPanel(
        today=_sleep_today(events, today),
        last_updated=last_sleep.timestamp if last_sleep else None,
        trend=sleep_aggregate(events, trend_window),
    )

    feedings_today = [e for e in events if e.event_type == "feeding" and today.contains(e.timestamp)]
    feeding_panel = FeedingPanel(
        today=len(feedings_today),
        last_feeding=_newest(events, "feeding", today, now),
        trend=feeding_count_aggregate(events, trend_window),
    )

    diapers_today = [e for e in events if e.event_type == "diaper" and today.contains(e.timestamp)]
    diaper_panel = DiaperPanel(
        today=len(diapers_today),
        last_change=_newest(events, "diaper", today, now),
        breakdown=diaper_breakdown(diapers_today),
    )

    medication_panel = MedicationPanel(
        active=len(active_medications(events, now.date())),
        next_dose=next_dose(events, now),
        upcoming_refills=len(upcoming_refills(events, now.date())),
    )

    growth = growth_series(events, growth_window)
    growth_panel = GrowthPanel(latest=growth.latest, trend=growth)

    recent_sleep = [
        e for e in events if e.event_type == "sleeping" and trend_window.contains(e.timestamp)
    ]
    score = sleep_score(recent_sleep, child.age_in_months(now.date()), tz)

    recent = sorted(
        (e for e in events if today.localize(e.timestamp) <= now),
        key=lambda e: (today.localize(e.timestamp), e.id),
        reverse=True,
    )[:RECENT_ACTIVITY_LIMIT]

    logger.debug("Built dashboard for child %s at %s", child.id, now.isoformat())

    return Dashboard(
        child_id=child.id,
        child_name=child.name,
        generated_at=now,
        sleep=sleep_panel,
        feedings=feeding_panel,
        diapers=diaper_panel,
        medications=medication_panel,
        growth=growth_panel,
        sleep_score=score,
        sleep_score_label=sleep_score_label(score),
        recent_activities=recent,
    )


def build_stats(child_id: int, events: list[Event], tz: Optional[tzinfo] = None) -> ChildStats:
    """Counts per type, the latest events and overall sleep figures."""
    sleeping = [e for e in events if e.event_type == "sleeping"]
    total_minutes = sum(resolve_details(e).duration_minutes for e in sleeping)
    total_hours = round(total_minutes / 60, 1)
    tz = tz or get_timezone()
    latest = sorted(events, key=lambda e: (_localize(e.timestamp, tz), e.id), reverse=True)
    return ChildStats(
        child_id=child_id,
        event_counts=event_counts(events),
        latest_events=latest[:RECENT_ACTIVITY_LIMIT],
        sleep_stats=SleepStats(
            total_sleep_hours=total_hours,
            average_sleep_hours=round(total_hours / len(sleeping), 1) if sleeping else 0.0,
            quality_distribution=sleep_quality_distribution(sleeping),
            total_events=len(sleeping),
        ),
    )
