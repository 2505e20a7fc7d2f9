"""Dashboard, stats and per-metric trend endpoints."""

import logging
from datetime import date, datetime, timedelta
from typing import Literal, Optional, Union

from fastapi import APIRouter, Query

from childtrack.api.dependencies import ChildDep, DbDep, TzDep
from childtrack.models.aggregate import AggregateResult, GrowthSeries
from childtrack.models.report import ChildStats, Dashboard
from childtrack.services import dashboard_service, event_service
from childtrack.stats import aggregator
from childtrack.stats.buckets import Window

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stats", tags=["stats"])

Metric = Literal["sleep", "feeding", "feeding_count", "diaper", "temperature", "growth", "medication"]


def _reference_now(now: Optional[datetime], tz) -> datetime:
    if now is None:
        return datetime.now(tz)
    return now.astimezone(tz) if now.tzinfo else now.replace(tzinfo=tz)


@router.get("/{child_id}/dashboard", response_model=Dashboard)
async def get_dashboard(
    child: ChildDep,
    db: DbDep,
    tz: TzDep,
    now: Optional[datetime] = Query(None, description="Reference instant. Default: current time."),
) -> Dashboard:
    """Today's sleep, feedings, diapers, medications, growth and recent activity."""
    events = await event_service.list_events(db, child.id, tz=tz)
    return dashboard_service.build_dashboard(child, events, _reference_now(now, tz), tz)


@router.get("/{child_id}", response_model=ChildStats)
async def get_stats(child: ChildDep, db: DbDep, tz: TzDep) -> ChildStats:
    """Event counts per type, latest events and overall sleep figures."""
    events = await event_service.list_events(db, child.id, tz=tz)
    return dashboard_service.build_stats(child.id, events, tz)


@router.get("/{child_id}/{metric}", response_model=Union[AggregateResult, GrowthSeries])
async def get_metric(
    metric: Metric,
    child: ChildDep,
    db: DbDep,
    tz: TzDep,
    start: Optional[date] = Query(None, description="First day (YYYY-MM-DD). Default: six days before `end`."),
    end: Optional[date] = Query(None, description="Last day (YYYY-MM-DD). Default: today."),
    now: Optional[datetime] = Query(None, description="Reference instant for the default window."),
) -> Union[AggregateResult, GrowthSeries]:
    """
    Day-bucketed trend of one metric over `[start, end]`.

    Every day of the window is present in the trend, zero when nothing was
    logged. Sleep, feeding and diaper results also compare against the
    preceding window of equal length.
    """
    end = end or _reference_now(now, tz).date()
    start = start or end - timedelta(days=dashboard_service.DASHBOARD_TREND_DAYS - 1)
    window = Window(start, end, tz)

    # From the previous window on, including sleep still running when it opens
    lo, _ = window.previous().bounds()
    _, hi = window.bounds()
    events = await event_service.list_events(
        db, child.id, start=lo, end=hi, newest_first=False, tz=tz, overlapping=True
    )
    logger.debug("Computing %s for child %s over %s..%s", metric, child.id, start, end)

    if metric == "sleep":
        return aggregator.sleep_aggregate(events, window)
    if metric == "feeding":
        return aggregator.feeding_aggregate(events, window)
    if metric == "feeding_count":
        return aggregator.feeding_count_aggregate(events, window)
    if metric == "diaper":
        return aggregator.diaper_aggregate(events, window)
    if metric == "temperature":
        return aggregator.temperature_aggregate(events, window)
    if metric == "medication":
        return aggregator.medication_aggregate(events, window)
    return aggregator.growth_series(events, window)
