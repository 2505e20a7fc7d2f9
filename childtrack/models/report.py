"""Dashboard, stats and report payloads assembled from aggregate results."""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel

from .aggregate import AggregateResult, GrowthPoint, GrowthSeries, NextDose
from .event import Event


ReportType = Literal["sleeping", "feeding", "diaper", "growth", "medication", "temperature", "all"]


class SleepToday(BaseModel):
    hours: int
    minutes: int
    total_minutes: int
    percent_change: int


class SleepPanel(BaseModel):
    today: SleepToday
    last_updated: Optional[datetime] = None
    trend: AggregateResult


class FeedingPanel(BaseModel):
    today: int
    last_feeding: Optional[Event] = None
    trend: AggregateResult


class DiaperPanel(BaseModel):
    today: int
    last_change: Optional[Event] = None
    breakdown: dict[str, int]


class MedicationPanel(BaseModel):
    active: int
    next_dose: Optional[NextDose] = None
    upcoming_refills: int


class GrowthPanel(BaseModel):
    latest: Optional[GrowthPoint] = None
    trend: GrowthSeries


class Dashboard(BaseModel):
    child_id: int
    child_name: str
    generated_at: datetime
    sleep: SleepPanel
    feedings: FeedingPanel
    diapers: DiaperPanel
    medications: MedicationPanel
    growth: GrowthPanel
    sleep_score: int
    sleep_score_label: str
    recent_activities: list[Event]


class SleepStats(BaseModel):
    total_sleep_hours: float
    average_sleep_hours: float
    quality_distribution: dict[str, int]
    total_events: int


class ChildStats(BaseModel):
    child_id: int
    event_counts: dict[str, int]
    latest_events: list[Event]
    sleep_stats: SleepStats


class ReportRow(BaseModel):
    day: date
    start_time: datetime
    end_time: Optional[datetime] = None
    event_type: str
    value: Optional[float] = None
    value_label: str = ""
    notes: str = ""


class ReportRequest(BaseModel):
    report_type: ReportType
    start_date: date
    end_date: date


class ChildReport(BaseModel):
    """Assembled report: summary figures, aggregates and the detailed rows."""
    child_id: int
    child_name: str
    report_type: ReportType
    start_date: date
    end_date: date
    generated_at: datetime
    total_entries: int
    summary: dict[str, Optional[float]]
    aggregates: list[AggregateResult] = []
    growth: Optional[GrowthSeries] = None
    rows: list[ReportRow] = []


class SavedReport(BaseModel):
    """Full saved report record returned from the database."""
    id: int
    child_id: int
    report_type: ReportType
    start_date: date
    end_date: date
    report: ChildReport
    created_at: datetime

    model_config = {"from_attributes": True}


class SavedReportSummary(BaseModel):
    """Lightweight listing model: no report payload."""
    id: int
    child_id: int
    report_type: ReportType
    start_date: date
    end_date: date
    created_at: datetime
