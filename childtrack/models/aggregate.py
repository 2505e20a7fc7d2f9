"""Aggregate results produced by the statistics core."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel


class TrendPoint(BaseModel):
    bucket_key: str
    value: float

    model_config = {"frozen": True}


class AggregateResult(BaseModel):
    """Immutable snapshot of one metric over a day window."""
    metric: str
    unit: Optional[str] = None
    window_start: date
    window_end: date
    total: float
    count: int
    average: Optional[float] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    trend: list[TrendPoint]
    previous_total: Optional[float] = None
    percent_change: Optional[int] = None
    breakdown: Optional[dict[str, int]] = None

    model_config = {"frozen": True}


class GrowthPoint(BaseModel):
    bucket_key: str
    timestamp: datetime
    weight: Optional[float] = None
    weight_unit: str = "kg"
    height: Optional[float] = None
    height_unit: str = "cm"
    head_circumference: Optional[float] = None

    model_config = {"frozen": True}


class GrowthSeries(BaseModel):
    """Chronological measurements: a series of readings, not zero-filled."""
    window_start: date
    window_end: date
    points: list[GrowthPoint]
    latest: Optional[GrowthPoint] = None
    weight_gain: Optional[float] = None

    model_config = {"frozen": True}


class NextDose(BaseModel):
    event_id: int
    time: datetime
    medication: Optional[str] = None
    dosage: Optional[str] = None

    model_config = {"frozen": True}
