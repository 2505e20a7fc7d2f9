"""Typed per-category event details.

Each event category carries its own record, discriminated by ``kind``.
Records are built from the legacy ``Label: value`` text by
``childtrack.stats.details.parse_details`` or supplied directly by clients.
"""

from datetime import date, datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


EventType = Literal["sleeping", "feeding", "diaper", "growth", "medication", "temperature"]

EVENT_TYPES: tuple[str, ...] = (
    "sleeping", "feeding", "diaper", "growth", "medication", "temperature",
)

SLEEP_QUALITIES: tuple[str, ...] = ("poor", "fair", "good", "excellent")
DIAPER_TYPES: tuple[str, ...] = ("wet", "dirty", "mixed", "dry")

DEFAULT_SLEEP_QUALITY = "good"
DEFAULT_MEDICATION_STATUS = "active"


class _Details(BaseModel):
    notes: Optional[str] = None

    model_config = {"frozen": True, "allow_inf_nan": False}


class SleepDetails(_Details):
    kind: Literal["sleeping"] = "sleeping"
    quality: str = DEFAULT_SLEEP_QUALITY
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration_minutes: float = 0
    location: Optional[str] = None


class FeedingDetails(_Details):
    kind: Literal["feeding"] = "feeding"
    type: Optional[str] = None
    amount: Optional[float] = None
    unit: Optional[str] = None
    duration_minutes: Optional[float] = None


class DiaperDetails(_Details):
    kind: Literal["diaper"] = "diaper"
    type: Optional[str] = None
    contents: list[str] = []


class GrowthDetails(_Details):
    kind: Literal["growth"] = "growth"
    weight: Optional[float] = None
    weight_unit: str = "kg"
    height: Optional[float] = None
    height_unit: str = "cm"
    head_circumference: Optional[float] = None


class MedicationDetails(_Details):
    kind: Literal["medication"] = "medication"
    medication: Optional[str] = None
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    time_of_day: list[str] = []
    status: str = DEFAULT_MEDICATION_STATUS
    instructions: Optional[str] = None
    reason: Optional[str] = None
    administered_at: Optional[datetime] = None
    administered_dose: Optional[str] = None
    administered_by: Optional[str] = None


class TemperatureDetails(_Details):
    kind: Literal["temperature"] = "temperature"
    temperature: Optional[float] = None
    unit: Literal["celsius", "fahrenheit"] = "celsius"
    method: Optional[str] = None


EventDetails = Annotated[
    Union[
        SleepDetails,
        FeedingDetails,
        DiaperDetails,
        GrowthDetails,
        MedicationDetails,
        TemperatureDetails,
    ],
    Field(discriminator="kind"),
]
