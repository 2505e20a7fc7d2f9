from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from .details import EventDetails, EventType


class EventBase(BaseModel):
    child_id: int
    event_type: EventType
    timestamp: datetime = Field(..., description="Event instant (session start for sleep)")
    end_time: Optional[datetime] = None
    details: str = Field("", max_length=4000, description="Legacy 'Label: value' text")
    value: Optional[float] = Field(None, allow_inf_nan=False)


class EventCreate(EventBase):
    """Payload to log an event: typed `data` or legacy `details` text."""
    data: Optional[EventDetails] = None

    @model_validator(mode="after")
    def _data_matches_type(self) -> "EventCreate":
        if self.data is not None and self.data.kind != self.event_type:
            raise ValueError(
                f"data.kind '{self.data.kind}' does not match event_type '{self.event_type}'"
            )
        return self


class EventUpdate(BaseModel):
    """Payload to update an event: all fields optional."""
    timestamp: Optional[datetime] = None
    end_time: Optional[datetime] = None
    details: Optional[str] = Field(None, max_length=4000)
    value: Optional[float] = Field(None, allow_inf_nan=False)
    data: Optional[EventDetails] = None


class Event(EventBase):
    """Full model returned from the database."""
    id: int
    data: Optional[EventDetails] = None
    created_at: datetime

    model_config = {"from_attributes": True}
