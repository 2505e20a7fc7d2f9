from .child import Child, ChildCreate, ChildUpdate
from .details import EventDetails
from .event import Event, EventCreate, EventUpdate

__all__ = [
    "Child", "ChildCreate", "ChildUpdate",
    "Event", "EventCreate", "EventUpdate", "EventDetails",
]
