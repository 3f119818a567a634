"""Reading scene documents into a scene tree."""

from .builder import TreeBuilder
from .defaults import DefaultResolver
from .reader import ElementEvent, EventType, events_from_string, iter_events

__all__ = [
    "TreeBuilder",
    "DefaultResolver",
    "ElementEvent",
    "EventType",
    "events_from_string",
    "iter_events",
]
