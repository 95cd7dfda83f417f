"""
Events Module

Festival events, student assignments and the participation catalog.

API Endpoints:
- POST /approved-students - action based, see router.py
"""

from .models import (
    FESTIVAL_EVENT_CODES,
    PER_EVENT_TABLES,
    AccompanistEventParticipation,
    Event,
    EventType,
    PersonType,
    StudentEventParticipation,
)

__all__ = [
    "FESTIVAL_EVENT_CODES",
    "PER_EVENT_TABLES",
    "AccompanistEventParticipation",
    "Event",
    "EventType",
    "PersonType",
    "StudentEventParticipation",
]
