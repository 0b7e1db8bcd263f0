"""
Event Tracking Subsystem

Best-effort server-side event log for user analytics.
"""

from .event_tracker import EventTracker
from .event_types import EventType
from .models import Event, EventLogStats

__all__ = ['EventTracker', 'EventType', 'Event', 'EventLogStats']
