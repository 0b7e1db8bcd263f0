"""
Factory for creating event tracking module.
"""
from pathlib import Path
from .event_tracker import EventTracker


def create_event_tracking_module(events_dir: Path) -> dict:
    """Create event tracking module.

    Args:
        events_dir: Directory to store per-user event files

    Returns:
        Dictionary containing the service
    """
    event_tracker = EventTracker(events_dir)

    return {
        "service": event_tracker
    }
