"""
Event Tracker

Best-effort event logging. A failure to record an event must never break the
request that triggered it, so log_event swallows its own errors; each one is
logged at WARNING and counted so the failure rate stays visible on the
health endpoint.
"""

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional

from flask import has_request_context, request

from .event_types import EventType
from .models import Event, EventLogStats

logger = logging.getLogger(__name__)

ANONYMOUS_UID = "_anonymous"
UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")


class EventTracker:
    """Server-side event log stored as one JSON file per user."""

    def __init__(self, events_dir: Path):
        """Initialize the event tracker.

        Args:
            events_dir: Directory where per-user event files are stored
        """
        self.events_dir = events_dir
        self.events_dir.mkdir(parents=True, exist_ok=True)
        self._write_lock = Lock()
        self._stats_lock = Lock()
        self._stats = EventLogStats()

    def _user_file(self, uid: Optional[str]) -> Path:
        """Get event file path for a user."""
        name = UNSAFE_FILENAME_CHARS.sub("_", uid) if uid else ANONYMOUS_UID
        return self.events_dir / f"{name}.json"

    def _load_events(self, uid: Optional[str]) -> List[Dict[str, Any]]:
        try:
            data = json.loads(self._user_file(uid).read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        events = data.get("events") if isinstance(data, dict) else None
        return events if isinstance(events, list) else []

    def _save_events(self, uid: Optional[str], events: List[Dict[str, Any]]) -> None:
        self._user_file(uid).write_text(
            json.dumps({"events": events}, indent=2, ensure_ascii=False), encoding="utf-8"
        )

    def _record_failure(self, event_type: str, exc: Exception) -> None:
        with self._stats_lock:
            self._stats.failed += 1
            self._stats.last_error = f"{type(exc).__name__}: {exc}"
        logger.warning(f"Failed to log event {event_type}: {exc}")

    def log_event(
        self,
        event_type: str,
        meta: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None,
        ts: Optional[str] = None
    ) -> bool:
        """Record a single event. Never raises.

        Args:
            event_type: Type of event (must be in allowed types)
            meta: Optional metadata dictionary
            user_id: Owning user, or None for anonymous events
            ts: Optional timestamp (if not provided, uses current time)

        Returns:
            True if the event was stored, False otherwise
        """
        if not EventType.is_valid(event_type):
            logger.warning(f"Dropping event with unknown type: {event_type!r}")
            return False

        try:
            event = Event(
                ts=ts or datetime.now().astimezone().isoformat(timespec="seconds"),
                type=event_type,
                user_id=user_id,
                meta=meta or {},
                path=request.path if has_request_context() else None,
                ua=request.headers.get("User-Agent") if has_request_context() else None
            )

            with self._write_lock:
                events = self._load_events(user_id)
                events.append(event.to_dict())
                self._save_events(user_id, events)
        except Exception as exc:
            self._record_failure(event_type, exc)
            return False

        with self._stats_lock:
            self._stats.logged += 1
        return True

    def get_user_events(self, user_id: Optional[str], limit: Optional[int] = None) -> List[Event]:
        """Get events for a user, oldest first.

        Args:
            user_id: User identifier, or None for anonymous events
            limit: Optional limit on number of most recent events to return
        """
        events = [Event.from_dict(e) for e in self._load_events(user_id)]
        if limit is not None:
            events = events[-limit:]
        return events

    def get_stats(self) -> EventLogStats:
        """Snapshot of logged/failed counters."""
        with self._stats_lock:
            return EventLogStats(
                logged=self._stats.logged,
                failed=self._stats.failed,
                last_error=self._stats.last_error
            )
