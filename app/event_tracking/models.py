"""
Data Models for Event Tracking

Defines the data structures used by the event tracking system.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Event:
    """Internal event structure for storage."""

    ts: str
    type: str
    user_id: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)
    path: Optional[str] = None
    ua: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "ts": self.ts,
            "type": self.type,
            "user_id": self.user_id,
            "meta": self.meta,
            "path": self.path,
            "ua": self.ua
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Event':
        """Create Event from dictionary."""
        return cls(
            ts=data.get("ts", ""),
            type=data.get("type", ""),
            user_id=data.get("user_id"),
            meta=data.get("meta") or {},
            path=data.get("path"),
            ua=data.get("ua")
        )


@dataclass
class EventLogStats:
    """Counters describing how best-effort logging is doing."""

    logged: int = 0
    failed: int = 0
    last_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "logged": self.logged,
            "failed": self.failed,
            "last_error": self.last_error
        }
