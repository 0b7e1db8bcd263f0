"""
Tests for the best-effort event tracking system.
"""

import json
import pytest
from pathlib import Path

from flask import Flask

from app.event_tracking.event_tracker import EventTracker
from app.event_tracking.event_types import EventType
from app.event_tracking.factory import create_event_tracking_module
from app.event_tracking.models import Event, EventLogStats


class TestEventTypes:
    """Test event type validation."""

    def test_valid_event_types(self):
        """Test that all expected event types are valid."""
        valid_types = [
            "quota_viewed", "unlock_extra", "reveal", "paywall_hit",
            "plan_upgraded", "profile_updated", "kit_viewed", "kits_listed"
        ]

        for event_type in valid_types:
            assert EventType.is_valid(event_type)

    def test_invalid_event_types(self):
        """Test that invalid event types are rejected."""
        for event_type in ["invalid", "mark_read", "REVEAL", ""]:
            assert not EventType.is_valid(event_type)

    def test_get_allowed_types(self):
        assert EventType.get_allowed_types() == {
            "quota_viewed", "unlock_extra", "reveal", "paywall_hit",
            "plan_upgraded", "profile_updated", "kit_viewed", "kits_listed"
        }


class TestEventModels:
    """Test event data models."""

    def test_event_serialization(self):
        """Test Event serialization to/from dict."""
        event = Event(
            ts="2025-01-01T00:00:00+00:00",
            type="unlock_extra",
            user_id="agent1",
            meta={"quota_extra": 1},
            path="/api/unlock-extra",
            ua="test-agent"
        )

        event_dict = event.to_dict()
        assert event_dict["type"] == "unlock_extra"
        assert event_dict["meta"] == {"quota_extra": 1}

        assert Event.from_dict(event_dict) == event

    def test_event_from_partial_dict(self):
        event = Event.from_dict({"ts": "2025-01-01T00:00:00Z", "type": "reveal", "meta": None})
        assert event.meta == {}
        assert event.user_id is None

    def test_stats_to_dict(self):
        assert EventLogStats(logged=3, failed=1, last_error="OSError: disk").to_dict() == {
            "logged": 3, "failed": 1, "last_error": "OSError: disk"
        }


class TestEventTracker:
    """Test the EventTracker service."""

    @pytest.fixture
    def tracker(self, tmp_path):
        return EventTracker(tmp_path / "events")

    def test_log_event_writes_user_file(self, tracker, tmp_path):
        """Events are appended to the owning user's file."""
        assert tracker.log_event("reveal", {"used": 1}, user_id="agent1")
        assert tracker.log_event("paywall_hit", {"used": 2}, user_id="agent1")

        data = json.loads((tmp_path / "events" / "agent1.json").read_text(encoding="utf-8"))
        assert [e["type"] for e in data["events"]] == ["reveal", "paywall_hit"]
        assert data["events"][0]["meta"] == {"used": 1}

    def test_anonymous_events(self, tracker, tmp_path):
        assert tracker.log_event("kit_viewed", {"kit_id": "k1"})
        assert (tmp_path / "events" / "_anonymous.json").exists()
        assert tracker.get_user_events(None)[0].meta == {"kit_id": "k1"}

    def test_user_id_cannot_escape_events_dir(self, tracker, tmp_path):
        assert tracker.log_event("reveal", user_id="../../etc/passwd")
        assert not (tmp_path / "etc").exists()
        assert len(list((tmp_path / "events").glob("*.json"))) == 1
        assert tracker.get_user_events("../../etc/passwd")[0].type == "reveal"

    def test_explicit_timestamp_is_kept(self, tracker):
        tracker.log_event("reveal", user_id="agent1", ts="2025-06-01T12:00:00+00:00")
        assert tracker.get_user_events("agent1")[0].ts == "2025-06-01T12:00:00+00:00"

    def test_unknown_type_is_dropped(self, tracker):
        assert tracker.log_event("not_a_type", user_id="agent1") is False
        assert tracker.get_user_events("agent1") == []
        assert tracker.get_stats().logged == 0

    def test_get_user_events_limit(self, tracker):
        for i in range(5):
            tracker.log_event("reveal", {"n": i}, user_id="agent1")

        recent = tracker.get_user_events("agent1", limit=2)
        assert [e.meta["n"] for e in recent] == [3, 4]

    def test_write_failure_is_counted_not_raised(self, tracker, monkeypatch):
        """A storage failure never escapes log_event."""
        def broken_save(uid, events):
            raise OSError("disk full")

        monkeypatch.setattr(tracker, "_save_events", broken_save)

        assert tracker.log_event("reveal", user_id="agent1") is False
        stats = tracker.get_stats()
        assert stats.failed == 1
        assert stats.logged == 0
        assert "disk full" in stats.last_error

    def test_corrupt_user_file_is_counted(self, tracker, tmp_path):
        (tmp_path / "events" / "agent1.json").write_text("{oops", encoding="utf-8")
        assert tracker.log_event("reveal", user_id="agent1") is False
        assert tracker.get_stats().failed == 1

    def test_stats_count_successes(self, tracker):
        tracker.log_event("reveal", user_id="agent1")
        tracker.log_event("unlock_extra", user_id="agent2")
        stats = tracker.get_stats()
        assert stats.logged == 2
        assert stats.failed == 0
        assert stats.last_error is None

    def test_request_context_fills_path_and_ua(self, tracker):
        app = Flask(__name__)
        with app.test_request_context("/api/reveal", method="POST", headers={"User-Agent": "pytest-ua"}):
            tracker.log_event("reveal", user_id="agent1")

        event = tracker.get_user_events("agent1")[0]
        assert event.path == "/api/reveal"
        assert event.ua == "pytest-ua"


def test_factory_creates_events_dir(tmp_path):
    events_dir = tmp_path / "nested" / "events"
    module = create_event_tracking_module(events_dir)
    assert isinstance(module["service"], EventTracker)
    assert events_dir.is_dir()
