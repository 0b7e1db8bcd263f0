"""
Tests for the entitlement manager: limit arithmetic, unlocks and consumption.
"""
import shutil
import tempfile
import threading
from pathlib import Path

import pytest

from app.entitlement import EntitlementConfig, EntitlementConflict, EntitlementManager, QuotaReport
from listing_kit.models import Plan, Profile
from listing_kit.store import ProfileStore


class TestQuotaArithmetic:
    """Pure limit/report computations over profile records."""

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.store = ProfileStore(self.temp_dir / "profiles.json")
        self.manager = EntitlementManager(EntitlementConfig(), self.store)

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)

    @pytest.mark.parametrize("extra", [0, 1, 2, 7])
    def test_effective_limit_adds_extras_to_base(self, extra):
        """Limit is the free allotment plus unlocked extras."""
        profile = Profile(id="u1", quota_extra=extra)
        assert self.manager.effective_limit(profile) == 2 + extra

    def test_negative_counters_are_clamped(self):
        """Corrupt negative counters count as zero."""
        profile = Profile(id="u1", quota_used=-4, quota_extra=-3)
        assert self.manager.effective_limit(profile) == 2
        report = self.manager.report(profile)
        assert report.to_dict() == {"used": 0, "limit": 2, "extraUnlocked": False}

    def test_report_for_missing_profile(self):
        """A missing profile reports zero used and the base limit."""
        report = self.manager.report(None)
        assert report.to_dict() == {"used": 0, "limit": 2, "extraUnlocked": False}

    def test_report_with_extra_unlocked(self):
        profile = Profile(id="u1", quota_used=1, quota_extra=1)
        report = self.manager.report(profile)
        assert report == QuotaReport(used=1, limit=3, extra_unlocked=True)

    def test_custom_base_limit(self):
        manager = EntitlementManager(EntitlementConfig(base_free_limit=5), self.store)
        assert manager.effective_limit(Profile(id="u1", quota_extra=1)) == 6

    def test_plan_defaults_to_free(self):
        assert self.manager.get_plan(None) is Plan.FREE
        assert self.manager.get_plan(Profile(id="u1", plan="bogus")) is Plan.FREE
        assert self.manager.get_plan(Profile(id="u1", plan="TEAM")) is Plan.TEAM


class TestUnlockExtra:
    """The unlock operation ensures at least one extra, never adds."""

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.store = ProfileStore(self.temp_dir / "profiles.json")
        self.manager = EntitlementManager(EntitlementConfig(), self.store)

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)

    def test_unlock_sets_extra_to_one(self):
        self.store.update_profile("u1", {"quota_used": 2})
        assert self.manager.unlock_extra("u1") == 1
        assert self.store.get_profile("u1").quota_extra == 1

    def test_unlock_is_idempotent(self):
        """Unlocking twice yields the same value as unlocking once."""
        first = self.manager.unlock_extra("u1")
        second = self.manager.unlock_extra("u1")
        assert first == second == 1
        assert self.store.get_profile("u1").quota_extra == 1

    def test_unlock_never_decreases_extra(self):
        self.store.update_profile("u1", {"quota_extra": 4})
        assert self.manager.unlock_extra("u1") == 4
        assert self.store.get_profile("u1").quota_extra == 4

    def test_unlock_repairs_negative_extra(self):
        self.store.update_profile("u1", {"quota_extra": -2})
        assert self.manager.unlock_extra("u1") == 1

    def test_unlock_creates_missing_profile(self):
        assert self.store.get_profile("new_user") is None
        assert self.manager.unlock_extra("new_user") == 1
        assert self.store.get_profile("new_user").quota_extra == 1

    def test_scenario_report_unlock_report(self):
        """used=2, extra=0 -> limit 2; unlock -> extra 1; limit 3."""
        self.store.update_profile("u1", {"quota_used": 2, "quota_extra": 0})

        assert self.manager.get_quota_report("u1").to_dict() == {
            "used": 2, "limit": 2, "extraUnlocked": False
        }
        assert self.manager.unlock_extra("u1") == 1
        assert self.manager.get_quota_report("u1").to_dict() == {
            "used": 2, "limit": 3, "extraUnlocked": True
        }

    def test_concurrent_unlocks_end_at_one(self):
        """Simultaneous unlocks still leave exactly one extra."""
        manager = EntitlementManager(EntitlementConfig(max_update_retries=20), self.store)
        results = []

        def worker():
            results.append(manager.unlock_extra("u1"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results == [1] * 8
        assert self.store.get_profile("u1").quota_extra == 1

    def test_unlock_gives_up_when_cas_keeps_failing(self, monkeypatch):
        """A counter that keeps moving surfaces as a retryable conflict."""
        monkeypatch.setattr(self.store, "compare_and_set", lambda *a, **kw: False)
        with pytest.raises(EntitlementConflict):
            self.manager.unlock_extra("u1")


class TestConsume:
    """Consuming generations against the limit."""

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.store = ProfileStore(self.temp_dir / "profiles.json")
        self.manager = EntitlementManager(EntitlementConfig(max_update_retries=50), self.store)

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)

    def test_consume_until_paywall(self):
        first = self.manager.consume("u1")
        second = self.manager.consume("u1")
        third = self.manager.consume("u1")

        assert first.allowed and first.used == 1 and first.limit == 2
        assert second.allowed and second.used == 2
        assert not third.allowed
        assert third.to_dict() == {"error": "paywall", "used": 2, "limit": 2}
        assert self.store.get_profile("u1").quota_used == 2

    def test_unlock_allows_one_more(self):
        self.store.update_profile("u1", {"quota_used": 2})
        assert not self.manager.consume("u1").allowed

        self.manager.unlock_extra("u1")
        result = self.manager.consume("u1")
        assert result.allowed
        assert result.to_dict() == {"ok": True, "used": 3, "limit": 3}

    def test_paid_plan_is_not_limited(self):
        self.store.update_profile("u1", {"plan": "PRO", "quota_used": 10})
        result = self.manager.consume("u1")
        assert result.allowed
        assert result.used == 11

    def test_quota_used_never_decreases(self):
        used_values = []
        for _ in range(4):
            self.manager.consume("u1")
            used_values.append(self.store.get_profile("u1").quota_used)
        assert used_values == sorted(used_values)

    def test_concurrent_consumes_respect_limit(self):
        """Racing consumers never lose an increment or overshoot the limit."""
        self.store.update_profile("u1", {"quota_extra": 3})  # limit 5
        results = []
        lock = threading.Lock()

        def worker():
            result = self.manager.consume("u1")
            with lock:
                results.append(result)

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        allowed = [r for r in results if r.allowed]
        refused = [r for r in results if not r.allowed]
        assert len(allowed) == 5
        assert len(refused) == 5
        assert sorted(r.used for r in allowed) == [1, 2, 3, 4, 5]
        assert self.store.get_profile("u1").quota_used == 5
