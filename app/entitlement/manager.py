"""
Entitlement manager for free-quota and paid-unlock access control.
"""

import logging
from typing import Optional, Tuple

from listing_kit.models import Plan, Profile
from listing_kit.store import ProfileStore

from .models import EntitlementConfig, QuotaReport, ConsumeResult, EntitlementConflict

logger = logging.getLogger(__name__)


class EntitlementManager:
    """
    Computes and updates how many kit generations a profile has available.

    Limit rules:
    - Every profile gets ``base_free_limit`` generations
    - ``quota_extra`` unlocked generations are added on top
    - Paid plans are not held to the free limit when consuming

    All counter writes are compare-and-set against the value just read, so
    concurrent requests can't lose an increment.
    """

    def __init__(self, config: EntitlementConfig, profile_store: ProfileStore):
        """
        Initialize EntitlementManager.

        Args:
            config: EntitlementConfig with limits
            profile_store: Store holding profile counters
        """
        self.config = config
        self.profile_store = profile_store

    def _counters(self, profile: Optional[Profile]) -> Tuple[int, int]:
        """Return (used, extra) for a profile, clamped to be non-negative."""
        if profile is None:
            return 0, 0

        used, extra = profile.quota_used, profile.quota_extra
        if used < 0 or extra < 0:
            logger.warning(
                f"Negative quota counters on profile {profile.id}: "
                f"used={used}, extra={extra}; clamping to zero"
            )
        return max(0, used), max(0, extra)

    def effective_limit(self, profile: Optional[Profile]) -> int:
        """Free allotment plus unlocked extras."""
        _, extra = self._counters(profile)
        return self.config.base_free_limit + extra

    def report(self, profile: Optional[Profile]) -> QuotaReport:
        """Build the quota report for a profile (None counts as empty)."""
        used, extra = self._counters(profile)
        return QuotaReport(
            used=used,
            limit=self.config.base_free_limit + extra,
            extra_unlocked=extra > 0
        )

    def get_plan(self, profile: Optional[Profile]) -> Plan:
        return profile.plan_enum if profile else Plan.FREE

    def get_quota_report(self, uid: str) -> QuotaReport:
        """Read the profile for uid and report its quota."""
        return self.report(self.profile_store.get_profile(uid))

    def unlock_extra(self, uid: str) -> int:
        """
        Ensure the user has at least one extra generation unlocked.

        Sets ``quota_extra`` to ``max(1, quota_extra)``. Calling this again
        grants nothing more.

        Args:
            uid: User ID

        Returns:
            The resulting quota_extra value

        Raises:
            EntitlementConflict: if the profile kept changing under us
        """
        for attempt in range(self.config.max_update_retries):
            profile = self.profile_store.get_profile(uid)
            stored_extra = profile.quota_extra if profile else 0
            new_extra = max(1, stored_extra)

            if profile is not None and new_extra == stored_extra:
                logger.info(f"Unlock for {uid} is a no-op, quota_extra={stored_extra}")
                return stored_extra

            if self.profile_store.compare_and_set(
                uid,
                expected={"quota_extra": stored_extra},
                changes={"quota_extra": new_extra},
            ):
                logger.info(f"Unlocked extra quota for {uid}: {stored_extra} -> {new_extra}")
                return new_extra

            logger.info(f"Unlock for {uid} raced with another write, retrying (attempt {attempt + 1})")

        raise EntitlementConflict(f"could not unlock extra quota for {uid}")

    def consume(self, uid: str) -> ConsumeResult:
        """
        Check quota and consume one generation if allowed.

        FREE profiles at or above their limit are refused with reason
        "paywall". Everyone else has ``quota_used`` incremented.

        Raises:
            EntitlementConflict: if the profile kept changing under us
        """
        for attempt in range(self.config.max_update_retries):
            profile = self.profile_store.get_profile(uid)
            used, _ = self._counters(profile)
            limit = self.effective_limit(profile)
            plan = self.get_plan(profile)

            if used >= limit and not plan.is_paid:
                logger.info(f"Paywall for {uid}: used={used}, limit={limit}")
                return ConsumeResult(allowed=False, used=used, limit=limit, reason="paywall")

            stored_used = profile.quota_used if profile else 0
            if self.profile_store.compare_and_set(
                uid,
                expected={"quota_used": stored_used},
                changes={"quota_used": used + 1},
            ):
                logger.info(f"Consumed quota for {uid}: {used + 1}/{limit} ({plan.value})")
                return ConsumeResult(allowed=True, used=used + 1, limit=limit)

            logger.info(f"Consume for {uid} raced with another write, retrying (attempt {attempt + 1})")

        raise EntitlementConflict(f"could not consume quota for {uid}")
