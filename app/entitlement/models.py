"""
Data models for the entitlement system.
"""

from dataclasses import dataclass
from typing import Optional

from listing_kit.store import StoreTimeout


BASE_FREE_LIMIT = 2


class EntitlementConflict(StoreTimeout):
    """Raised when a counter kept changing under concurrent writers."""


@dataclass
class EntitlementConfig:
    """Configuration for entitlement limits."""
    base_free_limit: int = BASE_FREE_LIMIT
    max_update_retries: int = 5


@dataclass
class QuotaReport:
    """Quota state shown to the user."""
    used: int
    limit: int
    extra_unlocked: bool

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "used": self.used,
            "limit": self.limit,
            "extraUnlocked": self.extra_unlocked
        }


@dataclass
class ConsumeResult:
    """Result of trying to consume one generation."""
    allowed: bool
    used: int
    limit: int
    reason: Optional[str] = None  # "paywall"

    def to_dict(self) -> dict:
        if self.allowed:
            return {"ok": True, "used": self.used, "limit": self.limit}
        return {"error": self.reason, "used": self.used, "limit": self.limit}
