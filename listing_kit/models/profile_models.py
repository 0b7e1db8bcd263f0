"""
Profile-related data models.

A profile is the per-user record that carries the plan and the
generation counters read by the entitlement manager.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class Plan(str, Enum):
    """Billing plans a profile can be on."""
    FREE = "FREE"
    PRO = "PRO"
    TEAM = "TEAM"

    @classmethod
    def from_value(cls, value: Optional[str]) -> "Plan":
        """Parse a stored plan string, falling back to FREE."""
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.FREE

    @property
    def is_paid(self) -> bool:
        return self is not Plan.FREE


class Profile(BaseModel):
    """User profile record."""
    id: str = Field(description="User ID issued by the identity provider")
    plan: str = Field(default=Plan.FREE.value, description="Billing plan name")
    # Counters are not range-checked here so that corrupt rows still load;
    # the entitlement manager clamps them.
    quota_used: int = Field(default=0, description="Number of kits generated so far")
    quota_extra: int = Field(default=0, description="Unlocked generations beyond the free allotment")
    email: Optional[str] = Field(default=None, description="Account email")
    display_name: Optional[str] = Field(default=None, description="Display name (max 80 chars)")
    avatar_url: Optional[str] = Field(default=None, description="Avatar image URL")
    marketing_opt_in: Optional[bool] = Field(default=None, description="Marketing email consent")
    timezone: Optional[str] = Field(default=None, description="IANA timezone name")
    locale: Optional[str] = Field(default=None, description="Preferred locale")
    created_at: str = Field(
        default_factory=lambda: datetime.now().astimezone().isoformat(timespec="seconds"),
        description="Creation time (ISO format)"
    )
    updated_at: Optional[str] = Field(default=None, description="Last update time (ISO format)")

    @property
    def plan_enum(self) -> Plan:
        return Plan.from_value(self.plan)

    def to_user_dict(self) -> dict:
        """Public user shape returned by the /api/me endpoint."""
        return {
            "id": self.id,
            "email": self.email,
            "avatar_url": self.avatar_url,
        }
