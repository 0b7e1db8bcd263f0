"""
Models package for profile and kit records.

This package contains the Pydantic models persisted by the record stores.
"""

from .profile_models import (
    Plan,
    Profile,
)

from .kit_models import (
    KitStatus,
    KitPayload,
    KitOutputs,
    Kit,
)

__all__ = [
    # Profile models
    "Plan",
    "Profile",

    # Kit models
    "KitStatus",
    "KitPayload",
    "KitOutputs",
    "Kit",
]
