"""
Entitlement module for free-quota and paid-unlock access control.
Computes how many kit generations a profile has available.
"""

from .models import EntitlementConfig, QuotaReport, ConsumeResult, EntitlementConflict
from .manager import EntitlementManager

__all__ = ["EntitlementConfig", "QuotaReport", "ConsumeResult", "EntitlementConflict", "EntitlementManager"]
