"""
Factory for creating entitlement components.
"""

from .models import EntitlementConfig
from .manager import EntitlementManager
from .routes import create_entitlement_routes


def create_entitlement_module(
    profile_store,
    user_service,
    event_tracker=None,
    base_free_limit: int = 2,
    max_update_retries: int = 5,
) -> dict:
    """
    Create entitlement module.

    Args:
        profile_store: ProfileStore holding the quota counters
        user_service: UserService used to resolve the session
        event_tracker: Optional EventTracker for best-effort telemetry
        base_free_limit: Generations every profile gets for free
        max_update_retries: Compare-and-set attempts before giving up

    Returns:
        Dictionary with:
        - manager: EntitlementManager instance
        - config: EntitlementConfig instance
        - blueprint: Flask blueprint with the unlock and reveal routes
    """
    config = EntitlementConfig(
        base_free_limit=base_free_limit,
        max_update_retries=max_update_retries
    )

    manager = EntitlementManager(
        config=config,
        profile_store=profile_store
    )

    blueprint = create_entitlement_routes(manager, user_service, event_tracker)

    return {
        "manager": manager,
        "config": config,
        "blueprint": blueprint
    }
