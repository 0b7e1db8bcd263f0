"""
Factory for creating user management module.
"""
from listing_kit.store import ProfileStore
from .services import UserService
from .routes import create_user_routes


def create_user_management_module(profile_store: ProfileStore, event_tracker=None) -> dict:
    """Create user management module with service and routes.

    Args:
        profile_store: Store holding user profiles
        event_tracker: Optional EventTracker for best-effort telemetry

    Returns:
        Dictionary containing the service and blueprint
    """
    user_service = UserService(profile_store)

    blueprint = create_user_routes(user_service, event_tracker)

    return {
        "service": user_service,
        "blueprint": blueprint
    }
