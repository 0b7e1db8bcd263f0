"""
Factory for creating kits module.
"""
from listing_kit.store import KitStore
from .services import KitService
from .routes import create_kit_routes


def create_kits_module(kit_store: KitStore, user_service, event_tracker=None) -> dict:
    """Create kits module with service and routes.

    Args:
        kit_store: Store holding kit records
        user_service: UserService used to resolve the session
        event_tracker: Optional EventTracker for best-effort telemetry

    Returns:
        Dictionary containing the service and blueprint
    """
    kit_service = KitService(kit_store)

    blueprint = create_kit_routes(kit_service, user_service, event_tracker)

    return {
        "service": kit_service,
        "blueprint": blueprint
    }
