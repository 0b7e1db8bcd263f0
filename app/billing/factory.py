"""
Factory for creating billing module.
"""
from listing_kit.store import ProfileStore
from .services import BillingService
from .routes import create_billing_routes


def create_billing_module(profile_store: ProfileStore, webhook_secret: str, event_tracker=None) -> dict:
    """Create billing module with service and routes.

    Args:
        profile_store: Store holding user profiles
        webhook_secret: Shared secret used to sign webhook bodies
        event_tracker: Optional EventTracker for best-effort telemetry

    Returns:
        Dictionary containing the service and blueprint
    """
    billing_service = BillingService(profile_store, webhook_secret)

    blueprint = create_billing_routes(billing_service, event_tracker)

    return {
        "service": billing_service,
        "blueprint": blueprint
    }
