"""
Factory for creating diagnostics module.
"""
from .routes import create_diagnostics_routes


def create_diagnostics_module(provider_config, service_name: str, event_tracker=None) -> dict:
    """Create diagnostics module.

    Args:
        provider_config: ProviderConfig holding the model provider key
        service_name: Name reported by the health endpoint
        event_tracker: Optional EventTracker whose counters are reported

    Returns:
        Dictionary containing the blueprint
    """
    blueprint = create_diagnostics_routes(provider_config, service_name, event_tracker)

    return {
        "blueprint": blueprint
    }
