import argparse
import logging
from pathlib import Path
from typing import Optional

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from config_manager import ConfigManager
from listing_kit.store import KitStore, ProfileStore

logger = logging.getLogger(__name__)

ROOT_DIR = Path(__file__).parent.parent


def create_app(
    config_manager: Optional[ConfigManager] = None,
    data_dir: Optional[Path] = None,
    profile_store: Optional[ProfileStore] = None,
    kit_store: Optional[KitStore] = None,
) -> Flask:
    """Build the Flask application.

    Stores are created from configuration unless passed in, so tests can
    inject their own.

    Args:
        config_manager: Configuration source (defaults to web_app_config.json + env)
        data_dir: Override for the data directory
        profile_store: Optional pre-built profile store
        kit_store: Optional pre-built kit store
    """
    config_manager = config_manager or ConfigManager()
    app_config = config_manager.get_app_config()
    quota_config = config_manager.get_quota_config()
    store_config = config_manager.get_store_config()

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------

    if data_dir is None:
        data_dir = Path(store_config.data_dir)
        if not data_dir.is_absolute():
            data_dir = ROOT_DIR / data_dir
    data_dir.mkdir(parents=True, exist_ok=True)

    profile_store = profile_store or ProfileStore(
        data_dir / "profiles.json", lock_timeout=store_config.lock_timeout_seconds
    )
    kit_store = kit_store or KitStore(
        data_dir / "kits.json", lock_timeout=store_config.lock_timeout_seconds
    )

    app = Flask(__name__)
    app.wsgi_app = ProxyFix(
            app.wsgi_app,
            x_proto = 1,     # trust 1 hop for X-Forwarded-Proto
            x_host  = 1,     # trust 1 hop for X-Forwarded-Host
            x_prefix= 1)     # <-- pay attention to X-Forwarded-Prefix

    # -------------------------------------------------------------------------
    # Modules
    # -------------------------------------------------------------------------

    from app.event_tracking.factory import create_event_tracking_module
    from app.user_management.factory import create_user_management_module
    from app.entitlement.factory import create_entitlement_module
    from app.kits.factory import create_kits_module
    from app.billing.factory import create_billing_module
    from app.diagnostics.factory import create_diagnostics_module

    event_tracking_module = create_event_tracking_module(data_dir / "events")
    event_tracker = event_tracking_module["service"]

    user_management_module = create_user_management_module(
        profile_store=profile_store,
        event_tracker=event_tracker
    )
    user_service = user_management_module["service"]

    entitlement_module = create_entitlement_module(
        profile_store=profile_store,
        user_service=user_service,
        event_tracker=event_tracker,
        base_free_limit=quota_config.base_free_limit,
        max_update_retries=quota_config.max_update_retries
    )

    kits_module = create_kits_module(
        kit_store=kit_store,
        user_service=user_service,
        event_tracker=event_tracker
    )

    billing_module = create_billing_module(
        profile_store=profile_store,
        webhook_secret=config_manager.get_billing_config().razorpay_webhook_secret,
        event_tracker=event_tracker
    )

    diagnostics_module = create_diagnostics_module(
        provider_config=config_manager.get_provider_config(),
        service_name=app_config.service_name,
        event_tracker=event_tracker
    )

    # Register blueprints
    app.register_blueprint(user_management_module["blueprint"])
    app.register_blueprint(entitlement_module["blueprint"])
    app.register_blueprint(kits_module["blueprint"])
    app.register_blueprint(billing_module["blueprint"])
    app.register_blueprint(diagnostics_module["blueprint"])

    # Expose services for scripts and tests
    app.extensions["listing_kit"] = {
        "profile_store": profile_store,
        "kit_store": kit_store,
        "event_tracker": event_tracker,
        "user_service": user_service,
        "entitlement_manager": entitlement_module["manager"],
        "billing_service": billing_module["service"],
    }

    logger.info(f"App created with data dir {data_dir}")
    return app


# -----------------------------------------------------------------------------
# Entry point
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    from listing_kit.logging_config import setup_logging

    parser = argparse.ArgumentParser(description="Listing kit API server")
    parser.add_argument("--port", type=int, help="Port to run the server on")
    parser.add_argument("--host", type=str, help="Host to bind the server to")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    args = parser.parse_args()

    config_manager = ConfigManager()
    app_config = config_manager.get_app_config()

    # Override configuration with command line arguments
    if args.port:
        app_config.port = args.port
    if args.host:
        app_config.host = args.host
    if args.debug:
        app_config.debug = args.debug

    setup_logging(debug=app_config.debug)
    app = create_app(config_manager)
    app.run(
        host=app_config.host,
        port=app_config.port,
        debug=app_config.debug
    )
