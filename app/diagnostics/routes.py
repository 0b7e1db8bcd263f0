"""
Diagnostic routes for health checks and provider configuration checks.
"""
from datetime import datetime, timezone

from flask import Blueprint, jsonify


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def describe_api_key(api_key: str) -> dict:
    """Report presence and shape of an API key without revealing it."""
    return {
        "openaiConfigured": bool(api_key),
        "keyLength": len(api_key) if api_key else 0,
        "keyPrefix": f"{api_key[:7]}..." if api_key else "Not set",
    }


def create_diagnostics_routes(provider_config, service_name: str, event_tracker=None) -> Blueprint:
    """Create diagnostics routes."""
    bp = Blueprint('diagnostics', __name__)

    @bp.route("/api/debug-openai-config", methods=["POST"])
    def debug_openai_config():
        """Check whether the model provider key is configured.

        Only presence and length are checked; the key is never validated.
        """
        return jsonify({
            **describe_api_key(provider_config.openai_api_key),
            "timestamp": _utc_timestamp()
        })

    @bp.get("/actuator/health")
    def actuator_health():
        """Health check endpoint for monitoring tools and cloud platforms."""
        body = {
            "status": "UP",
            "service": service_name
        }
        if event_tracker:
            stats = event_tracker.get_stats()
            body["event_log"] = {"logged": stats.logged, "failed": stats.failed}
        return jsonify(body), 200

    return bp
