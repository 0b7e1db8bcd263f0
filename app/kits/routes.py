"""
Kit routes for the kit history list and kit status polling.
"""
from flask import Blueprint, jsonify

from app.errors import register_store_error_handlers
from .services import KitService


def create_kit_routes(kit_service: KitService, user_service, event_tracker=None) -> Blueprint:
    """Create kit routes."""
    bp = Blueprint('kits', __name__)
    register_store_error_handlers(bp)

    @bp.route("/api/me/kits", methods=["GET"])
    def my_kits():
        """List the current user's kits, newest first."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401

        kits = kit_service.list_user_kits(uid)
        if event_tracker:
            event_tracker.log_event("kits_listed", {"count": len(kits)}, uid)
        return jsonify({"kits": kits})

    @bp.route("/api/kits/<kit_id>", methods=["GET"])
    def kit_status(kit_id):
        """Status and outputs for one kit."""
        result = kit_service.get_kit_status(kit_id)
        if result is None:
            return jsonify({"error": "not_found"}), 404

        if event_tracker:
            event_tracker.log_event(
                "kit_viewed",
                {"kit_id": kit_id, "status": result["status"]},
                user_service.get_current_user_id()
            )
        return jsonify(result)

    return bp
