"""
User management routes for profile editing.
"""
from flask import Blueprint, request, jsonify

from app.errors import register_store_error_handlers
from .models import ProfileUpdate
from .services import UserService


def create_user_routes(user_service: UserService, event_tracker=None) -> Blueprint:
    """Create user management routes."""
    bp = Blueprint('user_management', __name__)
    register_store_error_handlers(bp)

    @bp.route("/api/profile", methods=["POST"])
    def update_profile():
        """Update editable profile fields for the current user."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401

        update = ProfileUpdate.from_payload(request.get_json(silent=True))
        if update.is_empty():
            return jsonify({"ok": True})

        user_service.update_profile(uid, update)
        if event_tracker:
            event_tracker.log_event("profile_updated", {"fields": sorted(update.changes())}, uid)
        return jsonify({"ok": True})

    return bp
