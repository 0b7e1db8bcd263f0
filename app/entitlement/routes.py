"""
Entitlement routes for quota reporting, paid unlocks and consumption.
"""
import logging
from flask import Blueprint, jsonify

from app.errors import register_store_error_handlers
from .manager import EntitlementManager

logger = logging.getLogger(__name__)


def create_entitlement_routes(manager: EntitlementManager, user_service, event_tracker=None) -> Blueprint:
    """Create entitlement routes."""
    bp = Blueprint('entitlement', __name__)
    register_store_error_handlers(bp)

    def log_event(event_type: str, meta: dict, uid: str) -> None:
        if event_tracker:
            event_tracker.log_event(event_type, meta, uid)

    @bp.route("/api/me", methods=["GET"])
    def me():
        """Current user, quota and plan; null user and quota when signed out."""
        uid = user_service.get_current_user_id()
        if not uid:
            return jsonify({"user": None, "quota": None}), 200

        profile = manager.profile_store.get_profile(uid)
        report = manager.report(profile)
        plan = manager.get_plan(profile)
        user = profile.to_user_dict() if profile else user_service.anonymous_user_dict(uid)
        log_event("quota_viewed", report.to_dict(), uid)

        return jsonify({
            "user": user,
            "quota": report.to_dict(),
            "plan": plan.value
        })

    @bp.route("/api/unlock-extra", methods=["POST"])
    def unlock_extra():
        """Ensure at least one extra generation is unlocked."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401

        quota_extra = manager.unlock_extra(uid)
        log_event("unlock_extra", {"quota_extra": quota_extra}, uid)
        return jsonify({"ok": True, "quota_extra": quota_extra})

    @bp.route("/api/reveal", methods=["POST"])
    def reveal():
        """Consume one generation, or answer 402 when the free quota is spent."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 401

        result = manager.consume(uid)
        if not result.allowed:
            log_event("paywall_hit", {"used": result.used, "limit": result.limit}, uid)
            return jsonify(result.to_dict()), 402

        log_event("reveal", {"used": result.used, "limit": result.limit}, uid)
        return jsonify(result.to_dict())

    return bp
