"""
Billing routes for the payment provider webhook.
"""
import json
import logging
from flask import Blueprint, request, jsonify

from app.errors import register_store_error_handlers
from .services import BillingService

logger = logging.getLogger(__name__)


def create_billing_routes(billing_service: BillingService, event_tracker=None) -> Blueprint:
    """Create billing routes."""
    bp = Blueprint('billing', __name__)
    register_store_error_handlers(bp)

    @bp.route("/api/razorpay/webhook", methods=["POST"])
    def razorpay_webhook():
        """Upgrade the paying user's plan once the payment is captured."""
        if not billing_service.is_configured:
            logger.error("Webhook received but no webhook secret is configured")
            return jsonify({"error": "config"}), 500

        body = request.get_data()
        signature = request.headers.get("X-Razorpay-Signature", "")
        if not billing_service.verify_signature(body, signature):
            logger.warning("Rejected webhook with invalid signature")
            return jsonify({"error": "invalid_signature"}), 400

        try:
            event = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return jsonify({"error": "bad_request"}), 400
        if not isinstance(event, dict):
            return jsonify({"error": "bad_request"}), 400

        upgraded = billing_service.handle_event(event)
        if upgraded and event_tracker:
            user_id, plan = upgraded
            event_tracker.log_event("plan_upgraded", {"plan": plan.value, "event": event.get("event")}, user_id)
        return jsonify({"ok": True})

    return bp
