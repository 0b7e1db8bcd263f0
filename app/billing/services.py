"""
Billing services for payment webhook verification and plan upgrades.
"""
import hashlib
import hmac
import logging
from typing import Any, Dict, Optional, Tuple

from listing_kit.models import Plan
from listing_kit.store import ProfileStore

logger = logging.getLogger(__name__)

# Events that mean the order has been paid for
PAID_EVENTS = {"payment.captured", "order.paid"}


def parse_receipt(receipt: Optional[str]) -> Optional[Tuple[str, Plan]]:
    """Split an order receipt of the form ``<user_id>-<PLAN>-<timestamp>``.

    User ids may themselves contain dashes, so the receipt is split from
    the right.

    Returns:
        (user_id, plan) or None if the receipt is malformed
    """
    if not receipt or not isinstance(receipt, str):
        return None

    parts = receipt.rsplit("-", 2)
    if len(parts) != 3 or not parts[0]:
        return None

    user_id, plan_name, _ = parts
    plan = Plan.TEAM if plan_name.upper() == Plan.TEAM.value else Plan.PRO
    return user_id, plan


def _order_receipt(event: Dict[str, Any]) -> Any:
    """Dig payload.order.entity.receipt out of a webhook body, or None."""
    node: Any = event
    for key in ("payload", "order", "entity"):
        node = node.get(key) if isinstance(node, dict) else None
    return node.get("receipt") if isinstance(node, dict) else None


class BillingService:
    """Handles payment provider webhooks."""

    def __init__(self, profile_store: ProfileStore, webhook_secret: str):
        self.profile_store = profile_store
        self.webhook_secret = webhook_secret

    @property
    def is_configured(self) -> bool:
        return bool(self.webhook_secret)

    def verify_signature(self, body: bytes, signature: str) -> bool:
        """Check an HMAC-SHA256 hex signature of the raw request body."""
        expected = hmac.new(self.webhook_secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
        return hmac.compare_digest(expected, (signature or "").strip())

    def handle_event(self, event: Dict[str, Any]) -> Optional[Tuple[str, Plan]]:
        """Apply a verified webhook event.

        Returns:
            (user_id, plan) if a profile was upgraded, None if the event was ignored
        """
        event_name = event.get("event")
        if not isinstance(event_name, str) or event_name not in PAID_EVENTS:
            logger.info(f"Ignoring webhook event {event_name}")
            return None

        receipt = _order_receipt(event)
        parsed = parse_receipt(receipt)
        if not parsed:
            logger.warning(f"Webhook {event_name} has no usable receipt: {receipt!r}")
            return None

        user_id, plan = parsed
        self.profile_store.update_profile(user_id, {"plan": plan.value})
        logger.info(f"Upgraded {user_id} to {plan.value} after {event_name}")
        return user_id, plan
