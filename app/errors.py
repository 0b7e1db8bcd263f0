"""
Shared error responses for store failures.
"""
import logging
from flask import Blueprint, jsonify

from listing_kit.store import StoreError, StoreTimeout

logger = logging.getLogger(__name__)


def register_store_error_handlers(bp: Blueprint) -> None:
    """Map store failures raised inside a blueprint's views to JSON errors.

    StoreTimeout becomes a retryable 503; any other StoreError becomes a
    500 db_error carrying the failure details.
    """

    @bp.errorhandler(StoreTimeout)
    def handle_store_timeout(exc):
        logger.warning(f"Store timeout in {bp.name}: {exc}")
        return jsonify({"error": "store_timeout", "retryable": True}), 503

    @bp.errorhandler(StoreError)
    def handle_store_error(exc):
        logger.error(f"Store error in {bp.name}: {exc}")
        return jsonify({"error": "db_error", "details": str(exc)}), 500
