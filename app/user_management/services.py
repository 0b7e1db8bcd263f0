"""
User management services for session lookup and profile editing.
"""
import logging
from typing import Optional

from flask import request

from listing_kit.models import Profile
from listing_kit.store import ProfileStore
from .models import ProfileUpdate

logger = logging.getLogger(__name__)


class UserService:
    """Service for session lookup and profile management.

    Sessions are issued by the identity provider in front of this service;
    here we only read the user id it leaves in the ``uid`` cookie.
    """

    SESSION_COOKIE = "uid"

    def __init__(self, profile_store: ProfileStore):
        self.profile_store = profile_store

    def get_current_user_id(self) -> Optional[str]:
        """Get the current user ID from cookies."""
        uid = request.cookies.get(self.SESSION_COOKIE, "").strip()
        return uid or None

    def require_auth_json(self) -> tuple[Optional[str], Optional[dict]]:
        """Require authentication for JSON endpoints, return error if not authenticated."""
        uid = self.get_current_user_id()
        if not uid:
            return None, {"error": "auth"}
        return uid, None

    def anonymous_user_dict(self, uid: str) -> dict:
        """User shape for a signed-in user who has no profile row yet."""
        return {"id": uid, "email": None, "avatar_url": None}

    def update_profile(self, uid: str, update: ProfileUpdate) -> Optional[Profile]:
        """Persist a profile update; returns None when there was nothing to write."""
        if update.is_empty():
            return None

        profile = self.profile_store.update_profile(uid, update.changes())
        logger.info(f"Updated profile for {uid}: {sorted(update.changes())}")
        return profile
