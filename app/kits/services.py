"""
Kit services for listing a user's kits and reading kit status.
"""
import logging
from typing import List, Optional

from listing_kit.store import KitStore

logger = logging.getLogger(__name__)


class KitService:
    """Read-side access to kits."""

    def __init__(self, kit_store: KitStore):
        self.kit_store = kit_store

    def list_user_kits(self, uid: str) -> List[dict]:
        """Summaries of a user's kits, newest first."""
        return [kit.to_summary_dict() for kit in self.kit_store.list_kits(uid)]

    def get_kit_status(self, kit_id: str) -> Optional[dict]:
        """Status and outputs for a kit, or None if it does not exist."""
        logger.info(f"Fetching kit {kit_id}")
        kit = self.kit_store.get_kit(kit_id)
        if not kit:
            logger.warning(f"Kit {kit_id} not found")
            return None

        logger.info(f"Returning kit {kit_id} with status {kit.status.value}")
        return {
            "status": kit.status.value,
            "outputs": kit.outputs.model_dump(mode='json') if kit.outputs else None
        }
