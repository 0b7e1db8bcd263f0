"""
Record stores for profiles and kits.

Each store keeps its records in a single JSON file keyed by record id. All
reads and writes happen under a per-store lock whose acquisition is bounded
by a timeout, so a wedged writer surfaces as StoreTimeout instead of a hung
request. Counter updates go through ProfileStore.compare_and_set, which only
writes when the stored values still match what the caller read.
"""

import json
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Iterator, List, Optional

from pydantic import ValidationError

from .models import Kit, KitOutputs, KitPayload, KitStatus, Profile

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the backing store cannot be read or written."""


class StoreTimeout(StoreError):
    """Raised when the store lock cannot be acquired in time."""


class JsonRecordStore:
    """Base class for JSON-file record stores."""

    def __init__(self, store_file: Path, lock_timeout: float = 5.0):
        """
        Initialize the store.

        Args:
            store_file: Path to the JSON file holding the records
            lock_timeout: Seconds to wait for the store lock before giving up
        """
        self.store_file = store_file
        self.lock_timeout = lock_timeout
        self._lock = Lock()

        if not self.store_file.exists():
            self._save_records({})

    @contextmanager
    def _locked(self) -> Iterator[None]:
        if not self._lock.acquire(timeout=self.lock_timeout):
            logger.error(f"Timed out after {self.lock_timeout}s waiting for {self.store_file.name}")
            raise StoreTimeout(f"timed out waiting for {self.store_file.name}")
        try:
            yield
        finally:
            self._lock.release()

    def _load_records(self) -> Dict[str, Any]:
        """Load raw records from file."""
        try:
            with open(self.store_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading {self.store_file}: {e}")
            raise StoreError(f"could not read {self.store_file.name}: {e}") from e

        if not isinstance(data, dict):
            raise StoreError(f"unexpected top-level type in {self.store_file.name}")
        return data

    def _save_records(self, records: Dict[str, Any]) -> None:
        """Save raw records to file, replacing it atomically."""
        tmp_file = self.store_file.with_suffix(self.store_file.suffix + ".tmp")
        try:
            self.store_file.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_file, 'w', encoding='utf-8') as f:
                json.dump(records, f, ensure_ascii=False, indent=2)
            tmp_file.replace(self.store_file)
        except OSError as e:
            logger.error(f"Error saving {self.store_file}: {e}")
            raise StoreError(f"could not write {self.store_file.name}: {e}") from e


class ProfileStore(JsonRecordStore):
    """Persists user profiles."""

    def _parse(self, raw: Dict[str, Any]) -> Profile:
        try:
            return Profile.model_validate(raw)
        except ValidationError as e:
            raise StoreError(f"invalid profile record: {e}") from e

    def get_profile(self, uid: str) -> Optional[Profile]:
        """Return the profile for uid, or None if it does not exist."""
        with self._locked():
            raw = self._load_records().get(uid)
        return self._parse(raw) if raw is not None else None

    def ensure_profile(self, uid: str, email: Optional[str] = None) -> Profile:
        """Return the profile for uid, creating an empty FREE profile if needed."""
        with self._locked():
            records = self._load_records()
            raw = records.get(uid)
            if raw is not None:
                return self._parse(raw)

            profile = Profile(id=uid, email=email)
            records[uid] = profile.model_dump(mode='json')
            self._save_records(records)
            logger.info(f"Created profile for {uid}")
            return profile

    def update_profile(self, uid: str, changes: Dict[str, Any]) -> Profile:
        """Apply field changes to a profile, creating it if missing."""
        with self._locked():
            records = self._load_records()
            raw = records.get(uid)
            profile = self._parse(raw) if raw is not None else Profile(id=uid)
            profile = profile.model_copy(update={
                **changes,
                "updated_at": datetime.now().astimezone().isoformat(timespec="seconds"),
            })
            records[uid] = profile.model_dump(mode='json')
            self._save_records(records)
            return profile

    def compare_and_set(self, uid: str, expected: Dict[str, Any], changes: Dict[str, Any]) -> bool:
        """
        Conditionally update a profile.

        The write happens only if every field in ``expected`` still holds the
        given value. A missing profile is compared as a default profile and
        is created by a successful write.

        Returns:
            True if the changes were written, False if a field had moved on
        """
        with self._locked():
            records = self._load_records()
            raw = records.get(uid)
            profile = self._parse(raw) if raw is not None else Profile(id=uid)

            for field_name, value in expected.items():
                if getattr(profile, field_name) != value:
                    logger.debug(
                        f"CAS miss on {uid}.{field_name}: expected {value}, "
                        f"found {getattr(profile, field_name)}"
                    )
                    return False

            profile = profile.model_copy(update={
                **changes,
                "updated_at": datetime.now().astimezone().isoformat(timespec="seconds"),
            })
            records[uid] = profile.model_dump(mode='json')
            self._save_records(records)
            return True


class KitStore(JsonRecordStore):
    """Persists kits and their generated outputs."""

    def _parse(self, raw: Dict[str, Any]) -> Kit:
        try:
            return Kit.model_validate(raw)
        except ValidationError as e:
            raise StoreError(f"invalid kit record: {e}") from e

    def create_kit(self, user_id: str, payload: KitPayload) -> Kit:
        """Create a PROCESSING kit for a new generation request."""
        kit = Kit(user_id=user_id, payload=payload)
        with self._locked():
            records = self._load_records()
            records[kit.id] = kit.model_dump(mode='json')
            self._save_records(records)
        logger.info(f"Created kit {kit.id} for {user_id}")
        return kit

    def _update_kit(self, kit_id: str, changes: Dict[str, Any]) -> Optional[Kit]:
        with self._locked():
            records = self._load_records()
            raw = records.get(kit_id)
            if raw is None:
                return None
            kit = self._parse(raw).model_copy(update=changes)
            records[kit_id] = kit.model_dump(mode='json')
            self._save_records(records)
            return kit

    def complete_kit(
        self,
        kit_id: str,
        outputs: KitOutputs,
        flags: Optional[List[str]] = None,
        latency_ms: Optional[int] = None,
    ) -> Optional[Kit]:
        """Mark a kit READY with its generated outputs."""
        kit = self._update_kit(kit_id, {
            "status": KitStatus.READY,
            "outputs": outputs,
            "flags": flags or [],
            "latency_ms": latency_ms,
        })
        if kit:
            logger.info(f"Kit {kit_id} ready")
        return kit

    def fail_kit(self, kit_id: str) -> Optional[Kit]:
        """Mark a kit FAILED."""
        kit = self._update_kit(kit_id, {"status": KitStatus.FAILED})
        if kit:
            logger.warning(f"Kit {kit_id} failed")
        return kit

    def get_kit(self, kit_id: str) -> Optional[Kit]:
        """Return a kit by id, or None if it does not exist."""
        with self._locked():
            raw = self._load_records().get(kit_id)
        return self._parse(raw) if raw is not None else None

    def list_kits(self, user_id: str) -> List[Kit]:
        """Return all kits owned by user_id, newest first."""
        with self._locked():
            records = self._load_records()
        kits = [
            self._parse(raw) for raw in records.values()
            if isinstance(raw, dict) and raw.get("user_id") == user_id
        ]
        kits.sort(key=_created_at_key, reverse=True)
        return kits


def _created_at_key(kit: Kit) -> datetime:
    """Aware creation time for ordering; naive timestamps are read as UTC."""
    value = kit.created_at
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    try:
        created_at = datetime.fromisoformat(value)
    except ValueError as e:
        raise StoreError(f"invalid created_at on kit {kit.id}: {kit.created_at!r}") from e
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return created_at
