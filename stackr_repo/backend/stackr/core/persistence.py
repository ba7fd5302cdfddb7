import logging
from typing import Dict, Iterable, List, Optional

from pydantic import TypeAdapter
from sqlalchemy.orm import Session

from ..db.models.storage import StorageItem
from ..schemas.challenges import Challenge, ChallengeCollections
from .config import settings

logger = logging.getLogger(__name__)

_challenge_list = TypeAdapter(List[Challenge])


# ==================== STORAGE BACKENDS ====================

class InMemoryStorage:
    """Dict-backed key/value storage; writes are staged until commit"""

    def __init__(self, items: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(items or {})
        self._pending: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        if key in self._pending:
            return self._pending[key]
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._pending[key] = value

    def commit(self) -> None:
        self.items.update(self._pending)
        self._pending.clear()

    def rollback(self) -> None:
        self._pending.clear()


class SqlStorage:
    """Key/value storage on the storage_items table"""

    def __init__(self, db: Session):
        self.db = db

    def get_item(self, key: str) -> Optional[str]:
        item = self.db.get(StorageItem, key)
        return item.value if item else None

    def set_item(self, key: str, value: str) -> None:
        item = self.db.get(StorageItem, key)
        if item is None:
            self.db.add(StorageItem(key=key, value=value))
        else:
            item.value = value
        # Flushed only; commit() publishes every key written since the last one
        self.db.flush()

    def commit(self) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def rollback(self) -> None:
        self.db.rollback()


# ==================== CHALLENGE STORE ====================

class ChallengeStore:
    """Serializes a user's active and completed challenges under two storage keys"""

    def __init__(self, storage, key_prefix: Optional[str] = None):
        self.storage = storage
        self.key_prefix = key_prefix or settings.STORAGE_KEY_PREFIX

    def active_key(self, user_id: str) -> str:
        return f"{self.key_prefix}_active_challenges_{user_id}"

    def completed_key(self, user_id: str) -> str:
        return f"{self.key_prefix}_completed_challenges_{user_id}"

    def load(self, user_id: str) -> Optional[ChallengeCollections]:
        """Read both collections; None when nothing was ever saved for this user"""
        stored_active = self.storage.get_item(self.active_key(user_id))
        stored_completed = self.storage.get_item(self.completed_key(user_id))

        if stored_active is None and stored_completed is None:
            return None

        return ChallengeCollections(
            active=self._decode(stored_active),
            completed=self._decode(stored_completed),
        )

    def save(self, user_id: str, active: Iterable[Challenge], completed: Iterable[Challenge]) -> None:
        """Write both collections in one commit; on failure neither key changes"""
        try:
            self.storage.set_item(self.active_key(user_id), self._encode(active))
            self.storage.set_item(self.completed_key(user_id), self._encode(completed))
            self.storage.commit()
        except Exception:
            self.storage.rollback()
            raise
        logger.debug("Saved challenges for user %s", user_id)

    @staticmethod
    def _encode(challenges: Iterable[Challenge]) -> str:
        return _challenge_list.dump_json(list(challenges)).decode("utf-8")

    @staticmethod
    def _decode(raw: Optional[str]) -> List[Challenge]:
        if not raw:
            return []
        # Timestamps come back as datetimes via pydantic
        return _challenge_list.validate_json(raw)
