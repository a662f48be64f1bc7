# services/checklist_store.py

import logging
import threading
from datetime import date
from typing import Dict, Iterable, List, Optional

from domain.errors import ReportDateRequired, StorageError
from services.storage_service import KeyValueStore

logger = logging.getLogger(__name__)

CHECK_KEY_PREFIX = "pop_check_"
CHECKED_VALUE = "true"


def check_key(item_id: str) -> str:
    return CHECK_KEY_PREFIX + item_id


class ChecklistStore:
    """
    Per-item "received" flags backed by a durable key-value store.

    Only checked items are stored: a present key means checked, a missing key
    means unchecked. The durable write always happens before the in-memory map
    is touched, so a storage fault leaves both sides as they were.
    """

    def __init__(self, kv: KeyValueStore):
        self.kv = kv
        self._checked: Dict[str, bool] = {}
        self._lock = threading.Lock()

    @property
    def checked(self) -> Dict[str, bool]:
        return dict(self._checked)

    def load_all(self) -> Dict[str, bool]:
        """
        Rebuild the in-memory state from every prefixed key in the store.
        """
        try:
            keys = list(self.kv.keys())
        except Exception as e:
            raise StorageError(f"Cannot list checklist keys: {e}") from e

        loaded = {
            key[len(CHECK_KEY_PREFIX):]: True
            for key in keys
            if key.startswith(CHECK_KEY_PREFIX) and len(key) > len(CHECK_KEY_PREFIX)
        }

        with self._lock:
            self._checked = loaded

        logger.info("Loaded %d checked items", len(loaded))
        return dict(loaded)

    def is_checked(self, item_id: str) -> bool:
        return self._checked.get(item_id, False)

    def toggle(self, item_id: str, report_date: Optional[date]) -> bool:
        """
        Flip one item and return its new state.

        Refused with ReportDateRequired when no receiving date is selected.
        """
        if not report_date:
            raise ReportDateRequired()

        with self._lock:
            new_state = not self._checked.get(item_id, False)
            try:
                if new_state:
                    self.kv.set(check_key(item_id), CHECKED_VALUE)
                else:
                    self.kv.delete(check_key(item_id))
            except Exception as e:
                logger.error("Failed to persist toggle for %s: %s", item_id, e)
                raise StorageError(f"Cannot save check state for {item_id}: {e}") from e

            if new_state:
                self._checked[item_id] = True
            else:
                self._checked.pop(item_id, None)

        return new_state

    def clear(self, item_ids: Iterable[str]) -> List[str]:
        """
        Uncheck the given items. Returns the ids that were actually checked.
        """
        cleared: List[str] = []
        with self._lock:
            for item_id in item_ids:
                try:
                    self.kv.delete(check_key(item_id))
                except Exception as e:
                    logger.error("Failed to clear %s: %s", item_id, e)
                    raise StorageError(f"Cannot clear check state for {item_id}: {e}") from e

                if self._checked.pop(item_id, None):
                    cleared.append(item_id)

        logger.info("Cleared %d checked items", len(cleared))
        return cleared
