# services/storage_service.py
import json
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Protocol

import config
from domain.errors import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """
    Durable string key/value mechanism the checklist is persisted to.
    """

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self) -> Iterable[str]: ...


class InMemoryKeyValueStore:
    """Non-durable store, used in tests and as a fallback."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> Iterable[str]:
        return list(self._data.keys())

    def snapshot(self) -> Dict[str, str]:
        return dict(self._data)


class JsonFileKeyValueStore:
    """
    Keeps all pairs in one JSON object on disk. Every write rewrites the file
    through a temp file so a crash never leaves it half-written.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._data: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e

        if not isinstance(raw, dict):
            logger.warning("Ignoring unexpected content in %s", self.path)
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        tmp.replace(self.path)

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        updated = {**self._data, key: value}
        self._save(updated)
        self._data = updated

    def delete(self, key: str) -> None:
        if key not in self._data:
            return
        updated = {k: v for k, v in self._data.items() if k != key}
        self._save(updated)
        self._data = updated

    def keys(self) -> Iterable[str]:
        return list(self._data.keys())


def get_key_value_store() -> KeyValueStore:
    """
    Build the store selected by POP_STATE_BACKEND ("file" or "supabase").
    """
    backend = config.STATE_BACKEND
    if backend == "supabase":
        # imported lazily so the file backend works without Supabase credentials
        from data_integrator import SupabaseKeyValueStore

        return SupabaseKeyValueStore(table_name=config.STATE_TABLE)

    if backend != "file":
        logger.warning('Unknown POP_STATE_BACKEND "%s", using file store', backend)

    return JsonFileKeyValueStore(Path(config.STATE_FILE))
