import os
from functools import lru_cache
from typing import Iterable, List, Optional

from dotenv import load_dotenv
from supabase import create_client, Client

from domain.errors import StorageError

load_dotenv()


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    url: str = os.getenv("SUPABASE_URL")
    key: str = os.getenv("SUPABASE_KEY")
    if not url or not key:
        raise StorageError("Set SUPABASE_URL and SUPABASE_KEY in .env or environment variables")
    return create_client(url, key)


class SupabaseKeyValueStore:
    """
    Checklist state kept in a Supabase table instead of a local file.

    Expected table:
      key   text primary key
      value text not null
    """

    def __init__(
            self,
            table_name: str = "pop_check_state",
            schema: Optional[str] = None,
            client: Optional[Client] = None,
    ):
        self.table_name = table_name
        self.schema = schema or os.getenv("SCHEMA") or "public"
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_supabase()
        return self._client

    def _table(self):
        return self.client.schema(self.schema).table(self.table_name)

    def get(self, key: str) -> Optional[str]:
        resp = (
            self._table()
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )

        if getattr(resp, "error", None):
            raise StorageError(f"Fetch failed: {resp.error}")

        if not resp.data:
            return None
        return resp.data[0]["value"]

    def set(self, key: str, value: str) -> None:
        resp = (
            self._table()
            .upsert({"key": key, "value": value}, on_conflict="key")
            .execute()
        )

        if getattr(resp, "error", None):
            raise StorageError(f"Upsert failed: {resp.error}")

    def delete(self, key: str) -> None:
        resp = (
            self._table()
            .delete()
            .eq("key", key)
            .execute()
        )

        if getattr(resp, "error", None):
            raise StorageError(f"Delete failed: {resp.error}")

    def keys(self) -> Iterable[str]:
        resp = (
            self._table()
            .select("key")
            .execute()
        )

        if getattr(resp, "error", None):
            raise StorageError(f"Fetch keys failed: {resp.error}")

        keys: List[str] = [row["key"] for row in (resp.data or [])]
        return keys
