from abc import ABC, abstractmethod
from datetime import UTC, datetime

import aiosqlite
import structlog

from stockwatch.exceptions import StorageError

logger = structlog.get_logger()


class KeyValueBackend(ABC):
    """Async string-to-string storage with no multi-key atomicity."""

    @abstractmethod
    async def get_item(self, key: str) -> str | None: ...

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None: ...

    @abstractmethod
    async def remove_item(self, key: str) -> None: ...


class SQLiteKeyValueBackend(KeyValueBackend):
    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def get_item(self, key: str) -> str | None:
        try:
            cursor = await self._db.execute(
                "SELECT value FROM kv_store WHERE key = ?",
                (key,),
            )
            row = await cursor.fetchone()
            await cursor.close()
        except (aiosqlite.Error, ValueError) as exc:
            raise StorageError(f"Failed to read '{key}': {exc}") from exc
        if row is None:
            return None
        return row[0]

    async def set_item(self, key: str, value: str) -> None:
        try:
            await self._db.execute(
                """
                INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, datetime.now(UTC).isoformat()),
            )
            await self._db.commit()
        except (aiosqlite.Error, ValueError) as exc:
            raise StorageError(f"Failed to write '{key}': {exc}") from exc

    async def remove_item(self, key: str) -> None:
        try:
            await self._db.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            await self._db.commit()
        except (aiosqlite.Error, ValueError) as exc:
            raise StorageError(f"Failed to remove '{key}': {exc}") from exc


class InMemoryKeyValueBackend(KeyValueBackend):
    """Process-local backend, used when no database is configured."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)
