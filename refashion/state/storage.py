"""Key/value storage the state containers persist their snapshots into."""
from abc import ABC, abstractmethod
from pathlib import Path

import aiosqlite

CART_KEY = "dorodango-cart"
PRODUCTS_KEY = "dorodango-products"
MIGRATED_KEY = "dorodango-migrated"


class LocalStorage(ABC):
    @abstractmethod
    async def get_item(self, key: str) -> str | None: ...

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None: ...

    @abstractmethod
    async def remove_item(self, key: str) -> None: ...

    async def open(self):
        pass


class MemoryStorage(LocalStorage):
    """Process-local storage, lost on restart."""

    def __init__(self):
        self._items: dict[str, str] = {}

    async def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class SqliteStorage(LocalStorage):
    def __init__(self, db_path: str):
        self.db_path = db_path

    async def open(self):
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS local_storage (
                    key         TEXT PRIMARY KEY,
                    value       TEXT NOT NULL,
                    updated_at  TEXT NOT NULL DEFAULT (datetime('now'))
                )
            """)
            await db.commit()

    async def get_item(self, key: str) -> str | None:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("SELECT value FROM local_storage WHERE key = ?", (key,))
            row = await cursor.fetchone()
            return row[0] if row else None

    async def set_item(self, key: str, value: str) -> None:
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """INSERT INTO local_storage (key, value) VALUES (?, ?)
                   ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = datetime('now')""",
                (key, value),
            )
            await db.commit()

    async def remove_item(self, key: str) -> None:
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM local_storage WHERE key = ?", (key,))
            await db.commit()
