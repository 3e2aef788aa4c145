from __future__ import annotations

import asyncio
import os
from contextlib import asynccontextmanager, contextmanager
from typing import AsyncIterator, Iterator

import aiosqlite


SCHEMA_SQL = """
PRAGMA foreign_keys = ON;

CREATE TABLE IF NOT EXISTS sellers (
  chat_id INTEGER PRIMARY KEY,
  name TEXT NOT NULL DEFAULT '',
  created_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS credit_panels (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  seller_id INTEGER NOT NULL,
  name TEXT NOT NULL,
  created_at INTEGER NOT NULL,
  UNIQUE(seller_id, name),
  FOREIGN KEY(seller_id) REFERENCES sellers(chat_id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS panel_capacities (
  panel_id INTEGER NOT NULL,
  category TEXT NOT NULL,
  capacity INTEGER NOT NULL CHECK (capacity >= 0),
  sort_order INTEGER NOT NULL,
  PRIMARY KEY(panel_id, category),
  FOREIGN KEY(panel_id) REFERENCES credit_panels(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS clients (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  seller_id INTEGER NOT NULL,
  name TEXT NOT NULL,
  phone TEXT,
  login_enc TEXT,
  password_enc TEXT,
  expires_at TEXT,
  shared_panel_id INTEGER,
  shared_slot_type TEXT,
  created_at INTEGER NOT NULL,
  FOREIGN KEY(seller_id) REFERENCES sellers(chat_id) ON DELETE CASCADE,
  FOREIGN KEY(shared_panel_id) REFERENCES credit_panels(id) ON DELETE SET NULL
);

CREATE INDEX IF NOT EXISTS idx_credit_panels_seller
  ON credit_panels(seller_id, created_at);
CREATE INDEX IF NOT EXISTS idx_clients_seller_name
  ON clients(seller_id, name);
CREATE INDEX IF NOT EXISTS idx_clients_shared_panel
  ON clients(shared_panel_id, shared_slot_type);
"""


class StorageError(Exception):
    pass


class ConflictError(StorageError):
    pass


@contextmanager
def _translate_errors() -> Iterator[None]:
    try:
        yield
    except aiosqlite.IntegrityError as exc:
        if "UNIQUE" in str(exc):
            raise ConflictError("Record already exists") from exc
        raise StorageError(f"Integrity error: {exc}") from exc
    except aiosqlite.Error as exc:
        raise StorageError(f"Storage failure: {exc}") from exc


class Database:
    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._init_lock = asyncio.Lock()

    async def init(self) -> None:
        async with self._init_lock:
            parent = os.path.dirname(self.db_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with _translate_errors():
                async with aiosqlite.connect(self.db_path) as conn:
                    await conn.executescript(SCHEMA_SQL)
                    await conn.commit()

    async def execute(self, sql: str, params: tuple = ()) -> int:
        """Run a single write statement and return the affected row count."""
        with _translate_errors():
            async with aiosqlite.connect(self.db_path) as conn:
                await conn.execute("PRAGMA foreign_keys = ON")
                cursor = await conn.execute(sql, params)
                await conn.commit()
                return cursor.rowcount

    async def insert(self, sql: str, params: tuple = ()) -> int:
        with _translate_errors():
            async with aiosqlite.connect(self.db_path) as conn:
                await conn.execute("PRAGMA foreign_keys = ON")
                cursor = await conn.execute(sql, params)
                await conn.commit()
                return int(cursor.lastrowid)

    async def fetchone(self, sql: str, params: tuple = ()):
        with _translate_errors():
            async with aiosqlite.connect(self.db_path) as conn:
                conn.row_factory = aiosqlite.Row
                await conn.execute("PRAGMA foreign_keys = ON")
                cursor = await conn.execute(sql, params)
                return await cursor.fetchone()

    async def fetchall(self, sql: str, params: tuple = ()):
        with _translate_errors():
            async with aiosqlite.connect(self.db_path) as conn:
                conn.row_factory = aiosqlite.Row
                await conn.execute("PRAGMA foreign_keys = ON")
                cursor = await conn.execute(sql, params)
                return await cursor.fetchall()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        # BEGIN IMMEDIATE takes the write lock up front so read-then-write
        # sequences inside the block cannot interleave with other writers.
        with _translate_errors():
            conn = await aiosqlite.connect(self.db_path, isolation_level=None)
            conn.row_factory = aiosqlite.Row
            try:
                await conn.execute("PRAGMA foreign_keys = ON")
                await conn.execute("BEGIN IMMEDIATE")
                yield conn
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise
            finally:
                await conn.close()
