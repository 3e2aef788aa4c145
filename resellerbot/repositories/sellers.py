from __future__ import annotations

import time

from resellerbot.db import Database
from resellerbot.models import Seller


class SellerRepository:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def add(self, chat_id: int, name: str = "") -> None:
        now = int(time.time())
        await self.db.execute(
            """
            INSERT INTO sellers(chat_id, name, created_at)
            VALUES(?, ?, ?)
            ON CONFLICT(chat_id)
            DO UPDATE SET name = excluded.name
            """,
            (chat_id, name, now),
        )

    async def remove(self, chat_id: int) -> bool:
        removed = await self.db.execute("DELETE FROM sellers WHERE chat_id = ?", (chat_id,))
        return removed > 0

    async def is_registered(self, chat_id: int) -> bool:
        row = await self.db.fetchone("SELECT 1 FROM sellers WHERE chat_id = ?", (chat_id,))
        return row is not None

    async def get(self, chat_id: int) -> Seller | None:
        row = await self.db.fetchone(
            "SELECT chat_id, COALESCE(name, '') AS name FROM sellers WHERE chat_id = ?",
            (chat_id,),
        )
        if row is None:
            return None
        return Seller(chat_id=int(row["chat_id"]), name=str(row["name"]))

    async def list_sellers(self) -> list[Seller]:
        rows = await self.db.fetchall(
            "SELECT chat_id, COALESCE(name, '') AS name FROM sellers ORDER BY created_at ASC, chat_id ASC"
        )
        return [Seller(chat_id=int(r["chat_id"]), name=str(r["name"])) for r in rows]
