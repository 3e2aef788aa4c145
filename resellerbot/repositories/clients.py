from __future__ import annotations

import time

from resellerbot.db import Database
from resellerbot.models import Client


class ClientRepository:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def create(
        self,
        *,
        seller_id: int,
        name: str,
        phone: str | None = None,
        login_enc: str | None = None,
        password_enc: str | None = None,
        expires_at: str | None = None,
    ) -> int:
        now = int(time.time())
        return await self.db.insert(
            """
            INSERT INTO clients(seller_id, name, phone, login_enc, password_enc, expires_at, created_at)
            VALUES(?, ?, ?, ?, ?, ?, ?)
            """,
            (
                seller_id,
                name,
                phone or None,
                login_enc or None,
                password_enc or None,
                expires_at or None,
                now,
            ),
        )

    async def get_by_id(self, client_id: int, seller_id: int) -> Client | None:
        row = await self.db.fetchone(
            "SELECT * FROM clients WHERE id = ? AND seller_id = ?",
            (client_id, seller_id),
        )
        return self._row_to_client(row)

    async def list_for_seller(self, seller_id: int) -> list[Client]:
        rows = await self.db.fetchall(
            "SELECT * FROM clients WHERE seller_id = ? ORDER BY name COLLATE NOCASE ASC, id ASC",
            (seller_id,),
        )
        return [self._row_to_client(r) for r in rows]

    async def list_unlinked(self, seller_id: int, search: str | None = None) -> list[Client]:
        sql = "SELECT * FROM clients WHERE seller_id = ? AND shared_panel_id IS NULL"
        params: tuple = (seller_id,)
        needle = (search or "").strip().lower()
        if needle:
            sql += " AND LOWER(name) LIKE ?"
            params += (f"%{needle}%",)
        sql += " ORDER BY name COLLATE NOCASE ASC, id ASC"
        rows = await self.db.fetchall(sql, params)
        return [self._row_to_client(r) for r in rows]

    async def list_by_panel(self, panel_id: int) -> list[Client]:
        # Creation order: the first row is where the shared credential is read from.
        rows = await self.db.fetchall(
            "SELECT * FROM clients WHERE shared_panel_id = ? ORDER BY created_at ASC, id ASC",
            (panel_id,),
        )
        return [self._row_to_client(r) for r in rows]

    async def list_linked_for_seller(self, seller_id: int) -> list[Client]:
        rows = await self.db.fetchall(
            """
            SELECT * FROM clients
            WHERE seller_id = ? AND shared_panel_id IS NOT NULL
            ORDER BY created_at ASC, id ASC
            """,
            (seller_id,),
        )
        return [self._row_to_client(r) for r in rows]

    async def update_details(
        self,
        *,
        client_id: int,
        seller_id: int,
        name: str,
        phone: str | None,
        expires_at: str | None,
    ) -> bool:
        updated = await self.db.execute(
            "UPDATE clients SET name = ?, phone = ?, expires_at = ? WHERE id = ? AND seller_id = ?",
            (name, phone or None, expires_at or None, client_id, seller_id),
        )
        return updated > 0

    async def delete(self, client_id: int, seller_id: int) -> bool:
        removed = await self.db.execute(
            "DELETE FROM clients WHERE id = ? AND seller_id = ?",
            (client_id, seller_id),
        )
        return removed > 0

    @staticmethod
    def _row_to_client(row) -> Client | None:
        if row is None:
            return None
        panel_id = row["shared_panel_id"]
        return Client(
            id=int(row["id"]),
            seller_id=int(row["seller_id"]),
            name=str(row["name"]),
            phone=row["phone"],
            login_enc=row["login_enc"],
            password_enc=row["password_enc"],
            expires_at=row["expires_at"],
            shared_panel_id=int(panel_id) if panel_id is not None else None,
            shared_slot_type=row["shared_slot_type"],
            created_at=int(row["created_at"]),
        )
