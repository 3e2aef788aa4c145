from __future__ import annotations

import time

from resellerbot.db import Database
from resellerbot.models import CreditPanel


class PanelRepository:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def create(self, *, seller_id: int, name: str, capacities: dict[str, int]) -> int:
        now = int(time.time())
        async with self.db.transaction() as conn:
            cur = await conn.execute(
                "INSERT INTO credit_panels(seller_id, name, created_at) VALUES(?, ?, ?)",
                (seller_id, name, now),
            )
            panel_id = int(cur.lastrowid)

            sort_order = 0
            for category, capacity in capacities.items():
                await conn.execute(
                    """
                    INSERT INTO panel_capacities(panel_id, category, capacity, sort_order)
                    VALUES(?, ?, ?, ?)
                    """,
                    (panel_id, category, capacity, sort_order),
                )
                sort_order += 1

        return panel_id

    async def get_by_id(self, panel_id: int, seller_id: int) -> CreditPanel | None:
        row = await self.db.fetchone(
            "SELECT * FROM credit_panels WHERE id = ? AND seller_id = ?",
            (panel_id, seller_id),
        )
        if row is None:
            return None
        capacities = await self.get_capacities(panel_id)
        return self._row_to_panel(row, capacities)

    async def list_for_seller(self, seller_id: int) -> list[CreditPanel]:
        rows = await self.db.fetchall(
            "SELECT * FROM credit_panels WHERE seller_id = ? ORDER BY created_at DESC, id DESC",
            (seller_id,),
        )
        if not rows:
            return []

        cap_rows = await self.db.fetchall(
            """
            SELECT pc.panel_id, pc.category, pc.capacity
            FROM panel_capacities pc
            JOIN credit_panels p ON p.id = pc.panel_id
            WHERE p.seller_id = ?
            ORDER BY pc.panel_id ASC, pc.sort_order ASC
            """,
            (seller_id,),
        )
        capacities_by_panel: dict[int, dict[str, int]] = {}
        for r in cap_rows:
            capacities_by_panel.setdefault(int(r["panel_id"]), {})[str(r["category"])] = int(r["capacity"])

        return [self._row_to_panel(r, capacities_by_panel.get(int(r["id"]), {})) for r in rows]

    async def get_capacities(self, panel_id: int) -> dict[str, int]:
        rows = await self.db.fetchall(
            "SELECT category, capacity FROM panel_capacities WHERE panel_id = ? ORDER BY sort_order ASC",
            (panel_id,),
        )
        return {str(r["category"]): int(r["capacity"]) for r in rows}

    async def update(
        self,
        *,
        panel_id: int,
        name: str | None = None,
        capacities: dict[str, int] | None = None,
    ) -> None:
        async with self.db.transaction() as conn:
            if name is not None:
                await conn.execute("UPDATE credit_panels SET name = ? WHERE id = ?", (name, panel_id))
            if not capacities:
                return

            cur = await conn.execute(
                "SELECT COALESCE(MAX(sort_order), -1) + 1 AS next_sort FROM panel_capacities WHERE panel_id = ?",
                (panel_id,),
            )
            row = await cur.fetchone()
            next_sort = int(row["next_sort"]) if row is not None else 0
            for category, capacity in capacities.items():
                await conn.execute(
                    """
                    INSERT INTO panel_capacities(panel_id, category, capacity, sort_order)
                    VALUES(?, ?, ?, ?)
                    ON CONFLICT(panel_id, category)
                    DO UPDATE SET capacity = excluded.capacity
                    """,
                    (panel_id, category, capacity, next_sort),
                )
                next_sort += 1

    async def delete(self, panel_id: int, seller_id: int) -> bool:
        removed = await self.db.execute(
            "DELETE FROM credit_panels WHERE id = ? AND seller_id = ?",
            (panel_id, seller_id),
        )
        return removed > 0

    @staticmethod
    def _row_to_panel(row, capacities: dict[str, int]) -> CreditPanel:
        return CreditPanel(
            id=int(row["id"]),
            seller_id=int(row["seller_id"]),
            name=str(row["name"]),
            capacities=dict(capacities),
            created_at=int(row["created_at"]),
        )
