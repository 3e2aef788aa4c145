from __future__ import annotations

import asyncio
import logging
from typing import Mapping

from resellerbot.db import Database
from resellerbot.models import (
    PANEL_PRESETS,
    CategoryOccupancy,
    Client,
    CreditPanel,
    PanelOccupancy,
    SharedCredential,
)
from resellerbot.repositories.clients import ClientRepository
from resellerbot.repositories.panels import PanelRepository


logger = logging.getLogger(__name__)


class AllocationError(Exception):
    pass


class ValidationError(AllocationError):
    pass


class CapacityExceededError(ValidationError):
    pass


class NotFoundError(AllocationError):
    pass


def normalize_category(category: str) -> str:
    value = (category or "").strip().lower()
    if not value:
        raise ValidationError("Slot category must not be empty")
    return value


def normalize_capacities(capacities: Mapping[str, int]) -> dict[str, int]:
    if not capacities:
        raise ValidationError("At least one slot category is required")

    result: dict[str, int] = {}
    for raw_category, capacity in capacities.items():
        category = normalize_category(raw_category)
        if category in result:
            raise ValidationError(f"Duplicate slot category: {category}")
        if isinstance(capacity, bool) or not isinstance(capacity, int):
            raise ValidationError(f"Capacity for {category} must be an integer")
        if capacity < 0:
            raise ValidationError(f"Capacity for {category} must not be negative")
        result[category] = capacity
    return result


class SharedCredentialAllocator:
    """Slot bookkeeping for credit panels shared by several clients.

    Every client linked to a panel carries the same login/password pair. The
    pair is fixed by the first client linked to an empty panel and copied onto
    each client that joins afterwards. Unlinking or deleting the panel only
    drops the panel reference; the client keeps its last known credential.
    """

    def __init__(
        self,
        *,
        db: Database,
        panels_repo: PanelRepository,
        clients_repo: ClientRepository,
    ) -> None:
        self.db = db
        self.panels_repo = panels_repo
        self.clients_repo = clients_repo
        self._panel_locks: dict[int, asyncio.Lock] = {}

    async def _require_panel(self, seller_id: int, panel_id: int) -> CreditPanel:
        panel = await self.panels_repo.get_by_id(panel_id, seller_id)
        if panel is None:
            raise NotFoundError("Panel not found")
        return panel

    def _get_lock(self, panel_id: int) -> asyncio.Lock:
        # Only called once the panel is known to exist; delete_panel drops the entry.
        lock = self._panel_locks.get(panel_id)
        if lock is None:
            lock = asyncio.Lock()
            self._panel_locks[panel_id] = lock
        return lock

    async def create_panel(
        self,
        *,
        seller_id: int,
        name: str,
        capacities: Mapping[str, int] | None = None,
        preset: str | None = None,
    ) -> CreditPanel:
        clean_name = (name or "").strip()
        if not clean_name:
            raise ValidationError("Panel name must not be empty")

        if capacities is None:
            if preset is None:
                raise ValidationError("Capacities or a preset are required")
            if preset not in PANEL_PRESETS:
                raise ValidationError(f"Unknown preset: {preset}")
            capacities = PANEL_PRESETS[preset]
        clean_capacities = normalize_capacities(capacities)

        panel_id = await self.panels_repo.create(
            seller_id=seller_id,
            name=clean_name,
            capacities=clean_capacities,
        )
        panel = await self.panels_repo.get_by_id(panel_id, seller_id)
        if panel is None:
            raise NotFoundError("Panel vanished right after creation")

        logger.info("Panel %s created for seller %s with capacities %s", panel_id, seller_id, clean_capacities)
        return panel

    async def update_panel(
        self,
        *,
        seller_id: int,
        panel_id: int,
        name: str | None = None,
        capacities: Mapping[str, int] | None = None,
    ) -> PanelOccupancy:
        clean_name = None
        if name is not None:
            clean_name = name.strip()
            if not clean_name:
                raise ValidationError("Panel name must not be empty")
        clean_capacities = normalize_capacities(capacities) if capacities is not None else None
        await self._require_panel(seller_id, panel_id)

        async with self._get_lock(panel_id):
            # Re-check under the lock: a concurrent delete may have won.
            await self._require_panel(seller_id, panel_id)
            await self.panels_repo.update(panel_id=panel_id, name=clean_name, capacities=clean_capacities)
            occupancy = await self.get_panel_occupancy(seller_id=seller_id, panel_id=panel_id)

        # Shrinking below the filled count is accepted; nobody is evicted.
        if occupancy.over_filled:
            over = {
                category: f"{c.filled}/{c.capacity}"
                for category, c in occupancy.categories.items()
                if c.over_filled
            }
            logger.warning(
                "Panel %s of seller %s is over-filled after capacity update %s; needs review",
                panel_id,
                seller_id,
                over,
            )
        logger.info("Panel %s of seller %s updated", panel_id, seller_id)
        return occupancy

    async def delete_panel(self, *, seller_id: int, panel_id: int) -> None:
        await self._require_panel(seller_id, panel_id)
        async with self._get_lock(panel_id):
            # Linked clients keep their rows; the FK sets shared_panel_id to NULL.
            deleted = await self.panels_repo.delete(panel_id, seller_id)
            if not deleted:
                raise NotFoundError("Panel not found")
        self._panel_locks.pop(panel_id, None)
        logger.info("Panel %s of seller %s deleted", panel_id, seller_id)

    async def link_client(
        self,
        *,
        seller_id: int,
        panel_id: int,
        client_id: int,
        category: str,
        shared: SharedCredential | None = None,
    ) -> PanelOccupancy:
        slot = normalize_category(category)
        await self._require_panel(seller_id, panel_id)
        async with self._get_lock(panel_id):
            await self._link_locked(
                seller_id=seller_id,
                panel_id=panel_id,
                client_id=client_id,
                category=slot,
                shared=shared,
            )
        logger.info("Client %s linked to panel %s as %s (seller %s)", client_id, panel_id, slot, seller_id)
        return await self.get_panel_occupancy(seller_id=seller_id, panel_id=panel_id)

    async def _link_locked(
        self,
        *,
        seller_id: int,
        panel_id: int,
        client_id: int,
        category: str,
        shared: SharedCredential | None,
    ) -> None:
        async with self.db.transaction() as conn:
            cur = await conn.execute(
                "SELECT id FROM credit_panels WHERE id = ? AND seller_id = ?",
                (panel_id, seller_id),
            )
            if await cur.fetchone() is None:
                raise NotFoundError("Panel not found")

            cur = await conn.execute(
                "SELECT capacity FROM panel_capacities WHERE panel_id = ? AND category = ?",
                (panel_id, category),
            )
            cap_row = await cur.fetchone()
            if cap_row is None:
                raise ValidationError(f"Panel has no {category.upper()} slots")
            capacity = int(cap_row["capacity"])

            cur = await conn.execute(
                "SELECT shared_panel_id FROM clients WHERE id = ? AND seller_id = ?",
                (client_id, seller_id),
            )
            client_row = await cur.fetchone()
            if client_row is None:
                raise NotFoundError("Client not found")
            if client_row["shared_panel_id"] is not None:
                raise ValidationError("Client is already linked to a panel; unlink it first")

            cur = await conn.execute(
                "SELECT COUNT(*) AS filled FROM clients WHERE shared_panel_id = ? AND shared_slot_type = ?",
                (panel_id, category),
            )
            filled = int((await cur.fetchone())["filled"])
            if filled >= capacity:
                raise CapacityExceededError(
                    f"No free {category.upper()} slot. Filled={filled}, capacity={capacity}."
                )

            cur = await conn.execute(
                """
                SELECT login_enc, password_enc FROM clients
                WHERE shared_panel_id = ?
                ORDER BY created_at ASC, id ASC
                LIMIT 1
                """,
                (panel_id,),
            )
            first_row = await cur.fetchone()

            if first_row is None:
                # Empty panel: the joining client's own credential becomes the shared one.
                await conn.execute(
                    "UPDATE clients SET shared_panel_id = ?, shared_slot_type = ? WHERE id = ?",
                    (panel_id, category, client_id),
                )
                return

            current = SharedCredential(
                login=first_row["login_enc"] or None,
                password=first_row["password_enc"] or None,
            )
            if shared is None:
                shared = current
            elif (shared.login or None, shared.password or None) != (current.login, current.password):
                raise ValidationError("Shared credential does not match the clients already on this panel")

            await conn.execute(
                """
                UPDATE clients
                SET shared_panel_id = ?, shared_slot_type = ?, login_enc = ?, password_enc = ?
                WHERE id = ?
                """,
                (panel_id, category, shared.login or None, shared.password or None, client_id),
            )

    async def unlink_client(self, *, seller_id: int, client_id: int) -> bool:
        client = await self.clients_repo.get_by_id(client_id, seller_id)
        if client is None:
            raise NotFoundError("Client not found")
        if client.shared_panel_id is None:
            return False

        panel_id = client.shared_panel_id
        async with self._get_lock(panel_id):
            # login/password stay on the row as the client's last known copy.
            updated = await self.db.execute(
                """
                UPDATE clients SET shared_panel_id = NULL, shared_slot_type = NULL
                WHERE id = ? AND seller_id = ? AND shared_panel_id = ?
                """,
                (client_id, seller_id, panel_id),
            )
        if not updated:
            return False
        logger.info("Client %s unlinked from panel %s (seller %s)", client_id, panel_id, seller_id)
        return True

    async def get_shared_credential(self, *, seller_id: int, panel_id: int) -> SharedCredential:
        await self._require_panel(seller_id, panel_id)
        clients = await self.clients_repo.list_by_panel(panel_id)
        return self._shared_from(clients)

    async def get_panel_occupancy(self, *, seller_id: int, panel_id: int) -> PanelOccupancy:
        panel = await self._require_panel(seller_id, panel_id)
        clients = await self.clients_repo.list_by_panel(panel_id)
        return self._build_occupancy(panel, clients)

    async def list_panels_with_occupancy(
        self,
        *,
        seller_id: int,
        include_full: bool = True,
    ) -> list[PanelOccupancy]:
        panels = await self.panels_repo.list_for_seller(seller_id)
        linked = await self.clients_repo.list_linked_for_seller(seller_id)

        clients_by_panel: dict[int, list[Client]] = {}
        for client in linked:
            clients_by_panel.setdefault(client.shared_panel_id, []).append(client)

        result = [self._build_occupancy(p, clients_by_panel.get(p.id, [])) for p in panels]
        if not include_full:
            result = [o for o in result if not o.is_full]
        return result

    async def total_available_slots(self, *, seller_id: int) -> int:
        occupancies = await self.list_panels_with_occupancy(seller_id=seller_id)
        return sum(o.total_available for o in occupancies)

    @staticmethod
    def suggest_category(occupancy: PanelOccupancy, current: str | None = None) -> str | None:
        """Category to preselect for the next link, ``None`` when the panel is full."""
        if current is not None and occupancy.available(current) > 0:
            return current
        for category, slot in occupancy.categories.items():
            if slot.available > 0:
                return category
        return None

    @staticmethod
    def _shared_from(clients: list[Client]) -> SharedCredential:
        if not clients:
            return SharedCredential()
        first = clients[0]
        return SharedCredential(login=first.login_enc or None, password=first.password_enc or None)

    @classmethod
    def _build_occupancy(cls, panel: CreditPanel, clients: list[Client]) -> PanelOccupancy:
        categories = {
            category: CategoryOccupancy(capacity=capacity, filled=0)
            for category, capacity in panel.capacities.items()
        }
        for client in clients:
            slot = client.shared_slot_type or ""
            if slot not in categories:
                categories[slot] = CategoryOccupancy(capacity=0, filled=0)
            categories[slot].filled += 1

        return PanelOccupancy(
            panel=panel,
            categories=categories,
            shared_credential=cls._shared_from(clients),
            clients=list(clients),
        )
