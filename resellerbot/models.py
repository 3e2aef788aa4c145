from __future__ import annotations

from dataclasses import dataclass, field


SLOT_P2P = "p2p"
SLOT_IPTV = "iptv"

PANEL_PRESETS: dict[str, dict[str, int]] = {
    "p2p_iptv": {SLOT_P2P: 1, SLOT_IPTV: 2},
    "iptv_only": {SLOT_P2P: 0, SLOT_IPTV: 2},
}


@dataclass(slots=True)
class Seller:
    chat_id: int
    name: str


@dataclass(slots=True)
class CreditPanel:
    id: int
    seller_id: int
    name: str
    capacities: dict[str, int]
    created_at: int

    @property
    def total_slots(self) -> int:
        return sum(self.capacities.values())


@dataclass(slots=True)
class Client:
    id: int
    seller_id: int
    name: str
    phone: str | None
    login_enc: str | None
    password_enc: str | None
    expires_at: str | None
    shared_panel_id: int | None
    shared_slot_type: str | None
    created_at: int

    @property
    def is_linked(self) -> bool:
        return self.shared_panel_id is not None


@dataclass(frozen=True, slots=True)
class SharedCredential:
    """Login/password pair as stored on client rows (possibly encrypted)."""

    login: str | None = None
    password: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.login and not self.password


@dataclass(slots=True)
class CategoryOccupancy:
    capacity: int
    filled: int

    @property
    def available(self) -> int:
        return self.capacity - self.filled

    @property
    def over_filled(self) -> bool:
        return self.filled > self.capacity


@dataclass(slots=True)
class PanelOccupancy:
    panel: CreditPanel
    categories: dict[str, CategoryOccupancy]
    shared_credential: SharedCredential
    clients: list[Client] = field(default_factory=list)

    @property
    def is_full(self) -> bool:
        return all(c.available <= 0 for c in self.categories.values())

    @property
    def over_filled(self) -> bool:
        return any(c.over_filled for c in self.categories.values())

    @property
    def total_capacity(self) -> int:
        return sum(c.capacity for c in self.categories.values())

    @property
    def total_available(self) -> int:
        return sum(max(0, c.available) for c in self.categories.values())

    def available(self, category: str) -> int:
        occupancy = self.categories.get(category)
        if occupancy is None:
            return 0
        return occupancy.available
