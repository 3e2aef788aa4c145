from __future__ import annotations

import asyncio
import logging

import pytest

from resellerbot.models import SLOT_IPTV, SLOT_P2P, SharedCredential
from resellerbot.services.allocator import (
    CapacityExceededError,
    NotFoundError,
    SharedCredentialAllocator,
    ValidationError,
    normalize_capacities,
)

from conftest import OTHER_SELLER_ID, SELLER_ID


async def make_client(client_repo, name, login=None, password=None, seller_id=SELLER_ID):
    return await client_repo.create(seller_id=seller_id, name=name, login_enc=login, password_enc=password)


async def make_panel(allocator, name="Crédito 1", capacities=None, seller_id=SELLER_ID):
    return await allocator.create_panel(
        seller_id=seller_id,
        name=name,
        capacities=capacities or {SLOT_P2P: 1, SLOT_IPTV: 2},
    )


async def test_create_panel_starts_empty(allocator):
    panel = await make_panel(allocator)

    occupancy = await allocator.get_panel_occupancy(seller_id=SELLER_ID, panel_id=panel.id)
    assert panel.capacities == {SLOT_P2P: 1, SLOT_IPTV: 2}
    assert panel.total_slots == 3
    assert occupancy.total_capacity == 3
    assert occupancy.categories[SLOT_P2P].filled == 0
    assert occupancy.categories[SLOT_IPTV].filled == 0
    assert occupancy.shared_credential.is_empty
    assert not occupancy.is_full


async def test_create_panel_from_preset(allocator):
    panel = await allocator.create_panel(seller_id=SELLER_ID, name="Só IPTV", preset="iptv_only")
    assert panel.capacities == {SLOT_P2P: 0, SLOT_IPTV: 2}


@pytest.mark.parametrize(
    "name, capacities",
    [
        ("   ", {SLOT_IPTV: 1}),
        ("ok", {}),
        ("ok", {SLOT_IPTV: -1}),
        ("ok", {"": 1}),
        ("ok", {"IPTV": 1, "iptv": 2}),
        ("ok", {SLOT_IPTV: "2"}),
    ],
)
async def test_create_panel_rejects_invalid_input(allocator, panel_repo, name, capacities):
    with pytest.raises(ValidationError):
        await allocator.create_panel(seller_id=SELLER_ID, name=name, capacities=capacities)
    assert await panel_repo.list_for_seller(SELLER_ID) == []


async def test_create_panel_rejects_unknown_preset(allocator):
    with pytest.raises(ValidationError):
        await allocator.create_panel(seller_id=SELLER_ID, name="x", preset="nope")


def test_normalize_capacities_lowercases_and_keeps_order():
    assert list(normalize_capacities({" IPTV ": 2, "P2P": 1, "sky": 0})) == ["iptv", "p2p", "sky"]


async def test_first_link_adopts_client_credential(allocator, client_repo):
    panel = await make_panel(allocator)
    a = await make_client(client_repo, "A", "u1", "p1")

    occupancy = await allocator.link_client(seller_id=SELLER_ID, panel_id=panel.id, client_id=a, category=SLOT_IPTV)

    assert occupancy.shared_credential == SharedCredential(login="u1", password="p1")
    client = await client_repo.get_by_id(a, SELLER_ID)
    assert (client.shared_panel_id, client.shared_slot_type) == (panel.id, SLOT_IPTV)
    assert (client.login_enc, client.password_enc) == ("u1", "p1")


async def test_first_link_with_empty_credential(allocator, client_repo):
    panel = await make_panel(allocator)
    a = await make_client(client_repo, "A")

    occupancy = await allocator.link_client(seller_id=SELLER_ID, panel_id=panel.id, client_id=a, category=SLOT_IPTV)

    assert occupancy.shared_credential.is_empty


async def test_later_link_copies_shared_credential(allocator, client_repo):
    panel = await make_panel(allocator)
    a = await make_client(client_repo, "A", "u1", "p1")
    b = await make_client(client_repo, "B", "own-login", "own-pass")
    await allocator.link_client(seller_id=SELLER_ID, panel_id=panel.id, client_id=a, category=SLOT_IPTV)

    shared = await allocator.get_shared_credential(seller_id=SELLER_ID, panel_id=panel.id)
    await allocator.link_client(
        seller_id=SELLER_ID, panel_id=panel.id, client_id=b, category=SLOT_IPTV, shared=shared
    )

    client_b = await client_repo.get_by_id(b, SELLER_ID)
    assert (client_b.login_enc, client_b.password_enc) == ("u1", "p1")


async def test_later_link_without_credential_reads_first_client(allocator, client_repo):
    panel = await make_panel(allocator)
    a = await make_client(client_repo, "A", "u1", "p1")
    b = await make_client(client_repo, "B", "other")
    await allocator.link_client(seller_id=SELLER_ID, panel_id=panel.id, client_id=a, category=SLOT_IPTV)

    await allocator.link_client(seller_id=SELLER_ID, panel_id=panel.id, client_id=b, category=SLOT_P2P)

    client_b = await client_repo.get_by_id(b, SELLER_ID)
    assert (client_b.login_enc, client_b.password_enc) == ("u1", "p1")


async def test_later_link_after_first_client_with_blank_credential(allocator, client_repo, db):
    panel = await make_panel(allocator)
    a = await make_client(client_repo, "A", "", "")
    b = await make_client(client_repo, "B", "own-login", "own-pass")
    await allocator.link_client(seller_id=SELLER_ID, panel_id=panel.id, client_id=a, category=SLOT_IPTV)
    # Rows written before blanks were stored as NULL.
    await db.execute("UPDATE clients SET login_enc = '', password_enc = '' WHERE id = ?", (a,))

    shared = await allocator.get_shared_credential(seller_id=SELLER_ID, panel_id=panel.id)
    await allocator.link_client(
        seller_id=SELLER_ID, panel_id=panel.id, client_id=b, category=SLOT_IPTV, shared=shared
    )

    assert shared.is_empty
    client_b = await client_repo.get_by_id(b, SELLER_ID)
    assert client_b.shared_panel_id == panel.id
    assert (client_b.login_enc, client_b.password_enc) == (None, None)


async def test_mismatched_shared_credential_is_rejected(allocator, client_repo):
    panel = await make_panel(allocator)
    a = await make_client(client_repo, "A", "u1", "p1")
    b = await make_client(client_repo, "B", "u2", "p2")
    await allocator.link_client(seller_id=SELLER_ID, panel_id=panel.id, client_id=a, category=SLOT_IPTV)

    with pytest.raises(ValidationError):
        await allocator.link_client(
            seller_id=SELLER_ID,
            panel_id=panel.id,
            client_id=b,
            category=SLOT_IPTV,
            shared=SharedCredential(login="u2", password="p2"),
        )

    client_b = await client_repo.get_by_id(b, SELLER_ID)
    assert client_b.shared_panel_id is None
    assert client_b.login_enc == "u2"


async def test_link_rejects_full_category(allocator, client_repo):
    panel = await make_panel(allocator, capacities={SLOT_P2P: 1, SLOT_IPTV: 0})
    a = await make_client(client_repo, "A", "u1")
    b = await make_client(client_repo, "B")
    await allocator.link_client(seller_id=SELLER_ID, panel_id=panel.id, client_id=a, category=SLOT_P2P)

    with pytest.raises(CapacityExceededError):
        await allocator.link_client(seller_id=SELLER_ID, panel_id=panel.id, client_id=b, category=SLOT_P2P)
    with pytest.raises(CapacityExceededError):
        await allocator.link_client(seller_id=SELLER_ID, panel_id=panel.id, client_id=b, category=SLOT_IPTV)

    assert (await client_repo.get_by_id(b, SELLER_ID)).shared_panel_id is None


async def test_link_rejects_unknown_category(allocator, client_repo):
    panel = await make_panel(allocator)
    a = await make_client(client_repo, "A")

    with pytest.raises(ValidationError):
        await allocator.link_client(seller_id=SELLER_ID, panel_id=panel.id, client_id=a, category="sky")


async def test_link_rejects_client_linked_elsewhere(allocator, client_repo):
    first = await make_panel(allocator, name="Um")
    second = await make_panel(allocator, name="Dois")
    a = await make_client(client_repo, "A", "u1")
    await allocator.link_client(seller_id=SELLER_ID, panel_id=first.id, client_id=a, category=SLOT_IPTV)

    with pytest.raises(ValidationError):
        await allocator.link_client(seller_id=SELLER_ID, panel_id=second.id, client_id=a, category=SLOT_IPTV)

    client = await client_repo.get_by_id(a, SELLER_ID)
    assert client.shared_panel_id == first.id


async def test_tenants_cannot_touch_each_other(allocator, client_repo):
    panel = await make_panel(allocator)
    foreign_client = await make_client(client_repo, "Z", seller_id=OTHER_SELLER_ID)

    with pytest.raises(NotFoundError):
        await allocator.link_client(
            seller_id=SELLER_ID, panel_id=panel.id, client_id=foreign_client, category=SLOT_IPTV
        )
    with pytest.raises(NotFoundError):
        await allocator.get_panel_occupancy(seller_id=OTHER_SELLER_ID, panel_id=panel.id)
    with pytest.raises(NotFoundError):
        await allocator.delete_panel(seller_id=OTHER_SELLER_ID, panel_id=panel.id)
    assert await allocator.list_panels_with_occupancy(seller_id=OTHER_SELLER_ID) == []


async def test_missing_panels_leave_no_lock_behind(allocator, client_repo):
    a = await make_client(client_repo, "A")
    for missing_id in range(1000, 1100):
        with pytest.raises(NotFoundError):
            await allocator.update_panel(seller_id=SELLER_ID, panel_id=missing_id, capacities={SLOT_IPTV: 1})
    with pytest.raises(NotFoundError):
        await allocator.link_client(seller_id=SELLER_ID, panel_id=4242, client_id=a, category=SLOT_IPTV)
    with pytest.raises(NotFoundError):
        await allocator.delete_panel(seller_id=SELLER_ID, panel_id=4242)

    panel = await make_panel(allocator)
    with pytest.raises(NotFoundError):
        await allocator.delete_panel(seller_id=OTHER_SELLER_ID, panel_id=panel.id)

    assert allocator._panel_locks == {}


async def test_unlink_frees_slot_and_keeps_credential(allocator, client_repo):
    panel = await make_panel(allocator, capacities={SLOT_IPTV: 1})
    a = await make_client(client_repo, "A", "u1", "p1")
    await allocator.link_client(seller_id=SELLER_ID, panel_id=panel.id, client_id=a, category=SLOT_IPTV)

    assert await allocator.unlink_client(seller_id=SELLER_ID, client_id=a) is True

    client = await client_repo.get_by_id(a, SELLER_ID)
    assert client.shared_panel_id is None
    assert client.shared_slot_type is None
    assert (client.login_enc, client.password_enc) == ("u1", "p1")
    occupancy = await allocator.get_panel_occupancy(seller_id=SELLER_ID, panel_id=panel.id)
    assert occupancy.available(SLOT_IPTV) == 1


async def test_unlink_of_free_client_is_noop(allocator, client_repo):
    a = await make_client(client_repo, "A")
    assert await allocator.unlink_client(seller_id=SELLER_ID, client_id=a) is False

    with pytest.raises(NotFoundError):
        await allocator.unlink_client(seller_id=SELLER_ID, client_id=9999)


async def test_unlinked_client_can_relink(allocator, client_repo):
    first = await make_panel(allocator, name="Um")
    second = await make_panel(allocator, name="Dois")
    a = await make_client(client_repo, "A", "u1")
    await allocator.link_client(seller_id=SELLER_ID, panel_id=first.id, client_id=a, category=SLOT_IPTV)
    await allocator.unlink_client(seller_id=SELLER_ID, client_id=a)

    occupancy = await allocator.link_client(seller_id=SELLER_ID, panel_id=second.id, client_id=a, category=SLOT_P2P)
    assert occupancy.categories[SLOT_P2P].filled == 1


async def test_delete_panel_does_not_cascade(allocator, client_repo, panel_repo):
    panel = await make_panel(allocator)
    a = await make_client(client_repo, "A", "u1", "p1")
    await allocator.link_client(seller_id=SELLER_ID, panel_id=panel.id, client_id=a, category=SLOT_IPTV)

    await allocator.delete_panel(seller_id=SELLER_ID, panel_id=panel.id)

    assert await panel_repo.get_by_id(panel.id, SELLER_ID) is None
    client = await client_repo.get_by_id(a, SELLER_ID)
    assert client is not None
    assert client.shared_panel_id is None
    assert client.shared_slot_type == SLOT_IPTV
    assert (client.login_enc, client.password_enc) == ("u1", "p1")


async def test_delete_missing_panel(allocator):
    with pytest.raises(NotFoundError):
        await allocator.delete_panel(seller_id=SELLER_ID, panel_id=12345)


async def test_shrinking_capacity_is_allowed_and_flagged(allocator, client_repo, caplog):
    panel = await make_panel(allocator, capacities={SLOT_IPTV: 2})
    a = await make_client(client_repo, "A", "u1")
    b = await make_client(client_repo, "B")
    await allocator.link_client(seller_id=SELLER_ID, panel_id=panel.id, client_id=a, category=SLOT_IPTV)
    await allocator.link_client(seller_id=SELLER_ID, panel_id=panel.id, client_id=b, category=SLOT_IPTV)

    with caplog.at_level(logging.WARNING, logger="resellerbot.services.allocator"):
        occupancy = await allocator.update_panel(
            seller_id=SELLER_ID, panel_id=panel.id, capacities={SLOT_IPTV: 1}
        )

    assert occupancy.categories[SLOT_IPTV].available == -1
    assert occupancy.over_filled
    assert occupancy.is_full
    assert occupancy.total_available == 0
    assert "over-filled" in caplog.text
    assert (await client_repo.get_by_id(b, SELLER_ID)).shared_panel_id == panel.id


async def test_update_panel_renames_and_adds_category(allocator):
    panel = await make_panel(allocator, capacities={SLOT_IPTV: 2})

    occupancy = await allocator.update_panel(
        seller_id=SELLER_ID, panel_id=panel.id, name="Novo nome", capacities={"p2p": 3}
    )

    assert occupancy.panel.name == "Novo nome"
    assert occupancy.panel.capacities == {SLOT_IPTV: 2, SLOT_P2P: 3}


async def test_update_panel_rejects_invalid(allocator):
    panel = await make_panel(allocator)
    with pytest.raises(ValidationError):
        await allocator.update_panel(seller_id=SELLER_ID, panel_id=panel.id, name=" ")
    with pytest.raises(ValidationError):
        await allocator.update_panel(seller_id=SELLER_ID, panel_id=panel.id, capacities={SLOT_IPTV: -2})
    with pytest.raises(NotFoundError):
        await allocator.update_panel(seller_id=SELLER_ID, panel_id=999, capacities={SLOT_IPTV: 1})


async def test_occupancy_read_is_stable(allocator, client_repo):
    panel = await make_panel(allocator)
    a = await make_client(client_repo, "A", "u1")
    await allocator.link_client(seller_id=SELLER_ID, panel_id=panel.id, client_id=a, category=SLOT_IPTV)

    def snapshot(occupancies):
        return [
            (o.panel.id, {c: (s.filled, s.available) for c, s in o.categories.items()})
            for o in occupancies
        ]

    first = await allocator.list_panels_with_occupancy(seller_id=SELLER_ID)
    second = await allocator.list_panels_with_occupancy(seller_id=SELLER_ID)
    assert snapshot(first) == snapshot(second)


async def test_list_can_hide_full_panels_and_totals(allocator, client_repo):
    full = await make_panel(allocator, name="Cheio", capacities={SLOT_IPTV: 1})
    await make_panel(allocator, name="Livre", capacities={SLOT_P2P: 1, SLOT_IPTV: 2})
    a = await make_client(client_repo, "A", "u1")
    await allocator.link_client(seller_id=SELLER_ID, panel_id=full.id, client_id=a, category=SLOT_IPTV)

    everything = await allocator.list_panels_with_occupancy(seller_id=SELLER_ID)
    open_only = await allocator.list_panels_with_occupancy(seller_id=SELLER_ID, include_full=False)

    assert {o.panel.name for o in everything} == {"Cheio", "Livre"}
    assert [o.panel.name for o in open_only] == ["Livre"]
    assert await allocator.total_available_slots(seller_id=SELLER_ID) == 3


async def test_concurrent_links_never_oversubscribe(allocator, client_repo):
    panel = await make_panel(allocator, capacities={SLOT_IPTV: 2})
    client_ids = [await make_client(client_repo, f"C{i}") for i in range(5)]

    results = await asyncio.gather(
        *(
            allocator.link_client(seller_id=SELLER_ID, panel_id=panel.id, client_id=cid, category=SLOT_IPTV)
            for cid in client_ids
        ),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, Exception)]
    assert len(failures) == 3
    assert all(isinstance(f, CapacityExceededError) for f in failures)
    occupancy = await allocator.get_panel_occupancy(seller_id=SELLER_ID, panel_id=panel.id)
    assert occupancy.categories[SLOT_IPTV].filled == 2


async def test_concurrent_links_through_separate_allocators(db, allocator, panel_repo, client_repo):
    other = SharedCredentialAllocator(db=db, panels_repo=panel_repo, clients_repo=client_repo)
    panel = await make_panel(allocator, capacities={SLOT_IPTV: 1})
    a = await make_client(client_repo, "A")
    b = await make_client(client_repo, "B")

    results = await asyncio.gather(
        allocator.link_client(seller_id=SELLER_ID, panel_id=panel.id, client_id=a, category=SLOT_IPTV),
        other.link_client(seller_id=SELLER_ID, panel_id=panel.id, client_id=b, category=SLOT_IPTV),
        return_exceptions=True,
    )

    assert sum(isinstance(r, CapacityExceededError) for r in results) == 1
    occupancy = await allocator.get_panel_occupancy(seller_id=SELLER_ID, panel_id=panel.id)
    assert occupancy.categories[SLOT_IPTV].filled == 1


def test_suggest_category_prefers_current_then_first_free(allocator):
    from resellerbot.models import CategoryOccupancy, CreditPanel, PanelOccupancy

    panel = CreditPanel(id=1, seller_id=SELLER_ID, name="x", capacities={SLOT_P2P: 1, SLOT_IPTV: 2}, created_at=0)
    occupancy = PanelOccupancy(
        panel=panel,
        categories={
            SLOT_P2P: CategoryOccupancy(capacity=1, filled=1),
            SLOT_IPTV: CategoryOccupancy(capacity=2, filled=1),
        },
        shared_credential=SharedCredential(),
    )

    assert SharedCredentialAllocator.suggest_category(occupancy, current=SLOT_IPTV) == SLOT_IPTV
    assert SharedCredentialAllocator.suggest_category(occupancy, current=SLOT_P2P) == SLOT_IPTV
    assert SharedCredentialAllocator.suggest_category(occupancy) == SLOT_IPTV

    occupancy.categories[SLOT_IPTV].filled = 2
    assert SharedCredentialAllocator.suggest_category(occupancy, current=SLOT_IPTV) is None


async def test_walkthrough_p2p_and_iptv_credit(allocator, client_repo):
    panel = await make_panel(allocator, capacities={SLOT_P2P: 1, SLOT_IPTV: 2})
    a = await make_client(client_repo, "A", "u1", "secret")
    b = await make_client(client_repo, "B")
    c = await make_client(client_repo, "C")
    d = await make_client(client_repo, "D")

    await allocator.link_client(seller_id=SELLER_ID, panel_id=panel.id, client_id=a, category=SLOT_IPTV)
    shared = await allocator.get_shared_credential(seller_id=SELLER_ID, panel_id=panel.id)
    assert shared.login == "u1"

    occupancy = await allocator.link_client(
        seller_id=SELLER_ID, panel_id=panel.id, client_id=b, category=SLOT_IPTV, shared=shared
    )
    assert occupancy.categories[SLOT_IPTV].filled == 2
    assert occupancy.available(SLOT_IPTV) == 0

    with pytest.raises(CapacityExceededError):
        await allocator.link_client(
            seller_id=SELLER_ID, panel_id=panel.id, client_id=d, category=SLOT_IPTV, shared=shared
        )

    occupancy = await allocator.link_client(
        seller_id=SELLER_ID, panel_id=panel.id, client_id=c, category=SLOT_P2P, shared=shared
    )
    assert occupancy.categories[SLOT_P2P].filled == 1
    assert occupancy.is_full
    assert {cl.login_enc for cl in occupancy.clients} == {"u1"}

    await allocator.unlink_client(seller_id=SELLER_ID, client_id=b)
    occupancy = await allocator.get_panel_occupancy(seller_id=SELLER_ID, panel_id=panel.id)
    assert occupancy.available(SLOT_IPTV) == 1
    for client_id in (a, b, c):
        assert (await client_repo.get_by_id(client_id, SELLER_ID)).login_enc == "u1"

    await allocator.delete_panel(seller_id=SELLER_ID, panel_id=panel.id)
    for client_id in (a, c):
        client = await client_repo.get_by_id(client_id, SELLER_ID)
        assert client.login_enc == "u1"
        assert client.shared_panel_id is None
