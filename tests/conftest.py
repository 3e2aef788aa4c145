from __future__ import annotations

import pytest

from resellerbot.db import Database
from resellerbot.repositories.clients import ClientRepository
from resellerbot.repositories.panels import PanelRepository
from resellerbot.repositories.sellers import SellerRepository
from resellerbot.services.allocator import SharedCredentialAllocator

SELLER_ID = 1001
OTHER_SELLER_ID = 2002


@pytest.fixture
async def db(tmp_path):
    database = Database(str(tmp_path / "resellerbot.db"))
    await database.init()
    return database


@pytest.fixture
async def seller_repo(db):
    repo = SellerRepository(db)
    await repo.add(SELLER_ID, "Loja Um")
    await repo.add(OTHER_SELLER_ID, "Loja Dois")
    return repo


@pytest.fixture
def panel_repo(db):
    return PanelRepository(db)


@pytest.fixture
def client_repo(db):
    return ClientRepository(db)


@pytest.fixture
def allocator(db, seller_repo, panel_repo, client_repo):
    return SharedCredentialAllocator(db=db, panels_repo=panel_repo, clients_repo=client_repo)
