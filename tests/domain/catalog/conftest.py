"""Shared fixtures for catalog tests."""

from datetime import datetime, timedelta, timezone

import pytest

from mezmurhub.domain.auth import Session
from mezmurhub.domain.catalog import (
    AssetJanitor,
    CategoryRepository,
    InMemoryAssetStore,
    InMemoryDocumentStore,
    SongRepository,
)


class TickingClock:
    """Clock that advances one second on every call."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def assets():
    return InMemoryAssetStore()


@pytest.fixture
def janitor(assets, clock):
    return AssetJanitor(assets, clock=clock)


@pytest.fixture
def session():
    return Session(uid="u1", email="admin@example.com", is_admin=True)


@pytest.fixture
def categories(store, session, clock):
    return CategoryRepository(store, session, clock=clock)


@pytest.fixture
def songs(store, assets, session, janitor, clock):
    return SongRepository(store, assets, session, janitor=janitor, clock=clock)
