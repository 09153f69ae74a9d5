"""Shared pytest fixtures for API and service tests."""

import os

os.environ.setdefault("ADMIN_KEY", "test-admin-key")
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("BASE_URL", "https://sho.rt/")

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from shortlink.config import Settings, get_settings
from shortlink.dependencies import get_id_generator, get_link_store
from shortlink.generator import ShortIdGenerator
from shortlink.main import app
from shortlink.store import MemoryLinkStore

from helpers import ADMIN_KEY


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest.fixture
def store() -> MemoryLinkStore:
    return MemoryLinkStore()


@pytest.fixture
def generator(settings: Settings) -> ShortIdGenerator:
    return ShortIdGenerator(length=settings.SHORT_ID_LENGTH, max_attempts=settings.SHORT_ID_MAX_ATTEMPTS)


@pytest_asyncio.fixture(scope="function")
async def client(store: MemoryLinkStore, generator: ShortIdGenerator) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_link_store() -> MemoryLinkStore:
        return store

    async def override_get_id_generator() -> ShortIdGenerator:
        return generator

    app.dependency_overrides[get_link_store] = override_get_link_store
    app.dependency_overrides[get_id_generator] = override_get_id_generator

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def create_link(client: AsyncClient):
    async def _create(url: str = "https://example.com", **extra) -> dict:
        response = await client.post("/api/create", json={"url": url, "adminKey": ADMIN_KEY, **extra})
        assert response.status_code == 201, response.text
        return response.json()

    return _create
