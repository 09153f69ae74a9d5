"""Create endpoint behavior tests."""

import datetime
import json

import pytest
from httpx import AsyncClient

from shortlink.generator import ALPHABET, ShortIdGenerator
from shortlink.schemas import LinkRecord
from shortlink.store import MemoryLinkStore

from helpers import ADMIN_KEY, scripted_source


@pytest.mark.asyncio
async def test_create_valid_url(client: AsyncClient, store: MemoryLinkStore) -> None:
    response = await client.post("/api/create", json={"url": "https://example.com", "adminKey": ADMIN_KEY})
    assert response.status_code == 201
    data = response.json()
    assert set(data) == {"shortId", "shortUrl", "originalUrl"}
    assert len(data["shortId"]) == 6
    assert all(c in ALPHABET for c in data["shortId"])
    assert data["shortUrl"] == f"https://sho.rt/{data['shortId']}"
    assert data["originalUrl"] == "https://example.com"

    record = LinkRecord.from_json(await store.get(data["shortId"]))
    assert record.original_url == "https://example.com"
    assert record.visits == 0
    assert datetime.datetime.fromisoformat(record.created_at).tzinfo is not None
    assert record.created_at.endswith("Z")


@pytest.mark.asyncio
async def test_create_persists_camel_case_layout(client: AsyncClient, store: MemoryLinkStore) -> None:
    response = await client.post("/api/create", json={"url": "https://example.com/a", "adminKey": ADMIN_KEY})
    stored = json.loads(await store.get(response.json()["shortId"]))
    assert set(stored) == {"originalUrl", "createdAt", "visits"}
    assert stored["visits"] == 0
    assert isinstance(stored["createdAt"], str)


@pytest.mark.asyncio
async def test_create_wrong_admin_key(client: AsyncClient, store: MemoryLinkStore) -> None:
    response = await client.post("/api/create", json={"url": "https://example.com", "adminKey": "nope"})
    assert response.status_code == 401
    assert response.json() == {"error": "invalid admin key"}
    assert len(store) == 0


@pytest.mark.asyncio
async def test_create_missing_admin_key(client: AsyncClient) -> None:
    response = await client.post("/api/create", json={"url": "https://example.com"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_admin_key_checked_before_url(client: AsyncClient) -> None:
    response = await client.post("/api/create", json={"url": "not-a-url", "adminKey": "nope"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_missing_url(client: AsyncClient) -> None:
    response = await client.post("/api/create", json={"adminKey": ADMIN_KEY})
    assert response.status_code == 400
    assert response.json() == {"error": "URL required"}


@pytest.mark.asyncio
async def test_create_non_string_url(client: AsyncClient) -> None:
    response = await client.post("/api/create", json={"url": 42, "adminKey": ADMIN_KEY})
    assert response.status_code == 400
    assert response.json() == {"error": "URL required"}


@pytest.mark.asyncio
async def test_create_invalid_url(client: AsyncClient, store: MemoryLinkStore) -> None:
    response = await client.post("/api/create", json={"url": "not-a-url", "adminKey": ADMIN_KEY})
    assert response.status_code == 400
    assert response.json() == {"error": "invalid URL format"}
    assert len(store) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "url",
    [
        "http://localhost:3000/dashboard",
        "https://example.com/search?q",
        "https://example.com/?utm_source",
        "http://intranet/wiki",
        "https://example.com/a|b",
        "https://example.com/a b|c{d}",
    ],
)
async def test_create_accepts_lenient_urls(client: AsyncClient, store: MemoryLinkStore, url: str) -> None:
    response = await client.post("/api/create", json={"url": url, "adminKey": ADMIN_KEY})
    assert response.status_code == 201
    assert response.json()["originalUrl"] == url
    assert LinkRecord.from_json(await store.get(response.json()["shortId"])).original_url == url


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["example.com/path", "https://", "https://example.com/\r\nSet-Cookie: a=b"])
async def test_create_rejects_unusable_urls(client: AsyncClient, store: MemoryLinkStore, url: str) -> None:
    response = await client.post("/api/create", json={"url": url, "adminKey": ADMIN_KEY})
    assert response.status_code == 400
    assert response.json() == {"error": "invalid URL format"}
    assert len(store) == 0


@pytest.mark.asyncio
async def test_create_with_custom_id(client: AsyncClient, store: MemoryLinkStore) -> None:
    response = await client.post(
        "/api/create",
        json={"url": "https://www.github.com", "customId": "ghub", "adminKey": ADMIN_KEY},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["shortId"] == "ghub"
    assert data["shortUrl"] == "https://sho.rt/ghub"
    assert "ghub" in store


@pytest.mark.asyncio
async def test_create_duplicate_custom_id(client: AsyncClient, store: MemoryLinkStore) -> None:
    first = await client.post(
        "/api/create",
        json={"url": "https://www.github.com", "customId": "taken1", "adminKey": ADMIN_KEY},
    )
    before = await store.get("taken1")

    response = await client.post(
        "/api/create",
        json={"url": "https://www.example.com", "customId": "taken1", "adminKey": ADMIN_KEY},
    )
    assert first.status_code == 201
    assert response.status_code == 409
    assert response.json() == {"error": "custom ID already in use"}
    assert await store.get("taken1") == before


@pytest.mark.asyncio
async def test_empty_custom_id_generates_one(client: AsyncClient) -> None:
    response = await client.post(
        "/api/create",
        json={"url": "https://example.com", "customId": "", "adminKey": ADMIN_KEY},
    )
    assert response.status_code == 201
    assert len(response.json()["shortId"]) == 6


@pytest.mark.asyncio
async def test_create_malformed_body(client: AsyncClient) -> None:
    response = await client.post(
        "/api/create",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 500
    assert "error" in response.json()


@pytest.mark.asyncio
async def test_create_body_not_an_object(client: AsyncClient) -> None:
    response = await client.post("/api/create", json=["https://example.com"])
    assert response.status_code == 500


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE", "OPTIONS"])
async def test_create_wrong_method(client: AsyncClient, method: str) -> None:
    response = await client.request(method, "/api/create")
    assert response.status_code == 405
    assert response.json() == {"error": "method not allowed"}
    assert response.headers["allow"] == "POST"


@pytest.mark.asyncio
async def test_create_multiple_urls_get_distinct_ids(client: AsyncClient) -> None:
    codes = set()
    for url in ["https://www.google.com", "https://www.github.com", "https://www.python.org"]:
        response = await client.post("/api/create", json={"url": url, "adminKey": ADMIN_KEY})
        assert response.status_code == 201
        codes.add(response.json()["shortId"])
    assert len(codes) == 3


@pytest.mark.asyncio
async def test_generated_id_skips_existing(
    client: AsyncClient, store: MemoryLinkStore, generator: ShortIdGenerator
) -> None:
    existing = LinkRecord.new("https://old.example.com").to_json()
    await store.put("AAAAAA", existing)
    generator._random_source = scripted_source(["AAAAAA", "BBBBBB"])

    response = await client.post("/api/create", json={"url": "https://example.com", "adminKey": ADMIN_KEY})
    assert response.status_code == 201
    assert response.json()["shortId"] == "BBBBBB"
    assert await store.get("AAAAAA") == existing
