"""HTTP facade routes driven by a session over a fake catalog."""

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from conftest import FakeCatalogClient, make_products

from product_explorer.models import Category, ResultPage
from product_explorer.session import BrowsingSession
from product_explorer.storage import MemoryStore
from server import app, get_session


def catalog(descriptor):
    start = descriptor.offset + 1
    count = min(descriptor.page_size, 30 - descriptor.offset)
    return ResultPage(items=make_products(count, start=start), total=30)


@pytest_asyncio.fixture
async def api() -> AsyncIterator[AsyncClient]:
    client = FakeCatalogClient(categories=(Category("beauty", "Beauty"),), responder=catalog)
    session = BrowsingSession(client, MemoryStore(), page_size=12)
    session.start()
    await session.wait_idle()
    app.dependency_overrides[get_session] = lambda: session
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
            yield http
    finally:
        app.dependency_overrides.clear()
        session.close()


@pytest.mark.asyncio
async def test_state_after_start(api):
    body = (await api.get("/state")).json()
    assert body["total"] == 30
    assert len(body["products"]) == 12
    assert body["page"]["can_next"] is True
    assert body["loading"] is False


@pytest.mark.asyncio
async def test_paging_routes(api):
    body = (await api.post("/page/next")).json()
    assert body["page"]["page_number"] == 2
    assert body["products"][0]["id"] == 13

    body = (await api.post("/page/prev")).json()
    assert body["page"]["page_number"] == 1


@pytest.mark.asyncio
async def test_search_and_category_routes(api):
    body = (await api.post("/search", json={"text": "phone"})).json()
    assert body["filters"]["search_text"] == "phone"

    body = (await api.post("/search/clear")).json()
    assert body["filters"]["search_text"] == ""

    body = (await api.post("/category", json={"slug": "beauty"})).json()
    assert body["filters"]["category"] == "beauty"


@pytest.mark.asyncio
async def test_categories_route(api):
    assert (await api.get("/categories")).json() == [{"slug": "beauty", "name": "Beauty"}]


@pytest.mark.asyncio
async def test_favorite_toggle_route(api):
    await api.get("/state")
    body = (await api.post("/favorites/toggle", json={"product_id": 3})).json()
    assert body == {"product_id": 3, "favorite": True, "count": 1}

    missing = await api.post("/favorites/toggle", json={"product_id": 999})
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_theme_toggle_route(api):
    assert (await api.post("/theme/toggle")).json() == {"dark_mode": True}
    assert (await api.post("/theme/toggle")).json() == {"dark_mode": False}


@pytest.mark.asyncio
async def test_invalid_body_is_rejected(api):
    assert (await api.post("/category", json={})).status_code == 422


@pytest.mark.asyncio
async def test_health(api):
    assert (await api.get("/health")).json() == {"status": "ok"}
