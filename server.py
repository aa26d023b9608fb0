import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from product_explorer import BrowsingSession, DummyJsonClient, JsonFileStore
from product_explorer.config import LOG_LEVEL, STORE_PATH

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

# Shared session.
# Note: there is no per-user state; one browser drives one session.
_session: Optional[BrowsingSession] = None
_client: Optional[DummyJsonClient] = None


async def get_session() -> BrowsingSession:
    global _session, _client
    if _session is None:
        _client = DummyJsonClient()
        _session = BrowsingSession(_client, JsonFileStore(STORE_PATH))
        _session.start()
    return _session


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _session, _client
    yield
    if _session is not None:
        _session.close()
        _session = None
    if _client is not None:
        await _client.aclose()
        _client = None


app = FastAPI(title="Product Explorer", lifespan=lifespan)

# Enable CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify the exact origin
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class SearchRequest(BaseModel):
    text: str


class CategoryRequest(BaseModel):
    slug: str


class FavoriteRequest(BaseModel):
    product_id: int


async def _settled(session: BrowsingSession) -> dict:
    await session.wait_idle()
    return session.snapshot()


@app.get("/state")
async def state(session: BrowsingSession = Depends(get_session)):
    return await _settled(session)


@app.get("/categories")
async def categories(session: BrowsingSession = Depends(get_session)):
    await session.wait_idle()
    return [{"slug": c.slug, "name": c.name} for c in session.fetcher.categories]


@app.post("/search/type")
async def type_search(request: SearchRequest, session: BrowsingSession = Depends(get_session)):
    # Debounced: the fetch starts once typing pauses, so don't wait for it here.
    session.type_search(request.text)
    return session.snapshot()


@app.post("/search")
async def search(request: SearchRequest, session: BrowsingSession = Depends(get_session)):
    session.set_search_text(request.text)
    return await _settled(session)


@app.post("/search/clear")
async def clear_search(session: BrowsingSession = Depends(get_session)):
    session.clear_search()
    return await _settled(session)


@app.post("/category")
async def category(request: CategoryRequest, session: BrowsingSession = Depends(get_session)):
    session.set_category(request.slug)
    return await _settled(session)


@app.post("/page/next")
async def next_page(session: BrowsingSession = Depends(get_session)):
    session.advance_page()
    return await _settled(session)


@app.post("/page/prev")
async def prev_page(session: BrowsingSession = Depends(get_session)):
    session.retreat_page()
    return await _settled(session)


@app.post("/favorites/toggle")
async def toggle_favorite(request: FavoriteRequest, session: BrowsingSession = Depends(get_session)):
    product = session.find_product(request.product_id)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product {request.product_id} is not on the current page or in favorites")
    favorite = session.toggle_favorite(product)
    return {"product_id": product.id, "favorite": favorite, "count": len(session.favorites)}


@app.post("/theme/toggle")
async def toggle_theme(session: BrowsingSession = Depends(get_session)):
    return {"dark_mode": session.toggle_theme()}


@app.post("/refresh")
async def refresh(session: BrowsingSession = Depends(get_session)):
    session.refresh()
    return await _settled(session)


@app.get("/health")
async def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
