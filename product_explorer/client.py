from __future__ import annotations

"""Remote product catalog access.

Provides:
- AbstractCatalogClient: interface the fetch coordinator talks to
- DummyJsonClient: async httpx adapter for DummyJSON-style catalog APIs"""

import logging
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

import httpx

from .config import API_BASE
from .models import Category, QueryDescriptor, QueryKind, ResultPage
from .utils import parse_category, parse_result_page

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Transport or payload failure while talking to the catalog."""


class AbstractCatalogClient:
    """Interface for catalog clients."""

    async def list_categories(self) -> Tuple[Category, ...]:
        raise NotImplementedError

    async def fetch_page(self, descriptor: QueryDescriptor) -> ResultPage:
        raise NotImplementedError


def listing_request(descriptor: QueryDescriptor) -> Tuple[str, Dict[str, Any]]:
    """Map a descriptor to (path, query params) for exactly one listing endpoint."""
    params: Dict[str, Any] = {"limit": descriptor.page_size, "skip": descriptor.offset}
    if descriptor.kind is QueryKind.SEARCH:
        return "/products/search", {"q": descriptor.value, **params}
    if descriptor.kind is QueryKind.CATEGORY:
        return f"/products/category/{quote(descriptor.value or '', safe='')}", params
    return "/products", params


class DummyJsonClient(AbstractCatalogClient):
    """Async adapter over httpx.AsyncClient."""

    def __init__(self, base_url: str = API_BASE, http_client: Optional[httpx.AsyncClient] = None) -> None:
        self.base_url = base_url.rstrip("/")
        # Only close the client we created ourselves.
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient()

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("GET %s params=%s", url, params)
        try:
            r = await self._http.get(url, params=params)
            r.raise_for_status()
            return r.json()
        except httpx.HTTPError as e:
            raise CatalogError(f"GET {url} failed: {e}") from e
        except ValueError as e:
            raise CatalogError(f"GET {url} returned invalid JSON: {e}") from e

    async def list_categories(self) -> Tuple[Category, ...]:
        data = await self._get_json("/products/categories")
        if not isinstance(data, list):
            raise CatalogError("categories payload is not a list")
        try:
            return tuple(parse_category(c) for c in data)
        except ValueError as e:
            raise CatalogError(str(e)) from e

    async def fetch_page(self, descriptor: QueryDescriptor) -> ResultPage:
        path, params = listing_request(descriptor)
        data = await self._get_json(path, params)
        try:
            return parse_result_page(data)
        except (ValueError, TypeError, KeyError, OverflowError) as e:
            raise CatalogError(f"malformed listing payload: {e}") from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "DummyJsonClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
