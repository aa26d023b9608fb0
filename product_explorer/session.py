"""Browsing session: the state a catalog UI renders and the intents it sends back.

Flow:
1. Typed search text settles in DebouncedInput, then set_search_text()
2. Any filter change derives a new QueryDescriptor via build_query()
3. FetchCoordinator supersedes the in-flight request and issues the new one

Favorites and the theme preference live in their own persistent cells and
never touch the request flow.

Entry points: BrowsingSession.start(), the intent methods, snapshot()
"""

import logging
from typing import Any, Dict, Optional

from .client import AbstractCatalogClient
from .config import CATEGORY_CLEARS_SEARCH, DEBOUNCE_SECONDS, PAGE_SIZE, THEME_KEY
from .coordinator import FetchCoordinator
from .debounce import DebouncedInput
from .favorites import FavoritesStore
from .models import FilterState, Product
from .pagination import PaginationState
from .query import build_query, with_category, with_offset, with_search_text
from .storage import KeyValueStore, PersistentValue
from .utils import decode_bool, serialize_product

logger = logging.getLogger(__name__)


class BrowsingSession:
    """One user's view of the catalog."""

    def __init__(
        self,
        client: AbstractCatalogClient,
        store: KeyValueStore,
        page_size: int = PAGE_SIZE,
        debounce_seconds: float = DEBOUNCE_SECONDS,
        category_clears_search: bool = CATEGORY_CLEARS_SEARCH,
    ) -> None:
        self.filters = FilterState(page_size=page_size)
        self.category_clears_search = category_clears_search
        self.fetcher = FetchCoordinator(client)
        self.search_input = DebouncedInput(self.set_search_text, quiet_period=debounce_seconds)
        self.favorites = FavoritesStore(store)
        self.dark_mode: PersistentValue[bool] = PersistentValue(store, THEME_KEY, False, decode=decode_bool)

    def start(self) -> None:
        """Kick off the category fetch and the first listing request."""
        self.fetcher.load_categories()
        self._apply(self.filters, force=True)

    def _apply(self, filters: FilterState, force: bool = False) -> None:
        self.filters = filters
        self.fetcher.issue(build_query(filters), force=force)

    # Filter intents

    def type_search(self, text: str) -> None:
        """Raw keystroke-level edit; committed after the debounce quiet period."""
        self.search_input.edit(text)

    def set_search_text(self, text: str) -> None:
        """Apply a committed search string."""
        # Keep the input buffer in step when the commit comes from elsewhere.
        if text != self.search_input.value or text != self.search_input.committed:
            self.search_input.reset(text)
        updated = with_search_text(self.filters, text)
        if updated is self.filters:
            return
        logger.debug("Search text changed to %r, offset reset", text)
        self._apply(updated)

    def clear_search(self) -> None:
        self.search_input.clear()

    def set_category(self, category: str) -> None:
        updated = with_category(self.filters, category, clears_search=self.category_clears_search)
        if updated is self.filters:
            return
        if updated.search_text != self.filters.search_text:
            self.search_input.reset(updated.search_text)
        logger.debug("Category changed to %r, offset reset", updated.category)
        self._apply(updated)

    @property
    def pagination(self) -> PaginationState:
        return PaginationState(
            offset=self.filters.offset,
            page_size=self.filters.page_size,
            total=self.fetcher.view.total,
        )

    def advance_page(self) -> bool:
        """Move to the next page; returns False when already on the last one."""
        nxt = self.pagination.advance()
        if nxt.offset == self.filters.offset:
            return False
        self._apply(with_offset(self.filters, nxt.offset))
        return True

    def retreat_page(self) -> bool:
        prev = self.pagination.retreat()
        if prev.offset == self.filters.offset:
            return False
        self._apply(with_offset(self.filters, prev.offset))
        return True

    def refresh(self) -> None:
        """Re-run the current query, e.g. after a failed fetch."""
        self._apply(self.filters, force=True)

    # Preference intents

    def toggle_favorite(self, product: Product) -> bool:
        return self.favorites.toggle(product)

    def is_favorite(self, product_id: int) -> bool:
        return self.favorites.contains(product_id)

    def toggle_theme(self) -> bool:
        return self.dark_mode.update(lambda dark: not dark)

    def find_product(self, product_id: int) -> Optional[Product]:
        """Look a product up in the current page, then in favorites."""
        for p in (*self.fetcher.view.products, *self.favorites.items):
            if p.id == product_id:
                return p
        return None

    def snapshot(self) -> Dict[str, Any]:
        """Plain-data view of everything the presentation layer renders."""
        view = self.fetcher.view
        return {
            "products": [
                {**serialize_product(p), "favorite": self.is_favorite(p.id)}
                for p in view.products
            ],
            "total": view.total,
            "loading": view.loading,
            "error": view.error,
            "page": self.pagination.as_dict(),
            "categories": [{"slug": c.slug, "name": c.name} for c in self.fetcher.categories],
            "favorites": [serialize_product(p) for p in self.favorites],
            "dark_mode": self.dark_mode.value,
            "filters": {
                "search_text": self.filters.search_text,
                "search_input": self.search_input.value,
                "category": self.filters.category,
            },
        }

    async def wait_idle(self) -> None:
        await self.fetcher.wait()

    def close(self) -> None:
        self.search_input.close()
        self.fetcher.close()
