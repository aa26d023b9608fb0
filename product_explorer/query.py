"""Filter transitions and canonical query derivation.

Everything here is pure: FilterState values go in, new values come out.
"""
from dataclasses import replace
from functools import lru_cache

from .config import ALL_CATEGORIES
from .models import FilterState, QueryDescriptor, QueryKind


def with_search_text(state: FilterState, text: str) -> FilterState:
    if text == state.search_text:
        return state
    return replace(state, search_text=text, offset=0)


def with_category(state: FilterState, category: str, clears_search: bool = False) -> FilterState:
    """Select a category; optionally drop the active search text as well."""
    category = category or ALL_CATEGORIES
    search_text = "" if clears_search else state.search_text
    if category == state.category and search_text == state.search_text:
        return state
    return replace(state, category=category, search_text=search_text, offset=0)


def with_offset(state: FilterState, offset: int) -> FilterState:
    if offset == state.offset:
        return state
    # FilterState validates the new offset.
    return replace(state, offset=offset)


@lru_cache(maxsize=256)
def build_query(state: FilterState) -> QueryDescriptor:
    """Collapse the filter dimensions into one descriptor.

    Search wins over category; with neither, the plain listing is used.
    Memoized, so the same FilterState always yields the same object.
    """
    if state.search_text.strip():
        kind, value = QueryKind.SEARCH, state.search_text
    elif state.category != ALL_CATEGORIES:
        kind, value = QueryKind.CATEGORY, state.category
    else:
        kind, value = QueryKind.LISTING, None
    return QueryDescriptor(kind=kind, value=value, offset=state.offset, page_size=state.page_size)
