import pytest

from product_explorer.models import FilterState, QueryDescriptor, QueryKind
from product_explorer.query import build_query, with_category, with_offset, with_search_text


def test_search_takes_precedence_over_category():
    state = FilterState(search_text="phone", category="beauty", page_size=12)
    assert build_query(state) == QueryDescriptor(QueryKind.SEARCH, "phone", 0, 12)


def test_category_used_when_search_is_blank():
    state = FilterState(search_text="   ", category="beauty", offset=24, page_size=12)
    assert build_query(state) == QueryDescriptor(QueryKind.CATEGORY, "beauty", 24, 12)


def test_plain_listing_without_filters():
    query = build_query(FilterState(page_size=30, offset=60))
    assert query.kind is QueryKind.LISTING
    assert query.value is None
    assert (query.offset, query.page_size) == (60, 30)


def test_search_value_is_passed_through_untrimmed():
    assert build_query(FilterState(search_text=" phone ")).value == " phone "


def test_same_state_yields_identical_descriptor():
    a = FilterState(search_text="laptop", offset=12)
    b = FilterState(search_text="laptop", offset=12)
    assert build_query(a) is build_query(a)
    assert build_query(a) == build_query(b)


def test_search_change_resets_offset():
    state = FilterState(search_text="phone", offset=36)
    updated = with_search_text(state, "laptop")
    assert updated.search_text == "laptop"
    assert updated.offset == 0


def test_unchanged_search_returns_same_state():
    state = FilterState(search_text="phone", offset=36)
    assert with_search_text(state, "phone") is state


def test_category_change_resets_offset_and_keeps_search_by_default():
    state = FilterState(search_text="phone", offset=12)
    updated = with_category(state, "beauty")
    assert updated.category == "beauty"
    assert updated.search_text == "phone"
    assert updated.offset == 0


def test_category_can_clear_search():
    state = FilterState(search_text="phone", offset=12)
    updated = with_category(state, "beauty", clears_search=True)
    assert updated.search_text == ""
    assert build_query(updated).kind is QueryKind.CATEGORY


def test_empty_category_means_all():
    state = FilterState(category="beauty")
    assert with_category(state, "").category == "all"


def test_offset_must_stay_aligned_to_page_size():
    state = FilterState(page_size=12)
    assert with_offset(state, 24).offset == 24
    with pytest.raises(ValueError):
        with_offset(state, 5)
    with pytest.raises(ValueError):
        with_offset(state, -12)
