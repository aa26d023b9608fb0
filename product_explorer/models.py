# Data models for the catalog browser.
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .config import ALL_CATEGORIES, PAGE_SIZE


@dataclass(frozen=True)
class Product:
    """One catalog product as received from the remote API. Identity is `id`."""
    id: int
    title: str
    thumbnail: Optional[str] = None
    price: Optional[float] = None
    rating: Optional[float] = None
    brand: Optional[str] = None
    category: Optional[str] = None


@dataclass(frozen=True)
class Category:
    slug: str
    name: str


@dataclass(frozen=True)
class ResultPage:
    """One page of listing results, replaced wholesale on every response."""
    items: Tuple[Product, ...] = ()
    total: int = 0


@dataclass(frozen=True)
class FilterState:
    """User-controlled filter dimensions.

    Search text and category may both be set; only one of them drives the
    outbound query (see query.build_query).
    """

    search_text: str = ""
    category: str = ALL_CATEGORIES
    offset: int = 0
    page_size: int = PAGE_SIZE

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ValueError("page_size must be >= 1")
        if self.offset < 0 or self.offset % self.page_size:
            raise ValueError("offset must be a non-negative multiple of page_size")


class QueryKind(str, Enum):
    SEARCH = "search"
    CATEGORY = "category"
    LISTING = "listing"


@dataclass(frozen=True)
class QueryDescriptor:
    """Canonical description of what the listing stream should fetch."""
    kind: QueryKind
    value: Optional[str]
    offset: int
    page_size: int


@dataclass(frozen=True)
class ListingView:
    """Everything the presentation layer renders for the product listing.

    Published as a single value so loading/error/products never disagree.
    """

    products: Tuple[Product, ...] = ()
    total: int = 0
    loading: bool = False
    error: Optional[str] = None
