"""Payload parsing and serialization helpers for the catalog browser."""
import json
from dataclasses import asdict
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .models import Category, Product, ResultPage


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value)


def parse_product(raw: Dict[str, Any]) -> Product:
    """Build a Product from a remote or stored dict; unknown keys are ignored.

    Raises ValueError/TypeError/KeyError when required fields are missing or malformed.
    """
    if not isinstance(raw, dict):
        raise TypeError(f"product must be an object, got {type(raw).__name__}")
    return Product(
        id=int(raw["id"]),
        title=str(raw.get("title") or ""),
        thumbnail=raw.get("thumbnail"),
        price=_optional_float(raw.get("price")),
        rating=_optional_float(raw.get("rating")),
        brand=raw.get("brand"),
        category=raw.get("category"),
    )


def parse_category(raw: Any) -> Category:
    # Older API versions return bare slugs instead of objects.
    if isinstance(raw, str):
        return Category(slug=raw, name=raw)
    if not isinstance(raw, dict) or not raw.get("slug"):
        raise ValueError(f"unrecognised category entry: {raw!r}")
    return Category(slug=str(raw["slug"]), name=str(raw.get("name") or raw["slug"]))


def parse_result_page(payload: Any) -> ResultPage:
    """Convert a listing payload to a ResultPage.

    A payload without a products list is an empty page; a missing or
    non-integer total falls back to the number of items.
    """
    if not isinstance(payload, dict):
        raise ValueError("listing payload must be a JSON object")
    raw_products = payload.get("products")
    if not isinstance(raw_products, list):
        return ResultPage()
    items = tuple(parse_product(p) for p in raw_products)
    total = payload.get("total")
    if not isinstance(total, int) or isinstance(total, bool) or total < 0:
        total = len(items)
    return ResultPage(items=items, total=total)


def dedupe_products(products: Iterable[Product]) -> Tuple[Product, ...]:
    """Drop repeated ids, keeping the first occurrence."""
    seen: set[int] = set()
    uniq: List[Product] = []
    for p in products:
        if p.id in seen:
            continue
        seen.add(p.id)
        uniq.append(p)
    return tuple(uniq)


def serialize_product(p: Product) -> Dict[str, Any]:
    return asdict(p)


def encode_products(products: Iterable[Product]) -> str:
    return json.dumps([serialize_product(p) for p in products], ensure_ascii=False)


def decode_products(raw: str) -> Tuple[Product, ...]:
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError("stored favorites must be a JSON array")
    return dedupe_products(parse_product(item) for item in data)


def decode_bool(raw: str) -> bool:
    value = json.loads(raw)
    if not isinstance(value, bool):
        raise ValueError(f"expected a JSON boolean, got {raw!r}")
    return value
