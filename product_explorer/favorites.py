from typing import Iterator, Tuple

from .config import FAVORITES_KEY
from .models import Product
from .storage import KeyValueStore, PersistentValue
from .utils import decode_products, encode_products


def _toggled(current: Tuple[Product, ...], product: Product) -> Tuple[Product, ...]:
    if any(p.id == product.id for p in current):
        return tuple(p for p in current if p.id != product.id)
    # Newest favorite first.
    return (product, *current)


class FavoritesStore:
    """Favorited products, newest first, persisted on every toggle."""

    def __init__(self, store: KeyValueStore, key: str = FAVORITES_KEY) -> None:
        self._cell: PersistentValue[Tuple[Product, ...]] = PersistentValue(
            store,
            key,
            default=(),
            encode=encode_products,
            decode=decode_products,
        )

    @property
    def items(self) -> Tuple[Product, ...]:
        return self._cell.value

    def contains(self, product_id: int) -> bool:
        return any(p.id == product_id for p in self._cell.value)

    def toggle(self, product: Product) -> bool:
        """Add or remove `product` by id; returns True if it is now a favorite."""
        updated = self._cell.update(lambda current: _toggled(current, product))
        return any(p.id == product.id for p in updated)

    def __len__(self) -> int:
        return len(self._cell.value)

    def __iter__(self) -> Iterator[Product]:
        return iter(self._cell.value)
