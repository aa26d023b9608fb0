"""Shared fakes for the catalog browser tests."""

import asyncio
from typing import Callable, Dict, List, Optional, Tuple, Union

import pytest

from product_explorer.client import AbstractCatalogClient, CatalogError
from product_explorer.models import Category, Product, QueryDescriptor, ResultPage
from product_explorer.storage import KeyValueStore, MemoryStore, StorageError

Responder = Callable[[QueryDescriptor], Union[ResultPage, Exception]]


def make_products(count: int, start: int = 1, category: str = "smartphones") -> Tuple[Product, ...]:
    return tuple(
        Product(
            id=i,
            title=f"Product {i}",
            thumbnail=f"https://cdn.example.com/{i}.png",
            price=10.0 + i,
            rating=4.5,
            brand="Acme",
            category=category,
        )
        for i in range(start, start + count)
    )


async def settle(rounds: int = 10) -> None:
    """Give scheduled callbacks and tasks a few loop iterations to run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeCatalogClient(AbstractCatalogClient):
    """Catalog whose listing responses are released by the test.

    With `ignore_cancel`, a cancelled fetch keeps waiting and still returns,
    like a transport that cannot abort a request already on the wire.
    """

    def __init__(
        self,
        categories: Tuple[Category, ...] = (),
        responder: Optional[Responder] = None,
        ignore_cancel: bool = False,
    ) -> None:
        self.categories = categories
        self.category_error: Optional[Exception] = None
        self.responder = responder
        self.ignore_cancel = ignore_cancel
        self.calls: List[QueryDescriptor] = []
        self._pending: Dict[QueryDescriptor, asyncio.Future] = {}

    def _future(self, descriptor: QueryDescriptor) -> asyncio.Future:
        if descriptor not in self._pending:
            self._pending[descriptor] = asyncio.get_running_loop().create_future()
        return self._pending[descriptor]

    def respond(self, descriptor: QueryDescriptor, page: ResultPage) -> None:
        self._future(descriptor).set_result(page)

    def fail(self, descriptor: QueryDescriptor, error: Optional[Exception] = None) -> None:
        self._future(descriptor).set_exception(error or CatalogError("connection reset"))

    async def list_categories(self) -> Tuple[Category, ...]:
        if self.category_error is not None:
            raise self.category_error
        return self.categories

    async def fetch_page(self, descriptor: QueryDescriptor) -> ResultPage:
        self.calls.append(descriptor)
        if self.responder is not None:
            result = self.responder(descriptor)
            if isinstance(result, Exception):
                raise result
            return result
        fut = self._future(descriptor)
        while True:
            try:
                return await asyncio.shield(fut)
            except asyncio.CancelledError:
                if not self.ignore_cancel:
                    raise


class BrokenStore(KeyValueStore):
    """Store that is entirely unavailable."""

    def get(self, key: str):
        raise StorageError("storage disabled")

    def set(self, key: str, value: str) -> None:
        raise StorageError("quota exceeded")


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()
