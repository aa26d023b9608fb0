from .client import AbstractCatalogClient, CatalogError, DummyJsonClient
from .session import BrowsingSession
from .storage import JsonFileStore, MemoryStore

__all__ = [
    "AbstractCatalogClient",
    "BrowsingSession",
    "CatalogError",
    "DummyJsonClient",
    "JsonFileStore",
    "MemoryStore",
]
