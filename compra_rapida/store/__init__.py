"""Entity store and its interchangeable storage backends."""

from compra_rapida.store.base import StoreBackend
from compra_rapida.store.embedded import EmbeddedBackend
from compra_rapida.store.entity_store import EntityStore
from compra_rapida.store.factory import create_backend, create_store
from compra_rapida.store.storage import JsonFileStorage, KeyValueStorage, MemoryStorage

__all__ = [
    "EmbeddedBackend",
    "EntityStore",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "StoreBackend",
    "create_backend",
    "create_store",
]
