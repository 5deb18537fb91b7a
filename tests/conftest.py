"""Pytest configuration and fixtures."""

import os
from pathlib import Path
from typing import Iterator

import pytest

from compra_rapida.store import EmbeddedBackend, EntityStore, JsonFileStorage, MemoryStorage

POSTGRES_URL_ENV = "COMPRA_RAPIDA_TEST_POSTGRES_URL"


@pytest.fixture
def memory_storage() -> MemoryStorage:
    """Empty in-memory key-value namespace."""
    return MemoryStorage()


@pytest.fixture
def memory_store(memory_storage: MemoryStorage) -> EntityStore:
    """Entity store over an in-memory embedded backend."""
    return EntityStore(EmbeddedBackend(memory_storage))


@pytest.fixture
def file_storage(tmp_path: Path) -> JsonFileStorage:
    """JSON file namespace in a temporary directory."""
    return JsonFileStorage(tmp_path / "data")


def _postgres_store() -> Iterator[EntityStore]:
    url = os.getenv(POSTGRES_URL_ENV)
    if not url:
        pytest.skip(f"{POSTGRES_URL_ENV} not set")

    import psycopg

    from compra_rapida.store.postgres import PostgresBackend

    backend = PostgresBackend(url, connect_timeout=5)
    backend.create_schema()
    with psycopg.connect(url) as conn:
        conn.execute("TRUNCATE purchases, customers")
    yield EntityStore(backend)


@pytest.fixture(params=["memory", "file", "postgres"])
def store(request: pytest.FixtureRequest, tmp_path: Path) -> Iterator[EntityStore]:
    """Entity store over each backend; postgres runs only when configured."""
    if request.param == "memory":
        yield EntityStore(EmbeddedBackend(MemoryStorage()))
    elif request.param == "file":
        yield EntityStore(EmbeddedBackend(JsonFileStorage(tmp_path / "data")))
    else:
        yield from _postgres_store()


@pytest.fixture
def sample_customer_fields() -> dict[str, str]:
    """Valid customer input as typed into a form."""
    return {"name": "Maria da Silva", "cpf": "123.456.789-00", "phone": "(11) 98765-4321"}
