"""Tests for backend selection."""

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from compra_rapida.config import CompraRapidaConfig, EmbeddedConfig, PostgresConfig
from compra_rapida.exceptions import ConfigurationError
from compra_rapida.store import EmbeddedBackend, EntityStore, JsonFileStorage, create_backend, create_store
from compra_rapida.store.postgres import PostgresBackend


class TestCreateBackend:
    """Tests for create_backend."""

    def test_embedded(self, tmp_path: Path) -> None:
        config = CompraRapidaConfig(embedded=EmbeddedConfig(data_dir=tmp_path / "dados"))

        backend = create_backend(config)

        assert isinstance(backend, EmbeddedBackend)
        assert isinstance(backend.storage, JsonFileStorage)
        assert backend.storage.directory == tmp_path / "dados"
        assert backend.customers_key == "compra-rapida-clientes"

    def test_postgres_does_not_connect(self) -> None:
        config = CompraRapidaConfig(
            backend="postgres",
            postgres=PostgresConfig(host="db", database="loja", connect_timeout=2),
        )

        backend = create_backend(config)

        assert isinstance(backend, PostgresBackend)
        assert backend.connection_string == "postgresql://postgres:postgres@db:5432/loja"
        assert backend.connect_timeout == 2

    def test_unknown_backend(self) -> None:
        with pytest.raises(ConfigurationError, match="sqlite"):
            create_backend(CompraRapidaConfig(backend="sqlite"))


class TestCreateStore:
    """Tests for create_store."""

    def test_wraps_backend(self, tmp_path: Path) -> None:
        store = create_store(CompraRapidaConfig(embedded=EmbeddedConfig(data_dir=tmp_path)))

        assert isinstance(store, EntityStore)
        assert isinstance(store.backend, EmbeddedBackend)
        assert store.get_stats().customer_count == 0

    def test_passes_locale(self, tmp_path: Path) -> None:
        config = CompraRapidaConfig(embedded=EmbeddedConfig(data_dir=tmp_path), locale="en_US")

        store = create_store(config)

        assert store.locale == "en_US"
        customer = store.create_customer("Ana", "12345678900", "11987654321")
        purchase = store.create_purchase(date(2024, 5, 10), "100.50", "pix", customer.customer_id)
        assert purchase.total_amount == Decimal("100.50")

    def test_unknown_locale(self, tmp_path: Path) -> None:
        config = CompraRapidaConfig(embedded=EmbeddedConfig(data_dir=tmp_path), locale="xx_XX")

        with pytest.raises(ConfigurationError, match="xx_XX"):
            create_store(config)
