"""Backend selection from configuration."""

from __future__ import annotations

import logging

from compra_rapida.config import BACKENDS, CompraRapidaConfig
from compra_rapida.exceptions import ConfigurationError
from compra_rapida.store.base import StoreBackend
from compra_rapida.store.entity_store import EntityStore

logger = logging.getLogger(__name__)


def create_backend(config: CompraRapidaConfig) -> StoreBackend:
    """Build the backend named by ``config.backend``.

    Parameters
    ----------
    config : CompraRapidaConfig
        Application configuration.

    Returns
    -------
    StoreBackend
        ``EmbeddedBackend`` over JSON files, or ``PostgresBackend``.
    """
    if config.backend == "embedded":
        from compra_rapida.store.embedded import EmbeddedBackend
        from compra_rapida.store.storage import JsonFileStorage

        logger.info("Using embedded backend at %s", config.embedded.data_dir)
        return EmbeddedBackend(
            JsonFileStorage(config.embedded.data_dir),
            customers_key=config.embedded.customers_key,
            purchases_key=config.embedded.purchases_key,
        )

    if config.backend == "postgres":
        from compra_rapida.store.postgres import PostgresBackend

        logger.info(
            "Using PostgreSQL backend at %s:%s/%s",
            config.postgres.host,
            config.postgres.port,
            config.postgres.database,
        )
        return PostgresBackend(
            config.postgres.connection_string,
            connect_timeout=config.postgres.connect_timeout,
        )

    raise ConfigurationError(
        f"Unknown store backend {config.backend!r}; expected one of {', '.join(BACKENDS)}"
    )


def create_store(config: CompraRapidaConfig) -> EntityStore:
    """Build an entity store over the configured backend and locale."""
    return EntityStore(create_backend(config), locale=config.locale)
