"""Configuration management for compra-rapida."""

from dataclasses import dataclass, field
from pathlib import Path

CUSTOMERS_KEY = "compra-rapida-clientes"
PURCHASES_KEY = "compra-rapida-compras"

BACKENDS = ("embedded", "postgres")


@dataclass
class EmbeddedConfig:
    """Embedded (key-value) backend configuration."""

    data_dir: Path = field(default_factory=lambda: Path("data"))
    customers_key: str = CUSTOMERS_KEY
    purchases_key: str = PURCHASES_KEY


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "compra_rapida"
    user: str = "postgres"
    password: str = "postgres"
    connect_timeout: int = 10

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class CompraRapidaConfig:
    """Main configuration for compra-rapida."""

    backend: str = "embedded"
    embedded: EmbeddedConfig = field(default_factory=EmbeddedConfig)
    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    locale: str = "pt_BR"
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "CompraRapidaConfig":
        """Create config from environment variables."""
        import os

        embedded = EmbeddedConfig(
            data_dir=Path(os.getenv("DATA_DIR", "data")),
        )

        postgres = PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=int(os.getenv("POSTGRES_PORT", "5432")),
            database=os.getenv("POSTGRES_DB", "compra_rapida"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", "postgres"),
            connect_timeout=int(os.getenv("POSTGRES_CONNECT_TIMEOUT", "10")),
        )

        return cls(
            backend=os.getenv("STORE_BACKEND", "embedded").lower(),
            embedded=embedded,
            postgres=postgres,
            locale=os.getenv("LOCALE", "pt_BR"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )
