"""PostgreSQL backend built on psycopg 3.

Uniqueness and referential integrity live in the schema (``UNIQUE`` on
``customers.cpf``, ``FOREIGN KEY ... ON DELETE RESTRICT`` on
``purchases.customer_id``) so concurrent writers get a reported constraint
error instead of a silent duplicate or orphan.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Callable, Iterator

import psycopg
from psycopg import errors
from psycopg.rows import dict_row

from compra_rapida.exceptions import (
    BackendUnavailableError,
    DuplicateConstraintError,
    EntityNotFoundError,
    ReferentialConstraintError,
)
from compra_rapida.formatters import name_sort_key
from compra_rapida.models import Customer, PaymentMethod, Purchase
from compra_rapida.store.base import StoreBackend

logger = logging.getLogger(__name__)

_PAYMENT_METHODS_SQL = ", ".join(f"'{m.value}'" for m in PaymentMethod)

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS customers (
        id          TEXT PRIMARY KEY,
        name        TEXT NOT NULL CHECK (length(btrim(name)) > 0),
        cpf         CHAR(11) NOT NULL UNIQUE,
        phone       VARCHAR(11) NOT NULL,
        created_at  TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    f"""
    CREATE TABLE IF NOT EXISTS purchases (
        id              TEXT PRIMARY KEY,
        purchase_date   DATE NOT NULL,
        total_amount    NUMERIC(12, 2) NOT NULL CHECK (total_amount > 0),
        payment_method  TEXT NOT NULL CHECK (payment_method IN ({_PAYMENT_METHODS_SQL})),
        customer_id     TEXT NOT NULL REFERENCES customers (id) ON DELETE RESTRICT,
        created_at      TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    "CREATE INDEX IF NOT EXISTS purchases_customer_id_idx ON purchases (customer_id)",
)

_CUSTOMER_COLUMNS = "id, name, cpf, phone, created_at"

_PURCHASE_SELECT = """
    SELECT p.id, p.purchase_date, p.total_amount, p.payment_method,
           p.customer_id, p.created_at, c.name AS customer_name
    FROM purchases p
    JOIN customers c ON c.id = p.customer_id
"""

_PURCHASE_ORDER = " ORDER BY p.purchase_date DESC, p.created_at DESC"


def like_pattern(term: str) -> str:
    """Build a ``%term%`` pattern with LIKE wildcards escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _customer_from_row(row: dict[str, Any]) -> Customer:
    return Customer(
        customer_id=row["id"],
        name=row["name"],
        cpf=row["cpf"].strip(),
        phone=row["phone"],
        created_at=row["created_at"],
    )


def _purchase_from_row(row: dict[str, Any]) -> Purchase:
    return Purchase(
        purchase_id=row["id"],
        purchase_date=row["purchase_date"],
        total_amount=Decimal(row["total_amount"]),
        payment_method=PaymentMethod(row["payment_method"]),
        customer_id=row["customer_id"],
        created_at=row["created_at"],
        customer_name=row["customer_name"],
    )


def _by_name(customers: list[Customer]) -> list[Customer]:
    # Server collations differ; sort the same way the embedded backend does.
    return sorted(customers, key=lambda c: (name_sort_key(c.name), c.name))


class PostgresBackend(StoreBackend):
    """Networked backend mapping each entity to a table.

    Parameters
    ----------
    connection_string : str
        libpq connection string or URL.
    connect_timeout : int
        Seconds to wait for the server before giving up.
    connect : Callable[[], psycopg.Connection] | None
        Connection factory; defaults to ``psycopg.connect`` with ``dict_row``
        rows. Each operation opens, commits and closes its own connection.
    """

    def __init__(
        self,
        connection_string: str,
        connect_timeout: int = 10,
        connect: Callable[[], psycopg.Connection] | None = None,
    ) -> None:
        self.connection_string = connection_string
        self.connect_timeout = connect_timeout
        self._connect = connect or self._default_connect

    def _default_connect(self) -> psycopg.Connection:
        return psycopg.connect(
            self.connection_string,
            connect_timeout=self.connect_timeout,
            row_factory=dict_row,
        )

    @contextmanager
    def _cursor(self) -> Iterator[psycopg.Cursor]:
        """Yield a cursor inside a transaction; commit on success."""
        try:
            with self._connect() as conn, conn.cursor() as cur:
                yield cur
        except errors.UniqueViolation as exc:
            logger.warning("Unique constraint rejected write: %s", exc)
            raise DuplicateConstraintError("A customer with this CPF is already registered") from exc
        except psycopg.Error as exc:
            logger.error("PostgreSQL operation failed: %s", exc)
            raise BackendUnavailableError("Database is unavailable, try again later") from exc

    def create_schema(self) -> None:
        """Create tables and indexes when missing."""
        with self._cursor() as cur:
            for statement in SCHEMA_STATEMENTS:
                cur.execute(statement)
        logger.info("PostgreSQL schema ready")

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------
    def list_customers(self) -> list[Customer]:
        with self._cursor() as cur:
            cur.execute(f"SELECT {_CUSTOMER_COLUMNS} FROM customers ORDER BY lower(name), name, id")
            customers = [_customer_from_row(row) for row in cur.fetchall()]
        return _by_name(customers)

    def search_customers(self, term: str, digits: str = "") -> list[Customer]:
        query = f"SELECT {_CUSTOMER_COLUMNS} FROM customers WHERE name ILIKE %s"
        params: list[str] = [like_pattern(term)]
        if digits:
            query += " OR cpf LIKE %s OR phone LIKE %s"
            params += [like_pattern(digits), like_pattern(digits)]
        query += " ORDER BY lower(name), name, id"
        logger.debug("Customer search: %r", term)
        with self._cursor() as cur:
            cur.execute(query, params)
            customers = [_customer_from_row(row) for row in cur.fetchall()]
        return _by_name(customers)

    def get_customer(self, customer_id: str) -> Customer:
        with self._cursor() as cur:
            cur.execute(f"SELECT {_CUSTOMER_COLUMNS} FROM customers WHERE id = %s", (customer_id,))
            row = cur.fetchone()
        if row is None:
            raise EntityNotFoundError(f"Customer {customer_id} not found")
        return _customer_from_row(row)

    def add_customer(self, customer: Customer) -> None:
        with self._cursor() as cur:
            cur.execute(
                "INSERT INTO customers (id, name, cpf, phone, created_at) VALUES (%s, %s, %s, %s, %s)",
                (customer.customer_id, customer.name, customer.cpf, customer.phone, customer.created_at),
            )

    def replace_customer(self, customer: Customer) -> None:
        with self._cursor() as cur:
            cur.execute(
                "UPDATE customers SET name = %s, cpf = %s, phone = %s WHERE id = %s",
                (customer.name, customer.cpf, customer.phone, customer.customer_id),
            )
            if cur.rowcount == 0:
                raise EntityNotFoundError(f"Customer {customer.customer_id} not found")

    def remove_customer(self, customer_id: str) -> None:
        with self._cursor() as cur:
            try:
                cur.execute("DELETE FROM customers WHERE id = %s", (customer_id,))
            except errors.ForeignKeyViolation as exc:
                logger.warning("Refused to delete customer %s: purchases reference it", customer_id)
                raise ReferentialConstraintError(
                    "Customer has registered purchases and cannot be deleted"
                ) from exc
            if cur.rowcount == 0:
                raise EntityNotFoundError(f"Customer {customer_id} not found")

    # ------------------------------------------------------------------
    # Purchases
    # ------------------------------------------------------------------
    def list_purchases(self) -> list[Purchase]:
        with self._cursor() as cur:
            cur.execute(_PURCHASE_SELECT + _PURCHASE_ORDER)
            return [_purchase_from_row(row) for row in cur.fetchall()]

    def search_purchases(self, term: str) -> list[Purchase]:
        pattern = like_pattern(term)
        with self._cursor() as cur:
            cur.execute(
                _PURCHASE_SELECT
                + " WHERE p.payment_method ILIKE %s OR c.name ILIKE %s"
                + _PURCHASE_ORDER,
                (pattern, pattern),
            )
            return [_purchase_from_row(row) for row in cur.fetchall()]

    def get_purchase(self, purchase_id: str) -> Purchase:
        with self._cursor() as cur:
            cur.execute(_PURCHASE_SELECT + " WHERE p.id = %s", (purchase_id,))
            row = cur.fetchone()
        if row is None:
            raise EntityNotFoundError(f"Purchase {purchase_id} not found")
        return _purchase_from_row(row)

    def add_purchase(self, purchase: Purchase) -> None:
        with self._cursor() as cur:
            try:
                cur.execute(
                    "INSERT INTO purchases "
                    "(id, purchase_date, total_amount, payment_method, customer_id, created_at) "
                    "VALUES (%s, %s, %s, %s, %s, %s)",
                    (
                        purchase.purchase_id,
                        purchase.purchase_date,
                        purchase.total_amount,
                        purchase.payment_method.value,
                        purchase.customer_id,
                        purchase.created_at,
                    ),
                )
            except errors.ForeignKeyViolation as exc:
                raise EntityNotFoundError(f"Customer {purchase.customer_id} not found") from exc

    def replace_purchase(self, purchase: Purchase) -> None:
        with self._cursor() as cur:
            try:
                cur.execute(
                    "UPDATE purchases SET purchase_date = %s, total_amount = %s, "
                    "payment_method = %s, customer_id = %s WHERE id = %s",
                    (
                        purchase.purchase_date,
                        purchase.total_amount,
                        purchase.payment_method.value,
                        purchase.customer_id,
                        purchase.purchase_id,
                    ),
                )
            except errors.ForeignKeyViolation as exc:
                raise EntityNotFoundError(f"Customer {purchase.customer_id} not found") from exc
            if cur.rowcount == 0:
                raise EntityNotFoundError(f"Purchase {purchase.purchase_id} not found")

    def remove_purchase(self, purchase_id: str) -> None:
        with self._cursor() as cur:
            cur.execute("DELETE FROM purchases WHERE id = %s", (purchase_id,))
            if cur.rowcount == 0:
                raise EntityNotFoundError(f"Purchase {purchase_id} not found")

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------
    def totals(self) -> tuple[int, int, Decimal]:
        with self._cursor() as cur:
            cur.execute(
                "SELECT (SELECT count(*) FROM customers) AS customer_count, "
                "count(*) AS purchase_count, "
                "COALESCE(sum(total_amount), 0) AS total_revenue "
                "FROM purchases"
            )
            row = cur.fetchone()
        return int(row["customer_count"]), int(row["purchase_count"]), Decimal(row["total_revenue"])
