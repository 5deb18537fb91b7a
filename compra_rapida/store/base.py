"""Storage backend interface shared by the embedded and PostgreSQL adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from types import TracebackType

from compra_rapida.models import Customer, Purchase


class StoreBackend(ABC):
    """Durable storage for customers and purchases.

    Implementations own every durable byte and enforce the storage
    invariants themselves:

    - CPF is unique across customers (``DuplicateConstraintError``);
    - a purchase must reference an existing customer (``EntityNotFoundError``);
    - a customer referenced by purchases cannot be removed
      (``ReferentialConstraintError``);
    - unknown identifiers on get/replace/remove raise ``EntityNotFoundError``;
    - storage or transport failures raise ``BackendUnavailableError``.

    Purchases are always returned with ``customer_name`` resolved from the
    owning customer at read time.
    """

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------
    @abstractmethod
    def list_customers(self) -> list[Customer]:
        """Return all customers sorted by name (case-insensitive)."""

    @abstractmethod
    def search_customers(self, term: str, digits: str = "") -> list[Customer]:
        """Return customers whose name contains ``term``.

        When ``digits`` is non-empty, customers whose CPF or phone contains
        it also match. Sorted like ``list_customers``.
        """

    @abstractmethod
    def get_customer(self, customer_id: str) -> Customer:
        """Return a single customer."""

    @abstractmethod
    def add_customer(self, customer: Customer) -> None:
        """Insert a new customer."""

    @abstractmethod
    def replace_customer(self, customer: Customer) -> None:
        """Overwrite an existing customer's attributes."""

    @abstractmethod
    def remove_customer(self, customer_id: str) -> None:
        """Delete a customer that no purchase references."""

    # ------------------------------------------------------------------
    # Purchases
    # ------------------------------------------------------------------
    @abstractmethod
    def list_purchases(self) -> list[Purchase]:
        """Return all purchases, newest date first."""

    @abstractmethod
    def search_purchases(self, term: str) -> list[Purchase]:
        """Return purchases whose payment method or customer name contains ``term``."""

    @abstractmethod
    def get_purchase(self, purchase_id: str) -> Purchase:
        """Return a single purchase."""

    @abstractmethod
    def add_purchase(self, purchase: Purchase) -> None:
        """Insert a new purchase."""

    @abstractmethod
    def replace_purchase(self, purchase: Purchase) -> None:
        """Overwrite an existing purchase's attributes."""

    @abstractmethod
    def remove_purchase(self, purchase_id: str) -> None:
        """Delete a purchase."""

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------
    @abstractmethod
    def totals(self) -> tuple[int, int, Decimal]:
        """Return ``(customer_count, purchase_count, total_revenue)``."""

    def close(self) -> None:
        """Release any held resources."""

    def __enter__(self) -> "StoreBackend":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()
