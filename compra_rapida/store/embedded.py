"""Embedded backend: JSON collections in a key-value namespace."""

from __future__ import annotations

import json
import logging
import threading
from decimal import Decimal, InvalidOperation
from typing import Callable, TypeVar

from compra_rapida.config import CUSTOMERS_KEY, PURCHASES_KEY
from compra_rapida.exceptions import (
    BackendUnavailableError,
    DuplicateConstraintError,
    EntityNotFoundError,
    ReferentialConstraintError,
)
from compra_rapida.formatters import name_sort_key, only_digits
from compra_rapida.models import Customer, Purchase
from compra_rapida.serialization import customer_from_record, purchase_from_record, to_record
from compra_rapida.store.base import StoreBackend
from compra_rapida.store.storage import KeyValueStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EmbeddedBackend(StoreBackend):
    """Single-process backend over an injected key-value namespace.

    Each collection is one JSON array under a fixed key. Every write reads
    the whole array, mutates it and writes it back. A lock serializes
    read-modify-write cycles within the process; separate processes sharing
    the same namespace can still lose updates.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        customers_key: str = CUSTOMERS_KEY,
        purchases_key: str = PURCHASES_KEY,
    ) -> None:
        self.storage = storage
        self.customers_key = customers_key
        self.purchases_key = purchases_key
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Raw collection access
    # ------------------------------------------------------------------
    def _load(self, key: str) -> list[dict]:
        try:
            raw = self.storage.get_item(key)
        except OSError as exc:
            logger.error("Failed to read %s: %s", key, exc)
            raise BackendUnavailableError(f"Could not read collection {key!r}") from exc
        except UnicodeDecodeError as exc:
            logger.error("Collection %s is not valid UTF-8: %s", key, exc)
            raise BackendUnavailableError(f"Collection {key!r} is corrupt") from exc
        if raw is None:
            return []
        try:
            records = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("Collection %s holds invalid JSON: %s", key, exc)
            raise BackendUnavailableError(f"Collection {key!r} is corrupt") from exc
        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise BackendUnavailableError(f"Collection {key!r} is not a list of records")
        return records

    def _save(self, key: str, records: list[dict]) -> None:
        payload = json.dumps(records, ensure_ascii=False)
        try:
            self.storage.set_item(key, payload)
        except OSError as exc:
            logger.error("Failed to write %s: %s", key, exc)
            raise BackendUnavailableError(f"Could not write collection {key!r}") from exc

    def _decode(self, key: str, records: list[dict], decode: Callable[[dict], T]) -> list[T]:
        try:
            return [decode(record) for record in records]
        except (KeyError, TypeError, ValueError, InvalidOperation) as exc:
            raise BackendUnavailableError(f"Collection {key!r} holds a malformed record") from exc

    def _customers(self) -> list[Customer]:
        return self._decode(self.customers_key, self._load(self.customers_key), customer_from_record)

    def _purchases(self) -> list[Purchase]:
        names = {c.customer_id: c.name for c in self._customers()}
        return self._decode(
            self.purchases_key,
            self._load(self.purchases_key),
            lambda record: purchase_from_record(record, names.get(str(record["customer_id"]), "")),
        )

    @staticmethod
    def _index_of(records: list[dict], id_field: str, entity_id: str) -> int:
        for index, record in enumerate(records):
            if str(record.get(id_field)) == entity_id:
                return index
        return -1

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------
    def list_customers(self) -> list[Customer]:
        with self._lock:
            customers = self._customers()
        return sorted(customers, key=lambda c: (name_sort_key(c.name), c.name))

    def search_customers(self, term: str, digits: str = "") -> list[Customer]:
        needle = term.casefold()
        return [
            customer
            for customer in self.list_customers()
            if needle in customer.name.casefold()
            or (digits and (digits in customer.cpf or digits in customer.phone))
        ]

    def get_customer(self, customer_id: str) -> Customer:
        with self._lock:
            for customer in self._customers():
                if customer.customer_id == customer_id:
                    return customer
        raise EntityNotFoundError(f"Customer {customer_id} not found")

    def _check_cpf_free(self, records: list[dict], cpf: str, exclude_id: str | None = None) -> None:
        wanted = only_digits(cpf)
        for record in records:
            if str(record.get("customer_id")) == exclude_id:
                continue
            if only_digits(record.get("cpf")) == wanted:
                logger.warning("Rejected duplicate CPF for customer %s", exclude_id or "(new)")
                raise DuplicateConstraintError("A customer with this CPF is already registered")

    def add_customer(self, customer: Customer) -> None:
        with self._lock:
            records = self._load(self.customers_key)
            self._check_cpf_free(records, customer.cpf)
            records.append(to_record(customer))
            self._save(self.customers_key, records)

    def replace_customer(self, customer: Customer) -> None:
        with self._lock:
            records = self._load(self.customers_key)
            index = self._index_of(records, "customer_id", customer.customer_id)
            if index < 0:
                raise EntityNotFoundError(f"Customer {customer.customer_id} not found")
            self._check_cpf_free(records, customer.cpf, exclude_id=customer.customer_id)
            records[index] = to_record(customer)
            self._save(self.customers_key, records)

    def remove_customer(self, customer_id: str) -> None:
        with self._lock:
            records = self._load(self.customers_key)
            index = self._index_of(records, "customer_id", customer_id)
            if index < 0:
                raise EntityNotFoundError(f"Customer {customer_id} not found")
            purchases = self._load(self.purchases_key)
            if any(str(p.get("customer_id")) == customer_id for p in purchases):
                logger.warning("Refused to delete customer %s: purchases reference it", customer_id)
                raise ReferentialConstraintError(
                    "Customer has registered purchases and cannot be deleted"
                )
            del records[index]
            self._save(self.customers_key, records)

    # ------------------------------------------------------------------
    # Purchases
    # ------------------------------------------------------------------
    def list_purchases(self) -> list[Purchase]:
        with self._lock:
            purchases = self._purchases()
        # Two stable sorts: created_at as tie-breaker, then date.
        purchases.sort(key=lambda p: p.created_at, reverse=True)
        purchases.sort(key=lambda p: p.purchase_date, reverse=True)
        return purchases

    def search_purchases(self, term: str) -> list[Purchase]:
        needle = term.casefold()
        return [
            purchase
            for purchase in self.list_purchases()
            if needle in purchase.payment_method.value
            or needle in purchase.customer_name.casefold()
        ]

    def get_purchase(self, purchase_id: str) -> Purchase:
        with self._lock:
            for purchase in self._purchases():
                if purchase.purchase_id == purchase_id:
                    return purchase
        raise EntityNotFoundError(f"Purchase {purchase_id} not found")

    def _require_customer(self, customer_id: str) -> None:
        customers = self._load(self.customers_key)
        if self._index_of(customers, "customer_id", customer_id) < 0:
            raise EntityNotFoundError(f"Customer {customer_id} not found")

    def add_purchase(self, purchase: Purchase) -> None:
        with self._lock:
            self._require_customer(purchase.customer_id)
            records = self._load(self.purchases_key)
            records.append(to_record(purchase))
            self._save(self.purchases_key, records)

    def replace_purchase(self, purchase: Purchase) -> None:
        with self._lock:
            records = self._load(self.purchases_key)
            index = self._index_of(records, "purchase_id", purchase.purchase_id)
            if index < 0:
                raise EntityNotFoundError(f"Purchase {purchase.purchase_id} not found")
            self._require_customer(purchase.customer_id)
            records[index] = to_record(purchase)
            self._save(self.purchases_key, records)

    def remove_purchase(self, purchase_id: str) -> None:
        with self._lock:
            records = self._load(self.purchases_key)
            index = self._index_of(records, "purchase_id", purchase_id)
            if index < 0:
                raise EntityNotFoundError(f"Purchase {purchase_id} not found")
            del records[index]
            self._save(self.purchases_key, records)

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------
    def totals(self) -> tuple[int, int, Decimal]:
        with self._lock:
            customers = self._load(self.customers_key)
            purchases = self._decode(self.purchases_key, self._load(self.purchases_key), purchase_from_record)
        revenue = sum((p.total_amount for p in purchases), Decimal("0"))
        return len(customers), len(purchases), revenue
