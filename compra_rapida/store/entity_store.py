"""Entity store: business rules over an injected storage backend."""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from compra_rapida.exceptions import InvalidAmountError, ValidationFailedError
from compra_rapida.formatters import (
    CENTS,
    MAX_AMOUNT,
    get_locale,
    has_misplaced_grouping,
    only_digits,
    parse_currency,
)
from compra_rapida.models import Customer, PaymentMethod, Purchase, StoreStats
from compra_rapida.store.base import StoreBackend

logger = logging.getLogger(__name__)

# Characters people type around CPF/phone digits.
_NUMERIC_TERM = re.compile(r"[\d\s.\-()/+]+")


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(timezone.utc)


class EntityStore:
    """Create, read, update and delete customers and purchases.

    Input is validated and canonicalized here (digits-only CPF and phone,
    two-place ``Decimal`` amounts, ``PaymentMethod`` members) before it
    reaches the backend. Nothing is cached between calls.

    Parameters
    ----------
    backend : StoreBackend
        Durable storage; selected once at configuration time.
    locale : str
        Locale used to read amounts typed as text, e.g. ``"1.234,56"``.
    """

    def __init__(self, backend: StoreBackend, locale: str = "pt_BR") -> None:
        get_locale(locale)
        self.backend = backend
        self.locale = locale

    def close(self) -> None:
        self.backend.close()

    def __enter__(self) -> "EntityStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    @staticmethod
    def _clean_name(name: str | None) -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationFailedError("Name is required", field="name")
        return cleaned

    @staticmethod
    def _clean_cpf(cpf: str | None) -> str:
        if not (cpf or "").strip():
            raise ValidationFailedError("CPF is required", field="cpf")
        digits = only_digits(cpf)
        if len(digits) != 11:
            raise ValidationFailedError("CPF must have 11 digits", field="cpf")
        return digits

    @staticmethod
    def _clean_phone(phone: str | None) -> str:
        if not (phone or "").strip():
            raise ValidationFailedError("Phone is required", field="phone")
        digits = only_digits(phone)
        if len(digits) not in (10, 11):
            raise ValidationFailedError("Phone must have 10 or 11 digits", field="phone")
        return digits

    @staticmethod
    def _clean_date(value: date | datetime | None) -> date:
        if value is None:
            raise ValidationFailedError("Date is required", field="purchase_date")
        if isinstance(value, datetime):
            return value.date()
        if not isinstance(value, date):
            raise ValidationFailedError("Date is invalid", field="purchase_date")
        return value

    def _clean_amount(self, amount: Decimal | int | float | str | None) -> Decimal:
        if amount is None:
            raise InvalidAmountError()
        if isinstance(amount, str):
            if has_misplaced_grouping(amount, self.locale):
                raise InvalidAmountError(f"Amount {amount!r} is not valid for locale {self.locale}")
            value = parse_currency(amount, self.locale)
        else:
            try:
                value = Decimal(str(amount))
            except InvalidOperation:
                raise InvalidAmountError() from None
        if not value.is_finite() or value <= 0:
            raise InvalidAmountError()
        if value > MAX_AMOUNT:
            raise InvalidAmountError(f"Amount must be at most {MAX_AMOUNT}")
        value = value.quantize(CENTS, rounding=ROUND_HALF_UP)
        if value <= 0:
            raise InvalidAmountError()
        return value


    @staticmethod
    def _clean_customer_id(customer_id: str | None) -> str:
        cleaned = (customer_id or "").strip()
        if not cleaned:
            raise ValidationFailedError("Customer is required", field="customer_id")
        return cleaned

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------
    def list_customers(self) -> list[Customer]:
        return self.backend.list_customers()

    def search_customers(self, term: str) -> list[Customer]:
        """Match name, CPF or phone as a case-insensitive substring.

        A term made only of digits and the usual punctuation is also matched
        digits-only against CPF and phone, so ``123.456`` and ``123456``
        find the same customer.
        """
        term = (term or "").strip()
        if not term:
            return self.list_customers()
        digits = only_digits(term) if _NUMERIC_TERM.fullmatch(term) else ""
        return self.backend.search_customers(term, digits)

    def get_customer(self, customer_id: str) -> Customer:
        return self.backend.get_customer(customer_id)

    def create_customer(self, name: str, cpf: str, phone: str) -> Customer:
        customer = Customer(
            customer_id=_new_id(),
            name=self._clean_name(name),
            cpf=self._clean_cpf(cpf),
            phone=self._clean_phone(phone),
            created_at=_now(),
        )
        self.backend.add_customer(customer)
        logger.info("Customer %s created", customer.customer_id, extra={"customer_id": customer.customer_id})
        return customer

    def update_customer(
        self,
        customer_id: str,
        *,
        name: str | None = None,
        cpf: str | None = None,
        phone: str | None = None,
    ) -> Customer:
        """Apply the given fields; ``None`` leaves a field unchanged."""
        current = self.backend.get_customer(customer_id)
        changes: dict[str, str] = {}
        if name is not None:
            changes["name"] = self._clean_name(name)
        if cpf is not None:
            changes["cpf"] = self._clean_cpf(cpf)
        if phone is not None:
            changes["phone"] = self._clean_phone(phone)
        updated = replace(current, **changes)
        self.backend.replace_customer(updated)
        logger.info(
            "Customer %s updated (%s)",
            customer_id,
            ", ".join(sorted(changes)) or "no changes",
            extra={"customer_id": customer_id},
        )
        return updated

    def delete_customer(self, customer_id: str) -> None:
        self.backend.remove_customer(customer_id)
        logger.info("Customer %s deleted", customer_id, extra={"customer_id": customer_id})

    # ------------------------------------------------------------------
    # Purchases
    # ------------------------------------------------------------------
    def list_purchases(self) -> list[Purchase]:
        return self.backend.list_purchases()

    def search_purchases(self, term: str) -> list[Purchase]:
        """Match payment method or customer name; amount and date are not searched."""
        term = (term or "").strip()
        if not term:
            return self.list_purchases()
        return self.backend.search_purchases(term)

    def get_purchase(self, purchase_id: str) -> Purchase:
        return self.backend.get_purchase(purchase_id)

    def create_purchase(
        self,
        purchase_date: date | datetime,
        total_amount: Decimal | int | float | str,
        payment_method: PaymentMethod | str,
        customer_id: str,
    ) -> Purchase:
        purchase = Purchase(
            purchase_id=_new_id(),
            purchase_date=self._clean_date(purchase_date),
            total_amount=self._clean_amount(total_amount),
            payment_method=PaymentMethod.parse(payment_method),
            customer_id=self._clean_customer_id(customer_id),
            created_at=_now(),
        )
        self.backend.add_purchase(purchase)
        logger.info(
            "Purchase %s created for customer %s (%s)",
            purchase.purchase_id,
            purchase.customer_id,
            purchase.total_amount,
            extra={"purchase_id": purchase.purchase_id, "customer_id": purchase.customer_id},
        )
        return self.backend.get_purchase(purchase.purchase_id)

    def update_purchase(
        self,
        purchase_id: str,
        *,
        purchase_date: date | datetime | None = None,
        total_amount: Decimal | int | float | str | None = None,
        payment_method: PaymentMethod | str | None = None,
        customer_id: str | None = None,
    ) -> Purchase:
        """Apply the given fields; ``None`` leaves a field unchanged."""
        current = self.backend.get_purchase(purchase_id)
        changes: dict[str, object] = {}
        if purchase_date is not None:
            changes["purchase_date"] = self._clean_date(purchase_date)
        if total_amount is not None:
            changes["total_amount"] = self._clean_amount(total_amount)
        if payment_method is not None:
            changes["payment_method"] = PaymentMethod.parse(payment_method)
        if customer_id is not None:
            changes["customer_id"] = self._clean_customer_id(customer_id)
        self.backend.replace_purchase(replace(current, **changes))
        logger.info(
            "Purchase %s updated (%s)",
            purchase_id,
            ", ".join(sorted(changes)) or "no changes",
            extra={"purchase_id": purchase_id},
        )
        return self.backend.get_purchase(purchase_id)

    def delete_purchase(self, purchase_id: str) -> None:
        self.backend.remove_purchase(purchase_id)
        logger.info("Purchase %s deleted", purchase_id, extra={"purchase_id": purchase_id})

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------
    def get_stats(self) -> StoreStats:
        customer_count, purchase_count, total_revenue = self.backend.totals()
        return StoreStats.from_totals(customer_count, purchase_count, total_revenue)
