"""Domain models for customers and sales."""

from compra_rapida.models.customer import Customer
from compra_rapida.models.enums import PaymentMethod
from compra_rapida.models.purchase import Purchase
from compra_rapida.models.stats import StoreStats

__all__ = ["Customer", "PaymentMethod", "Purchase", "StoreStats"]
