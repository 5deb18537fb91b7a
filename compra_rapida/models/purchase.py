"""Purchase model."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from compra_rapida.models.enums import PaymentMethod


@dataclass
class Purchase:
    """A sale recorded against a customer.

    ``customer_name`` is filled in when the purchase is read back and is
    never written to storage.
    """

    purchase_id: str
    purchase_date: date
    total_amount: Decimal
    payment_method: PaymentMethod
    customer_id: str
    created_at: datetime
    customer_name: str = ""
