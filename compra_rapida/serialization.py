"""Conversion between domain models and the flat JSON records kept on disk."""

from dataclasses import fields
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from compra_rapida.models import Customer, PaymentMethod, Purchase

# Read-time projections that never reach storage.
_PROJECTED_FIELDS = {"customer_name"}


def to_record(obj: Any) -> dict:
    """Flatten a model into a JSON-ready dict.

    Read-time projections (``Purchase.customer_name``) are left out.

    Parameters
    ----------
    obj : Any
        A ``Customer`` or ``Purchase`` (any flat dataclass works).

    Returns
    -------
    dict
        Record with JSON scalar values only.
    """
    return {
        f.name: serialize_value(getattr(obj, f.name))
        for f in fields(obj)
        if f.name not in _PROJECTED_FIELDS
    }


def serialize_value(value: Any) -> Any:
    """Turn a model attribute into a JSON scalar.

    ``Decimal`` becomes a string so amounts keep their exact cents.
    """
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def customer_from_record(record: dict) -> Customer:
    return Customer(
        customer_id=str(record["customer_id"]),
        name=record["name"],
        cpf=record["cpf"],
        phone=record["phone"],
        created_at=datetime.fromisoformat(record["created_at"]),
    )


def purchase_from_record(record: dict, customer_name: str = "") -> Purchase:
    """Rebuild a purchase; ``customer_name`` comes from the customer collection."""
    return Purchase(
        purchase_id=str(record["purchase_id"]),
        purchase_date=date.fromisoformat(record["purchase_date"]),
        total_amount=Decimal(record["total_amount"]),
        payment_method=PaymentMethod(record["payment_method"]),
        customer_id=str(record["customer_id"]),
        created_at=datetime.fromisoformat(record["created_at"]),
        customer_name=customer_name,
    )
