"""Enumeration types for sales entities."""

from enum import Enum

from compra_rapida.exceptions import ValidationFailedError


class PaymentMethod(str, Enum):
    DINHEIRO = "dinheiro"
    CARTAO = "cartao"
    PIX = "pix"

    @property
    def label(self) -> str:
        return {
            PaymentMethod.DINHEIRO: "Dinheiro",
            PaymentMethod.CARTAO: "Cartão",
            PaymentMethod.PIX: "PIX",
        }[self]

    @classmethod
    def parse(cls, value: "PaymentMethod | str | None") -> "PaymentMethod":
        """Accept a member or its value, case-insensitively."""
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").strip().lower())
        except (ValueError, AttributeError):
            raise ValidationFailedError(
                "Payment method is required and must be one of: "
                + ", ".join(member.value for member in cls),
                field="payment_method",
            ) from None
