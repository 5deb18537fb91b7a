"""Customer model."""

from dataclasses import dataclass
from datetime import datetime

from compra_rapida.formatters import format_cpf, format_phone


@dataclass
class Customer:
    """Registered customer. CPF and phone are stored digits-only."""

    customer_id: str
    name: str
    cpf: str  # 11 digits, unique
    phone: str  # 10 or 11 digits
    created_at: datetime

    @property
    def formatted_cpf(self) -> str:
        return format_cpf(self.cpf)

    @property
    def formatted_phone(self) -> str:
        return format_phone(self.phone)
