"""Aggregate statistics over the whole store."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from compra_rapida.formatters import CENTS


@dataclass(frozen=True)
class StoreStats:
    """Dashboard figures computed at call time."""

    customer_count: int
    purchase_count: int
    total_revenue: Decimal
    average_ticket: Decimal

    @classmethod
    def from_totals(
        cls, customer_count: int, purchase_count: int, total_revenue: Decimal
    ) -> "StoreStats":
        """Derive the average ticket; zero when there are no purchases."""
        revenue = Decimal(total_revenue)
        if purchase_count > 0:
            average = (revenue / purchase_count).quantize(CENTS, rounding=ROUND_HALF_UP)
        else:
            average = Decimal("0")
        return cls(
            customer_count=customer_count,
            purchase_count=purchase_count,
            total_revenue=revenue,
            average_ticket=average,
        )
