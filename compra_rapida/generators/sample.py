"""Sample customers and purchases for demos and manual testing."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal

from compra_rapida.generators.base import BaseGenerator
from compra_rapida.models import PaymentMethod
from compra_rapida.store.entity_store import EntityStore

logger = logging.getLogger(__name__)

# Brazilian area codes (DDD) of the larger metro areas.
AREA_CODES = ("11", "21", "31", "41", "47", "48", "51", "61", "62", "71", "81", "85", "91")


class SampleDataGenerator(BaseGenerator):
    """Generate realistic customers and sales through an entity store."""

    PAYMENT_METHODS = list(PaymentMethod)
    PAYMENT_WEIGHTS = [0.20, 0.45, 0.35]

    MIN_AMOUNT = 5.0
    MAX_AMOUNT = 1500.0

    def __init__(self, seed: int | None = None, locale: str = "pt_BR") -> None:
        super().__init__(seed, locale)
        self._used_cpfs: set[str] = set()

    def cpf(self) -> str:
        """Return a valid CPF (11 digits) not handed out before."""
        while True:
            digits = [self.random.randint(0, 9) for _ in range(9)]
            # First check digit
            total = sum(d * w for d, w in zip(digits, range(10, 1, -1)))
            d1 = 11 - (total % 11)
            digits.append(0 if d1 >= 10 else d1)
            # Second check digit
            total = sum(d * w for d, w in zip(digits, range(11, 1, -1)))
            d2 = 11 - (total % 11)
            digits.append(0 if d2 >= 10 else d2)
            cpf = "".join(str(d) for d in digits)
            if len(set(cpf)) > 1 and cpf not in self._used_cpfs:
                self._used_cpfs.add(cpf)
                return cpf

    def phone(self) -> str:
        """Return an 11-digit mobile number."""
        subscriber = "".join(str(self.random.randint(0, 9)) for _ in range(8))
        return f"{self.random.choice(AREA_CODES)}9{subscriber}"

    def customer_fields(self) -> dict[str, str]:
        """Keyword arguments for ``EntityStore.create_customer``."""
        return {"name": self.fake.name(), "cpf": self.cpf(), "phone": self.phone()}

    def purchase_fields(self, customer_id: str, today: date | None = None) -> dict[str, object]:
        """Keyword arguments for ``EntityStore.create_purchase``."""
        today = today or date.today()
        # Log-normal skews towards small tickets with a long tail
        amount = self.random.lognormvariate(4.5, 0.9)
        amount = max(self.MIN_AMOUNT, min(amount, self.MAX_AMOUNT))
        return {
            "purchase_date": today - timedelta(days=self.random.randint(0, 364)),
            "total_amount": Decimal(str(round(amount, 2))),
            "payment_method": self.random.choices(
                self.PAYMENT_METHODS, weights=self.PAYMENT_WEIGHTS, k=1
            )[0],
            "customer_id": customer_id,
        }

    def populate(
        self,
        store: EntityStore,
        num_customers: int,
        purchases_per_customer: int = 3,
    ) -> tuple[int, int]:
        """Create customers and purchases through ``store``.

        Parameters
        ----------
        store : EntityStore
            Target store; every business rule applies.
        num_customers : int
            Number of customers to create.
        purchases_per_customer : int
            Upper bound of purchases per customer (each gets 0..N).

        Returns
        -------
        tuple[int, int]
            Customers and purchases created.
        """
        purchases = 0
        for _ in range(num_customers):
            customer = store.create_customer(**self.customer_fields())
            for _ in range(self.random.randint(0, purchases_per_customer)):
                store.create_purchase(**self.purchase_fields(customer.customer_id))
                purchases += 1
        logger.info("Seeded %d customers and %d purchases", num_customers, purchases)
        return num_customers, purchases
