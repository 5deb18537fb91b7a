"""Tests for SampleDataGenerator."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from compra_rapida.generators import SampleDataGenerator
from compra_rapida.models import PaymentMethod
from compra_rapida.store import EntityStore


def _cpf_is_valid(cpf: str) -> bool:
    digits = [int(c) for c in cpf]
    for size in (9, 10):
        total = sum(d * w for d, w in zip(digits[:size], range(size + 1, 1, -1)))
        check = 11 - (total % 11)
        if (0 if check >= 10 else check) != digits[size]:
            return False
    return True


@pytest.fixture
def generator() -> SampleDataGenerator:
    return SampleDataGenerator(seed=42)


class TestIdentifiers:
    """Tests for generated CPF and phone numbers."""

    def test_cpf_check_digits(self, generator: SampleDataGenerator) -> None:
        for _ in range(50):
            cpf = generator.cpf()
            assert len(cpf) == 11
            assert cpf.isdigit()
            assert _cpf_is_valid(cpf)

    def test_known_valid_cpf(self) -> None:
        assert _cpf_is_valid("52998224725")

    def test_cpf_unique(self, generator: SampleDataGenerator) -> None:
        cpfs = [generator.cpf() for _ in range(200)]

        assert len(set(cpfs)) == 200

    def test_phone_is_mobile(self, generator: SampleDataGenerator) -> None:
        phone = generator.phone()

        assert len(phone) == 11
        assert phone[2] == "9"


class TestFields:
    """Tests for generated entity fields."""

    def test_seed_reproducible(self) -> None:
        first = SampleDataGenerator(seed=7).customer_fields()
        second = SampleDataGenerator(seed=7).customer_fields()

        assert first == second

    def test_purchase_fields(self, generator: SampleDataGenerator) -> None:
        today = date(2024, 12, 31)

        for _ in range(50):
            fields = generator.purchase_fields("c1", today=today)
            assert fields["customer_id"] == "c1"
            assert today - timedelta(days=364) <= fields["purchase_date"] <= today
            assert Decimal("5.00") <= fields["total_amount"] <= Decimal("1500.00")
            assert fields["payment_method"] in PaymentMethod


class TestPopulate:
    """Tests for populate."""

    def test_populate_through_store(self, generator: SampleDataGenerator, memory_store: EntityStore) -> None:
        customers, purchases = generator.populate(memory_store, 10, purchases_per_customer=4)

        stats = memory_store.get_stats()
        assert customers == 10
        assert stats.customer_count == 10
        assert stats.purchase_count == purchases
        assert purchases <= 40
        assert all(p.customer_name for p in memory_store.list_purchases())

    def test_populate_zero(self, generator: SampleDataGenerator, memory_store: EntityStore) -> None:
        assert generator.populate(memory_store, 0) == (0, 0)
