"""Tests for custom exception hierarchy."""

from compra_rapida.exceptions import (
    BackendUnavailableError,
    CompraRapidaError,
    ConfigurationError,
    ConstraintViolationError,
    DuplicateConstraintError,
    EntityNotFoundError,
    InvalidAmountError,
    ReferentialConstraintError,
    ValidationFailedError,
)


class TestExceptionHierarchy:
    """Test exception inheritance chain."""

    def test_base_is_exception(self) -> None:
        assert isinstance(CompraRapidaError("test"), Exception)

    def test_validation_failed_carries_field(self) -> None:
        err = ValidationFailedError("CPF is required", field="cpf")
        assert isinstance(err, CompraRapidaError)
        assert err.field == "cpf"
        assert str(err) == "CPF is required"

    def test_validation_failed_field_optional(self) -> None:
        assert ValidationFailedError("bad").field is None

    def test_invalid_amount_is_validation_failed(self) -> None:
        err = InvalidAmountError()
        assert isinstance(err, ValidationFailedError)
        assert err.field == "total_amount"
        assert str(err) == "Amount must be greater than zero"

    def test_entity_not_found_is_base(self) -> None:
        assert isinstance(EntityNotFoundError("test"), CompraRapidaError)

    def test_constraint_subtypes(self) -> None:
        for err in (DuplicateConstraintError("dup"), ReferentialConstraintError("ref")):
            assert isinstance(err, ConstraintViolationError)
            assert isinstance(err, CompraRapidaError)

    def test_duplicate_and_referential_are_distinct(self) -> None:
        assert not isinstance(DuplicateConstraintError("dup"), ReferentialConstraintError)

    def test_backend_unavailable_is_retryable(self) -> None:
        err = BackendUnavailableError("down")
        assert isinstance(err, CompraRapidaError)
        assert err.retryable is True

    def test_configuration_error_is_base(self) -> None:
        assert isinstance(ConfigurationError("test"), CompraRapidaError)
