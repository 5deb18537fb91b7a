"""Custom exception hierarchy for compra-rapida."""


class CompraRapidaError(Exception):
    """Base exception for all compra-rapida errors."""


class ValidationFailedError(CompraRapidaError):
    """Raised when caller input fails a precondition.

    The message is meant to be shown to an end user as-is, so it never
    carries technical detail. ``field`` names the offending input.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class InvalidAmountError(ValidationFailedError):
    """Raised when a purchase amount is not positive or exceeds ``MAX_AMOUNT``."""

    def __init__(self, message: str = "Amount must be greater than zero") -> None:
        super().__init__(message, field="total_amount")


class EntityNotFoundError(CompraRapidaError):
    """Raised when a referenced entity does not exist."""


class ConstraintViolationError(CompraRapidaError):
    """Raised when a storage-level invariant would be violated."""


class DuplicateConstraintError(ConstraintViolationError):
    """Raised when a customer CPF is already registered."""


class ReferentialConstraintError(ConstraintViolationError):
    """Raised when deleting a customer that purchases still reference."""


class BackendUnavailableError(CompraRapidaError):
    """Raised when the storage backend fails (disk, network or server).

    Always raised with the underlying exception chained as ``__cause__``.
    """

    retryable = True


class ConfigurationError(CompraRapidaError):
    """Raised when configuration is invalid or missing."""
