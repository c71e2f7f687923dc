"""Custom exceptions for the storefront core."""
from __future__ import annotations


class StorefrontException(Exception):
    """Base exception for all storefront errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationException(StorefrontException):
    """Input validation errors."""

    pass


class CheckoutValidationError(ValidationException):
    """A checkout form field failed validation."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class PaymentException(StorefrontException):
    """Payment provider errors."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(message)
        self.provider = provider


class PaymentCancelledException(PaymentException):
    """The customer closed the payment dialog."""

    def __init__(self, provider: str, message: str = "Payment cancelled by user") -> None:
        super().__init__(provider, message)


class ApiException(StorefrontException):
    """REST API returned an error response or could not be reached."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status


class ConfigurationException(StorefrontException):
    """Configuration errors."""

    pass

