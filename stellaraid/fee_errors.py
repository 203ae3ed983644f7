"""Errors raised while estimating transaction fees."""

from __future__ import annotations


class FeeError(Exception):
    """Base class for every fee estimation failure."""

    prefix = "Fee error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.prefix}: {self.message}"


class HorizonUnavailableError(FeeError):
    """The base fee could not be fetched from Horizon."""

    prefix = "Horizon unavailable"


class InvalidFeeValueError(FeeError, ValueError):
    """A fee value was invalid (negative, zero or overflowing)."""

    prefix = "Invalid fee value"


class CurrencyConversionError(FeeError):
    """A currency conversion could not be performed."""

    prefix = "Currency conversion failed"


class InvalidCurrencyError(FeeError, ValueError):
    """An unknown currency code was given."""

    prefix = "Invalid currency"


class CacheUnavailableError(FeeError):
    """The cache was expired or empty."""

    prefix = "Cache unavailable"


class InvalidOperationCountError(FeeError, ValueError):
    """The operation count was not at least one."""

    prefix = "Invalid operation count"


class FeeNetworkError(FeeError):
    """A network failure happened while fetching fees."""

    prefix = "Network error"


class FeeParseError(FeeError):
    """A Horizon response could not be parsed."""

    prefix = "Parse error"


class FeeConfigError(FeeError):
    """The fee configuration was invalid."""

    prefix = "Invalid configuration"


class FeeTimeoutError(FeeError):
    """Fetching fees took too long."""

    def __init__(self) -> None:
        super().__init__("")

    def __str__(self) -> str:
        return "Timeout while fetching fees"


class OtherFeeError(FeeError):
    """Any other fee failure."""

    prefix = "Fee error"