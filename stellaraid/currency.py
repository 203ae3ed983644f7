"""Currencies, exchange rates and conversion of fees between them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from .fee_errors import CurrencyConversionError, InvalidCurrencyError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Currency(Enum):
    """Currencies in which a fee can be shown."""

    XLM = "XLM"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    JPY = "JPY"
    CNY = "CNY"
    INR = "INR"
    BRL = "BRL"
    AUD = "AUD"
    CAD = "CAD"

    @property
    def code(self) -> str:
        """The three-letter currency code."""
        return self.value

    @property
    def symbol(self) -> str:
        """The symbol used when displaying amounts."""
        return _SYMBOLS[self]

    @classmethod
    def from_code(cls, code: str) -> Currency:
        """Look up a currency by code, ignoring case."""
        try:
            return cls(code.upper())
        except ValueError:
            raise InvalidCurrencyError(code) from None


_SYMBOLS = {
    Currency.XLM: "XLM",
    Currency.USD: "$",
    Currency.EUR: "€",
    Currency.GBP: "£",
    Currency.JPY: "¥",
    Currency.CNY: "¥",
    Currency.INR: "₹",
    Currency.BRL: "R$",
    Currency.AUD: "A$",
    Currency.CAD: "C$",
}


@dataclass
class ExchangeRate:
    """One unit of ``base`` is worth ``rate`` units of ``target``."""

    base: Currency
    target: Currency
    rate: float
    fetched_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if self.rate <= 0.0:
            raise CurrencyConversionError("exchange rate must be positive")

    def age_seconds(self) -> int:
        """Whole seconds since the rate was recorded."""
        return int((_utcnow() - self.fetched_at).total_seconds())

    def is_fresh(self, max_age_seconds: int) -> bool:
        """Whether the rate is younger than the given age."""
        return self.age_seconds() < max_age_seconds


class CurrencyConverter:
    """Converts amounts using exchange rates that have been set on it."""

    def __init__(self) -> None:
        self._rates: dict[tuple[Currency, Currency], ExchangeRate] = {}

    def set_rate(self, base: Currency, target: Currency, rate: float) -> None:
        """Record the rate for a currency pair."""
        self._rates[(base, target)] = ExchangeRate(base, target, rate)

    def get_rate(self, base: Currency, target: Currency) -> float:
        """The rate for a pair; 1.0 when both currencies are the same."""
        if base == target:
            return 1.0
        try:
            return self._rates[(base, target)].rate
        except KeyError:
            raise CurrencyConversionError(
                f"rate not available for {base.code}/{target.code}"
            ) from None

    def convert(self, amount: float, from_currency: Currency, to_currency: Currency) -> float:
        """Convert an amount from one currency to another."""
        if from_currency == to_currency:
            return amount
        if amount < 0.0:
            raise CurrencyConversionError("amount cannot be negative")
        return amount * self.get_rate(from_currency, to_currency)

    def convert_xlm_fee(self, xlm_amount: float, target: Currency) -> float:
        """Convert a fee in XLM to the target currency."""
        if target == Currency.XLM:
            return xlm_amount
        return xlm_amount * self.get_rate(Currency.XLM, target)

    def clear(self) -> None:
        """Forget all rates."""
        self._rates.clear()

    def has_rate(self, base: Currency, target: Currency) -> bool:
        """Whether a rate is known for the pair."""
        return base == target or (base, target) in self._rates

    def __len__(self) -> int:
        return len(self._rates)


@dataclass
class FormattedAmount:
    """An amount together with the symbol of its currency."""

    amount: float
    currency: Currency
    symbol: str = field(init=False)

    def __post_init__(self) -> None:
        self.symbol = self.currency.symbol

    def format(self, precision: int = 8) -> str:
        """The amount prefixed by its symbol, with the given decimal places."""
        return f"{self.symbol} {self.amount:.{precision}f}"

    def __str__(self) -> str:
        return self.format(8)