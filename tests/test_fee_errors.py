import pytest

from stellaraid.fee_errors import (
    CacheUnavailableError,
    CurrencyConversionError,
    FeeConfigError,
    FeeError,
    FeeNetworkError,
    FeeParseError,
    FeeTimeoutError,
    HorizonUnavailableError,
    InvalidCurrencyError,
    InvalidFeeValueError,
    InvalidOperationCountError,
    OtherFeeError,
)


def test_error_display():
    error = HorizonUnavailableError("connection refused")
    assert str(error) == "Horizon unavailable: connection refused"


def test_invalid_fee_display():
    error = InvalidFeeValueError("negative fee")
    assert str(error) == "Invalid fee value: negative fee"


def test_timeout_display():
    assert str(FeeTimeoutError()) == "Timeout while fetching fees"


def test_currency_conversion_error():
    error = CurrencyConversionError("BTC rate unavailable")
    assert str(error) == "Currency conversion failed: BTC rate unavailable"


def test_invalid_currency_error():
    assert str(InvalidCurrencyError("XYZ")) == "Invalid currency: XYZ"


@pytest.mark.parametrize(
    "cls, expected",
    [
        (CacheUnavailableError, "Cache unavailable: msg"),
        (InvalidOperationCountError, "Invalid operation count: msg"),
        (FeeNetworkError, "Network error: msg"),
        (FeeParseError, "Parse error: msg"),
        (FeeConfigError, "Invalid configuration: msg"),
        (OtherFeeError, "Fee error: msg"),
    ],
)
def test_other_displays(cls, expected):
    assert str(cls("msg")) == expected


def test_errors_share_base_class():
    error = InvalidOperationCountError("bad")
    assert isinstance(error, FeeError)
    assert error.message == "bad"
    assert str(error) == "Invalid operation count: bad"