"""Fetching the current base fee from a Horizon server."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from .fee_errors import (
    FeeNetworkError,
    FeeParseError,
    FeeTimeoutError,
    HorizonUnavailableError,
    InvalidFeeValueError,
)

logger = logging.getLogger(__name__)

PUBLIC_HORIZON_URL = "https://horizon.stellar.org"

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


def _as_i64(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    if not _I64_MIN <= value <= _I64_MAX:
        return None
    return value


class HorizonFeeFetcher:
    """Reads the base fee of the latest ledger from Horizon."""

    def __init__(self, server_url: str, timeout_secs: float = 30) -> None:
        self.server_url = server_url
        self.timeout_secs = timeout_secs

    @classmethod
    def public_horizon(cls) -> HorizonFeeFetcher:
        """A fetcher for the public Horizon server."""
        return cls(PUBLIC_HORIZON_URL)

    async def fetch_base_fee(self) -> int:
        """Fetch the current base fee in stroops."""
        url = f"{self.server_url}/ledgers?sort=desc&limit=1"
        logger.info("Fetching base fee from Horizon: %s", url)

        try:
            async with httpx.AsyncClient(timeout=self.timeout_secs) as client:
                response = await client.get(url)
        except httpx.TimeoutException:
            raise FeeTimeoutError() from None
        except httpx.ConnectError:
            raise HorizonUnavailableError("Connection failed") from None
        except httpx.HTTPError as exc:
            raise FeeNetworkError(str(exc)) from exc

        if not response.is_success:
            status = f"{response.status_code} {response.reason_phrase}".strip()
            raise HorizonUnavailableError(f"HTTP status: {status}")

        try:
            body = response.text
        except (UnicodeDecodeError, LookupError) as exc:
            raise FeeParseError(f"Failed to read response body: {exc}") from exc

        return self.parse_base_fee(body)

    def parse_base_fee(self, response_body: str) -> int:
        """Extract a positive base fee from a ledgers response body."""
        try:
            parsed = json.loads(response_body)
        except json.JSONDecodeError as exc:
            raise FeeParseError(str(exc)) from exc

        embedded = parsed.get("_embedded") if isinstance(parsed, dict) else None
        records = embedded.get("records") if isinstance(embedded, dict) else None
        if not isinstance(records, list) or not records:
            raise FeeParseError("No ledger records in response")

        first = records[0]
        base_fee = _as_i64(first.get("base_fee_rate")) if isinstance(first, dict) else None
        if base_fee is None:
            raise FeeParseError("base_fee_rate field missing or invalid")

        if base_fee < 0:
            raise InvalidFeeValueError("base fee is negative")
        if base_fee == 0:
            raise InvalidFeeValueError("base fee is zero")

        logger.info("Fetched base fee: %d stroops", base_fee)
        return base_fee