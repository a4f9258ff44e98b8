from __future__ import annotations

"""Concrete rate fetchers and factory."""
import logging
import math
from typing import Dict, Optional

import httpx

from app.core.config import Settings
from app.services.http_client import HttpError, get_json
from .base import RateFetchError, RateFetcher

logger = logging.getLogger("app.rates.fetcher")


class ExchangeRateApiFetcher(RateFetcher):
    """exchangerate-api.com style provider: GET {base_url}/{BASE} -> {"rates": {...}}."""

    provider_name = "exchangerate-api"

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 2.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._transport = transport

    async def fetch_rates(self, base_currency: str) -> Dict[str, float]:  # type: ignore[override]
        url = f"{self._base_url}/{base_currency}"
        try:
            data = await get_json(url, timeout=self._timeout, transport=self._transport)
        except HttpError as e:
            logger.warning("exchange rate request failed for %s: %s", base_currency, e)
            raise RateFetchError(f"Exchange rate API error: {e}") from e
        raw = data.get("rates")
        if not isinstance(raw, dict):
            raise RateFetchError(f"Exchange rate API returned no rates for {base_currency}")
        rates: Dict[str, float] = {}
        for code, value in raw.items():
            try:
                rate = float(value)
            except (TypeError, ValueError):
                continue
            # Skip zero / negative quotes; treated as missing by fetch_rate
            if math.isfinite(rate) and rate > 0:
                rates[str(code).upper()] = rate
        return rates


_FETCHER_REGISTRY = {
    "exchangerate-api": ExchangeRateApiFetcher,
}


def make_rate_fetcher(settings: Settings) -> RateFetcher:
    cls = _FETCHER_REGISTRY.get(settings.exchange_rate_provider)
    if not cls:
        raise ValueError(f"Unknown rate provider kind '{settings.exchange_rate_provider}'")
    return cls(
        base_url=settings.exchange_api_base_url,
        timeout_seconds=settings.exchange_rate_timeout_seconds,
    )
