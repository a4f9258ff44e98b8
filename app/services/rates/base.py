from __future__ import annotations

"""Rate fetcher abstraction.

A fetcher asks an external provider for every rate it knows against one base
currency. The currency service only depends on this interface, so tests and
alternative providers plug in without touching cache logic.
"""
import math
from abc import ABC, abstractmethod
from typing import Dict


class RateFetchError(Exception):
    """Provider unavailable, malformed response, or missing target rate."""


class RateFetcher(ABC):
    provider_name: str = "unknown"

    @abstractmethod
    async def fetch_rates(self, base_currency: str) -> Dict[str, float]:
        """Return target currency -> multiplier for 1 unit of base_currency."""
        raise NotImplementedError

    async def fetch_rate(self, base_currency: str, target_currency: str) -> float:
        """Single rate for a pair; anything but a positive finite number is an error."""
        rates = await self.fetch_rates(base_currency)
        value = rates.get(target_currency)
        if value is None:
            raise RateFetchError(
                f"Exchange rate not available for {base_currency} to {target_currency}"
            )
        try:
            rate = float(value)
        except (TypeError, ValueError) as e:
            raise RateFetchError(
                f"Non-numeric exchange rate {value!r} for {base_currency} to {target_currency}"
            ) from e
        if not math.isfinite(rate) or rate <= 0:
            raise RateFetchError(
                f"Invalid exchange rate {value!r} for {base_currency} to {target_currency}"
            )
        return rate
