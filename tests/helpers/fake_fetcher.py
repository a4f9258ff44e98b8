from __future__ import annotations

from typing import Dict, List, Optional, Set, Tuple

from app.services.rates.base import RateFetchError, RateFetcher


class FakeRateFetcher(RateFetcher):
    """In-memory fetcher recording every (base, target) it is asked for."""

    provider_name = "fake-provider"

    def __init__(
        self,
        rates: Optional[Dict[str, Dict[str, float]]] = None,
        failing_bases: Optional[Set[str]] = None,
        fail_all: bool = False,
    ):
        self.rates = rates or {}
        self.failing_bases = failing_bases or set()
        self.fail_all = fail_all
        self.calls: List[Tuple[str, str]] = []

    async def fetch_rates(self, base_currency: str) -> Dict[str, float]:
        if self.fail_all or base_currency in self.failing_bases:
            raise RateFetchError(f"provider down for {base_currency}")
        return dict(self.rates.get(base_currency, {}))

    async def fetch_rate(self, base_currency: str, target_currency: str) -> float:
        self.calls.append((base_currency, target_currency))
        return await super().fetch_rate(base_currency, target_currency)


FULL_RATES: Dict[str, Dict[str, float]] = {
    "USD": {"GBP": 0.8, "EUR": 0.9},
    "GBP": {"USD": 1.25, "EUR": 1.125},
    "EUR": {"USD": 1.111111, "GBP": 0.888889},
}
