from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timedelta, timezone
from itertools import permutations
from typing import Callable, Dict, Iterable, Optional, Protocol

from babel.core import UnknownLocaleError
from babel.numbers import format_currency
from fastapi import Request

from app.db.dal import Database
from app.models.constants import (
    DEFAULT_TAX_POLICY,
    LOCALE_CONFIG,
    REGION_TAX_POLICIES,
    TaxPolicy,
)
from app.models.rates import ExchangeRateRecord, LocalizedPrice, normalize_currency
from app.services.money import ensure_finite, format_with_symbol, round2
from .base import RateFetcher

"""Currency service: cached exchange rates, conversion and localized pricing.

Lookup order for a pair (from, to):
    1. from == to -> 1.0 without touching the store.
    2. Active cached row younger than the TTL -> cached rate.
    3. Fetch from the provider; persist as the pair's only active row.
    4. Provider failed -> cached row even if stale (warning logged).
    5. Nothing cached -> 1.0 (error logged) so pricing never hard-fails.

The service is built once per application (see app.main.create_app) and handed
to routes through a dependency; it keeps no in-process rate memo, every lookup
goes to the store.
"""

logger = logging.getLogger("app.currency")

DEFAULT_CACHE_TTL = timedelta(hours=6)
DEFAULT_SUPPORTED_CURRENCIES = ("USD", "GBP", "EUR")


class SupportsRateStore(Protocol):
    def get_active_rate(self, base: str, target: str) -> Optional[ExchangeRateRecord]: ...

    def replace_active_rate(
        self,
        base: str,
        target: str,
        rate: float,
        provider: str,
        fetched_at: datetime,
    ) -> ExchangeRateRecord: ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def tax_policy_for(region: Optional[str]) -> TaxPolicy:
    return REGION_TAX_POLICIES.get((region or "").upper(), DEFAULT_TAX_POLICY)


def locale_for_region(region: Optional[str]) -> str:
    region = (region or "").upper()
    for info in LOCALE_CONFIG.values():
        if info.region == region:
            return info.babel_locale
    return region


def format_price(amount: float, currency: str, region: Optional[str]) -> str:
    try:
        return format_currency(amount, currency, locale=locale_for_region(region))
    except (UnknownLocaleError, ValueError, TypeError) as e:
        logger.debug("locale formatting failed for %s/%s: %s", currency, region, e)
        return format_with_symbol(amount, currency)


class CurrencyService:
    def __init__(
        self,
        store: SupportsRateStore,
        fetcher: RateFetcher,
        *,
        cache_ttl: timedelta = DEFAULT_CACHE_TTL,
        supported_currencies: Iterable[str] = DEFAULT_SUPPORTED_CURRENCIES,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._store = store
        self._fetcher = fetcher
        self._ttl = cache_ttl
        self._supported = tuple(normalize_currency(c) for c in supported_currencies)
        self._clock = clock

    # Internal --------------------------------------------------
    def _is_fresh(self, record: ExchangeRateRecord) -> bool:
        # rows stamped in the future (clock skew) count as stale
        age = self._clock() - record.last_updated
        return timedelta(0) <= age < self._ttl

    def _read_cached(self, base: str, target: str) -> Optional[ExchangeRateRecord]:
        try:
            return self._store.get_active_rate(base, target)
        except (sqlite3.Error, ValueError):
            # ValueError covers rows that no longer validate as ExchangeRateRecord
            logger.exception("failed to read cached exchange rate %s->%s", base, target)
            return None

    def _persist(self, base: str, target: str, rate: float) -> None:
        try:
            self._store.replace_active_rate(
                base, target, rate, self._fetcher.provider_name, self._clock()
            )
        except (sqlite3.Error, ValueError):
            # Rate still served for this request; the next one re-fetches
            logger.exception("failed to update exchange rate cache %s->%s", base, target)

    # Public API -----------------------------------------------
    async def get_exchange_rate(self, from_currency: str, to_currency: str) -> float:
        base = normalize_currency(from_currency)
        target = normalize_currency(to_currency)
        if base == target:
            return 1.0

        cached = self._read_cached(base, target)
        if cached is not None and self._is_fresh(cached):
            return cached.rate

        try:
            fresh = await self._fetcher.fetch_rate(base, target)
        except Exception as e:  # provider problems never reach pricing callers
            if cached is not None:
                logger.warning(
                    "using expired exchange rate for %s->%s (%s)", base, target, e
                )
                return cached.rate
            logger.error(
                "no exchange rate available for %s->%s, using 1:1 (%s)", base, target, e
            )
            return 1.0

        self._persist(base, target, fresh)
        return fresh

    async def convert_currency(
        self, amount: float, from_currency: str, to_currency: str
    ) -> float:
        value = ensure_finite(amount)
        rate = await self.get_exchange_rate(from_currency, to_currency)
        return round2(value * rate)

    async def get_localized_pricing(
        self,
        base_price: float,
        base_currency: str,
        target_currency: str,
        region: Optional[str],
    ) -> LocalizedPrice:
        target = normalize_currency(target_currency)
        converted = await self.convert_currency(base_price, base_currency, target)
        policy = tax_policy_for(region)
        final = converted * (1 + policy.rate) if policy.includes_tax else converted
        price = round2(final)
        return LocalizedPrice(
            price=price,
            currency=target,
            formatted=format_price(price, target, region),
            includes_tax=policy.includes_tax,
            tax_rate=policy.rate,
        )

    async def initialize_rates(self) -> Dict[str, Optional[float]]:
        """Prime the cache for every ordered pair of supported currencies."""
        summary: Dict[str, Optional[float]] = {}
        for base, target in permutations(self._supported, 2):
            key = f"{base}->{target}"
            try:
                summary[key] = await self.get_exchange_rate(base, target)
                logger.info("initialized %s exchange rate", key)
            except Exception:
                summary[key] = None
                logger.exception("failed to initialize %s exchange rate", key)
        return summary


def get_currency_service(request: Request) -> CurrencyService:
    """FastAPI dependency returning the service built by create_app."""
    return request.app.state.currency_service


def get_db(request: Request) -> Database:
    """FastAPI dependency opening the store configured for this application."""
    return Database(request.app.state.settings.db_path)
