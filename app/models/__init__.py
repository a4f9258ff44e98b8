"""Pydantic domain models for the airport parking pricing service."""

from .constants import (
    CURRENCY_SYMBOLS,
    LOCALE_CONFIG,
    REGION_TAX_POLICIES,
)  # re-export
from .locale import LocaleContext, LocaleInfo
from .parking import LocalizedParkingLot, ParkingLotOut, ParkingPricingOut
from .rates import ExchangeRateRecord, LocalizedPrice, normalize_currency

__all__ = [
    "CURRENCY_SYMBOLS",
    "LOCALE_CONFIG",
    "REGION_TAX_POLICIES",
    "LocaleContext",
    "LocaleInfo",
    "LocalizedParkingLot",
    "ParkingLotOut",
    "ParkingPricingOut",
    "ExchangeRateRecord",
    "LocalizedPrice",
    "normalize_currency",
]
