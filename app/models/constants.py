"""Domain constants for pricing, currencies and locales.

Kept as plain tables; none of these are editable at runtime.
"""

from dataclasses import dataclass
from typing import Dict

from .locale import LocaleInfo

DEFAULT_LOCALE = "en-US"
DEFAULT_COUNTRY = "US"

LOCALE_CONFIG: Dict[str, LocaleInfo] = {
    "en-US": LocaleInfo(
        locale="en-US",
        currency="USD",
        region="US",
        timezone="America/New_York",
        distance_unit="miles",
    ),
    "en-GB": LocaleInfo(
        locale="en-GB",
        currency="GBP",
        region="GB",
        timezone="Europe/London",
        distance_unit="km",
    ),
}

COUNTRY_LOCALE_MAP: Dict[str, str] = {
    "US": "en-US",
    "GB": "en-GB",
    "UK": "en-GB",  # alternative country code
}

# Used only when locale-aware formatting fails
CURRENCY_SYMBOLS: Dict[str, str] = {
    "GBP": "£",
    "USD": "$",
}


@dataclass(frozen=True)
class TaxPolicy:
    rate: float
    includes_tax: bool


REGION_TAX_POLICIES: Dict[str, TaxPolicy] = {
    "GB": TaxPolicy(0.20, True),  # VAT included in price
    "US": TaxPolicy(0.0875, False),  # sales tax shown separately
}
DEFAULT_TAX_POLICY = TaxPolicy(0.0, True)

MILES_TO_KM = 1.60934
