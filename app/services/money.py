"""Money / rounding helpers.

Centralized so conversion, localized pricing and pricing pre-population use
identical rounding semantics (half-up to 2 decimal places).
"""

from __future__ import annotations
import math
from decimal import Decimal, ROUND_HALF_UP

from app.models.constants import CURRENCY_SYMBOLS


def round2(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def ensure_finite(amount: float) -> float:
    value = float(amount)
    if not math.isfinite(value):
        raise ValueError(f"amount must be a finite number, got {amount!r}")
    return value


def format_with_symbol(amount: float, currency: str) -> str:
    """Plain '<symbol><amount>' rendering used when locale formatting fails."""
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    return f"{symbol}{Decimal(str(round2(amount))):.2f}"
