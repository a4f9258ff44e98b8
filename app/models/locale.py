from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class LocaleInfo:
    locale: str
    currency: str
    region: str
    timezone: str
    distance_unit: str  # 'miles' | 'km'

    @property
    def babel_locale(self) -> str:
        return self.locale.replace("-", "_")


@dataclass(frozen=True)
class LocaleContext:
    """Locale, region and currency resolved for a single request."""

    locale: str
    region: str
    currency: str
    client_ip: str
    detected_country: Optional[str] = None
