from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def normalize_currency(code: Optional[str]) -> str:
    """Return an upper-cased three letter currency code or raise ValueError."""
    if code is None:
        raise ValueError("currency code is required")
    value = code.strip().upper()
    if len(value) != 3 or not value.isascii() or not value.isalpha():
        raise ValueError(f"invalid currency code '{code}'")
    return value


class ExchangeRateRecord(BaseModel):
    """One row of the exchange_rates cache table."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[int] = None
    base_currency: str
    target_currency: str
    rate: float = Field(..., gt=0)
    provider: str
    last_updated: datetime
    is_active: bool = True

    @field_validator("base_currency", "target_currency")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        return normalize_currency(v)

    @classmethod
    def from_row(cls, row: dict) -> "ExchangeRateRecord":
        return cls(
            id=row["id"],
            base_currency=row["base_currency"],
            target_currency=row["target_currency"],
            rate=float(row["rate"]),
            provider=row["provider"],
            last_updated=_parse_timestamp(row["last_updated"]),
            is_active=bool(row["is_active"]),
        )


class LocalizedPrice(BaseModel):
    """Price converted to a target currency with region tax presentation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    price: float
    currency: str
    formatted: str
    includes_tax: bool
    tax_rate: float
