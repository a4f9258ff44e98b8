from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ParkingPricingOut(_CamelModel):
    id: int
    lot_id: int
    price_type: str
    base_price: float
    currency: str
    localized_price: float
    tax_rate: float
    region: str
    is_active: bool

    @classmethod
    def from_row(cls, row: dict) -> "ParkingPricingOut":
        return cls(
            id=row["id"],
            lot_id=row["lot_id"],
            price_type=row["price_type"],
            base_price=row["base_price"],
            currency=row["currency"],
            localized_price=row["localized_price"],
            tax_rate=row["tax_rate"],
            region=row["region"],
            is_active=bool(row["is_active"]),
        )


class ParkingLotOut(_CamelModel):
    id: int
    airport_id: int
    airport_code: str
    name: str
    address: str
    distance_to_terminal: Optional[float] = None  # miles
    shuttle_frequency_minutes: Optional[int] = None
    is_shuttle_included: bool = True
    is_covered: bool = False
    has_ev_charging: bool = False
    has_security_patrol: bool = False
    has_cctv: bool = False
    total_spaces: Optional[int] = None
    rating: Optional[float] = None

    @classmethod
    def from_row(cls, row: dict) -> "ParkingLotOut":
        return cls(
            id=row["id"],
            airport_id=row["airport_id"],
            airport_code=row["airport_code"],
            name=row["name"],
            address=row["address"],
            distance_to_terminal=row.get("distance_to_terminal"),
            shuttle_frequency_minutes=row.get("shuttle_frequency_minutes"),
            is_shuttle_included=bool(row.get("is_shuttle_included", 1)),
            is_covered=bool(row.get("is_covered", 0)),
            has_ev_charging=bool(row.get("has_ev_charging", 0)),
            has_security_patrol=bool(row.get("has_security_patrol", 0)),
            has_cctv=bool(row.get("has_cctv", 0)),
            total_spaces=row.get("total_spaces"),
            rating=row.get("rating"),
        )


class LocalizedParkingLot(ParkingLotOut):
    distance_formatted: str
    currency: str
    region: str
    locale: str
    pricing: Optional[ParkingPricingOut] = None
