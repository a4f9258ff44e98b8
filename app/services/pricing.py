"""Locale-aware presentation of parking lots and pricing pre-population.

Search results never convert prices on the fly: each lot carries pricing rows
per (currency, region) written ahead of time by ``populate_lot_pricing``.
Search only formats the distance and looks the matching row up.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from app.db.dal import Database
from app.models.constants import LOCALE_CONFIG, MILES_TO_KM
from app.models.locale import LocaleContext
from app.models.parking import LocalizedParkingLot, ParkingLotOut, ParkingPricingOut
from app.services.rates.currency_service import CurrencyService

logger = logging.getLogger("app.pricing")


def format_distance(distance_miles: Optional[float], region: str) -> str:
    miles = float(distance_miles or 0)
    if region == "GB":
        return f"{miles * MILES_TO_KM:.1f} km"
    return f"{miles:.1f} miles"


def _lookup_pricing(
    db: Database, lot_id: int, context: LocaleContext
) -> Optional[ParkingPricingOut]:
    try:
        row = db.get_parking_pricing(lot_id, context.currency, context.region)
    except sqlite3.Error:
        logger.exception("pricing lookup failed for lot %s", lot_id)
        return None
    return ParkingPricingOut.from_row(row) if row else None


def localize_lot(
    db: Database, row: Dict[str, Any], context: LocaleContext
) -> LocalizedParkingLot:
    lot = ParkingLotOut.from_row(row)
    return LocalizedParkingLot(
        **lot.model_dump(),
        distance_formatted=format_distance(lot.distance_to_terminal, context.region),
        currency=context.currency,
        region=context.region,
        locale=context.locale,
        pricing=_lookup_pricing(db, lot.id, context),
    )


def localize_lots(
    db: Database, rows: List[Dict[str, Any]], context: LocaleContext
) -> List[LocalizedParkingLot]:
    return [localize_lot(db, row, context) for row in rows]


async def populate_lot_pricing(
    db: Database,
    currency_service: CurrencyService,
    lot_id: int,
    base_price: float,
    base_currency: str = "USD",
    price_type: str = "daily",
) -> List[int]:
    """Write one active pricing row per supported locale for a lot.

    Returns the ids of the inserted rows.
    """
    if db.get_parking_lot(lot_id) is None:
        raise ValueError(f"parking lot {lot_id} not found")
    inserted = []
    for info in LOCALE_CONFIG.values():
        localized = await currency_service.get_localized_pricing(
            base_price, base_currency, info.currency, info.region
        )
        pricing_id = db.replace_parking_pricing(
            lot_id=lot_id,
            base_price=base_price,
            currency=localized.currency,
            localized_price=localized.price,
            tax_rate=localized.tax_rate,
            region=info.region,
            price_type=price_type,
        )
        inserted.append(pricing_id)
        logger.info(
            "priced lot %s for %s/%s at %s",
            lot_id,
            localized.currency,
            info.region,
            localized.formatted,
        )
    return inserted
