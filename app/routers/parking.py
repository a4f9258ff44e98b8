from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.db.dal import Database
from app.models.locale import LocaleContext
from app.models.parking import LocalizedParkingLot
from app.services.locale import get_locale_context
from app.services.pricing import localize_lot, localize_lots
from app.services.rates.currency_service import get_db

router = APIRouter(prefix="/api/parking", tags=["parking"])

logger = logging.getLogger("app.parking")


def _parse_date(value: str, label: str) -> date:
    try:
        return date.fromisoformat(value[:10])
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid {label}: {value}") from e


@router.get(
    "/search",
    response_model=List[LocalizedParkingLot],
    summary="Search parking near an airport, localized to the requester",
)
async def search_parking(
    airport_code: Optional[str] = Query(None, alias="airportCode"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    context: LocaleContext = Depends(get_locale_context),
    db: Database = Depends(get_db),
):
    if not airport_code or not airport_code.strip():
        raise HTTPException(status_code=400, detail="Airport code is required")
    if not start_date:
        raise HTTPException(status_code=400, detail="Start date is required")
    if not end_date:
        raise HTTPException(status_code=400, detail="End date is required")
    start = _parse_date(start_date, "start date")
    end = _parse_date(end_date, "end date")
    if end < start:
        raise HTTPException(status_code=400, detail="End date must not precede start date")

    rows = db.search_parking_lots(airport_code.strip())
    lots = localize_lots(db, rows, context)
    logger.info(
        "parking search %s found %d lots (%s/%s)",
        airport_code.strip().upper(),
        len(lots),
        context.currency,
        context.region,
    )
    return lots


@router.get(
    "/{lot_id}",
    response_model=LocalizedParkingLot,
    summary="Parking lot details, localized to the requester",
)
async def get_parking_lot(
    lot_id: int,
    context: LocaleContext = Depends(get_locale_context),
    db: Database = Depends(get_db),
):
    row = db.get_parking_lot(lot_id)
    if not row:
        raise HTTPException(status_code=404, detail="Parking lot not found")
    return localize_lot(db, row, context)
