from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.db.dal import Database
from app.models.locale import LocaleContext
from app.models.rates import ExchangeRateRecord, LocalizedPrice, normalize_currency
from app.services.locale import get_locale_context
from app.services.rates.currency_service import (
    CurrencyService,
    get_currency_service,
    get_db,
)

"""Currency router.

Endpoints:
    - GET /api/currency/convert       -> convert an amount between two currencies
    - GET /api/currency/localize      -> converted price with region tax presentation
    - GET /api/currency/rates         -> active cached exchange rates
    - GET /api/currency/rates/{base}/{target}/history -> all rows for a pair

Conversion never fails because the provider is down (the service degrades to
stale or 1:1 rates); a 400 here always means the caller sent bad input.
"""

router = APIRouter(prefix="/api/currency", tags=["currency"])

logger = logging.getLogger("app.currency.api")

CONVERSION_FAILED = "Currency conversion failed"


@router.get("/convert", summary="Convert an amount between currencies")
async def convert_currency(
    from_currency: Optional[str] = Query(None, alias="from"),
    to_currency: Optional[str] = Query(None, alias="to"),
    amount: Optional[str] = Query(None),
    svc: CurrencyService = Depends(get_currency_service),
):
    try:
        original = float(amount)  # type: ignore[arg-type]
        base = normalize_currency(from_currency)
        target = normalize_currency(to_currency)
        converted = await svc.convert_currency(original, base, target)
    except Exception as e:
        logger.warning("currency conversion rejected: %s", e)
        raise HTTPException(status_code=400, detail=CONVERSION_FAILED) from e
    return {
        "convertedAmount": converted,
        "from": base,
        "to": target,
        "originalAmount": original,
    }


@router.get(
    "/localize",
    response_model=LocalizedPrice,
    summary="Localized price for the requester's currency and region",
)
async def localize_price(
    amount: Optional[str] = Query(None),
    from_currency: str = Query("USD", alias="from"),
    to_currency: Optional[str] = Query(None, alias="to"),
    region: Optional[str] = Query(None),
    context: LocaleContext = Depends(get_locale_context),
    svc: CurrencyService = Depends(get_currency_service),
):
    try:
        return await svc.get_localized_pricing(
            float(amount),  # type: ignore[arg-type]
            from_currency,
            to_currency or context.currency,
            (region or context.region).upper(),
        )
    except Exception as e:
        logger.warning("price localization rejected: %s", e)
        raise HTTPException(status_code=400, detail=CONVERSION_FAILED) from e


@router.get(
    "/rates",
    response_model=List[ExchangeRateRecord],
    summary="List active cached exchange rates",
)
async def list_active_rates(db: Database = Depends(get_db)):
    return db.list_active_rates()


@router.get(
    "/rates/{base}/{target}/history",
    response_model=List[ExchangeRateRecord],
    summary="Cached rate history for a currency pair, newest first",
)
async def rate_history(base: str, target: str, db: Database = Depends(get_db)):
    try:
        base, target = normalize_currency(base), normalize_currency(target)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return db.list_rate_history(base, target)
