from fastapi import APIRouter, Depends

from app.models.locale import LocaleContext
from app.services.locale import country_for, get_locale_context

router = APIRouter(prefix="/api/geo", tags=["geo"])


@router.get("/detect", summary="Locale, region and currency detected for this request")
async def detect(context: LocaleContext = Depends(get_locale_context)):
    return {
        "country": country_for(context),
        "region": context.region,
        "currency": context.currency,
        "detectedLocale": context.locale,
        "clientIP": context.client_ip,
    }
