"""Request-scoped locale, region and currency detection.

Resolution order:
    1. ``?locale=`` override (also persisted in the ``locale`` cookie)
    2. ``locale`` cookie
    3. country from the client IP (ip-api lookup, public IPs only)
    4. ``Accept-Language`` header
    5. en-US
"""

from __future__ import annotations

import ipaddress
import logging
from typing import List, Optional

import httpx
from fastapi import Request

from app.core.config import Settings
from app.models.constants import (
    COUNTRY_LOCALE_MAP,
    DEFAULT_COUNTRY,
    DEFAULT_LOCALE,
    LOCALE_CONFIG,
)
from app.models.locale import LocaleContext
from app.services.http_client import HttpError, get_json

logger = logging.getLogger("app.locale")

LOCALE_COOKIE = "locale"
LOCALE_COOKIE_MAX_AGE = 365 * 24 * 60 * 60
_IP_HEADERS = ("x-forwarded-for", "x-real-ip", "cf-connecting-ip")


def get_client_ip(request: Request) -> str:
    for header in _IP_HEADERS:
        value = request.headers.get(header)
        if value:
            return value.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "127.0.0.1"


async def detect_country(
    ip: str,
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Optional[str]:
    """Two-letter country for a public IP, or None when it cannot be told."""
    try:
        addr = ipaddress.ip_address(ip)
    except ValueError:
        return None
    if not addr.is_global or not settings.geoip_lookup_enabled:
        return None
    url = f"{settings.geoip_api_base_url.rstrip('/')}/{ip}?fields=countryCode"
    try:
        data = await get_json(
            url,
            timeout=settings.geoip_timeout_seconds,
            headers={"User-Agent": f"{settings.app_name}/{settings.version}"},
            transport=transport,
        )
    except HttpError:
        # Lookup is best effort; not worth a log line per request
        return None
    code = data.get("countryCode")
    return code.upper() if isinstance(code, str) and code else None


def parse_accept_language(header: Optional[str]) -> List[str]:
    if not header:
        return []
    locales = []
    for part in header.split(","):
        tag = part.strip().split(";")[0].strip()
        if tag:
            locales.append(tag)
    return locales


def determine_locale(country: Optional[str], browser_locales: List[str]) -> str:
    if country and country in COUNTRY_LOCALE_MAP:
        return COUNTRY_LOCALE_MAP[country]
    for tag in browser_locales:
        lowered = tag.lower()
        if lowered.startswith("en-gb"):
            return "en-GB"
        if lowered.startswith("en-us") or lowered == "en":
            return "en-US"
    return DEFAULT_LOCALE


def build_context(
    locale: str, client_ip: str, detected_country: Optional[str] = None
) -> LocaleContext:
    info = LOCALE_CONFIG[locale]
    return LocaleContext(
        locale=info.locale,
        region=info.region,
        currency=info.currency,
        client_ip=client_ip,
        detected_country=detected_country,
    )


async def detect_locale_context(
    request: Request, settings: Settings, override: Optional[str] = None
) -> LocaleContext:
    client_ip = get_client_ip(request)
    if override in LOCALE_CONFIG:
        return build_context(override, client_ip)
    cookie_locale = request.cookies.get(LOCALE_COOKIE)
    if cookie_locale in LOCALE_CONFIG:
        return build_context(cookie_locale, client_ip)
    country = await detect_country(client_ip, settings)
    browser_locales = parse_accept_language(request.headers.get("accept-language"))
    locale = determine_locale(country, browser_locales)
    return build_context(locale, client_ip, detected_country=country)


async def locale_context_middleware(request, call_next):  # type: ignore
    settings: Settings = request.app.state.settings
    requested = request.query_params.get("locale")
    override = requested if requested in LOCALE_CONFIG else None
    try:
        context = await detect_locale_context(request, settings, override)
    except Exception:
        logger.exception("locale detection failed, falling back to %s", DEFAULT_LOCALE)
        context = build_context(DEFAULT_LOCALE, get_client_ip(request))
    request.state.locale_context = context

    response = await call_next(request)
    if override:
        response.set_cookie(
            LOCALE_COOKIE,
            override,
            max_age=LOCALE_COOKIE_MAX_AGE,
            httponly=False,
            secure=settings.secure_cookies,
            samesite="lax",
        )
    return response


def get_locale_context(request: Request) -> LocaleContext:
    """FastAPI dependency for the context set by locale_context_middleware."""
    context = getattr(request.state, "locale_context", None)
    if context is None:
        context = build_context(DEFAULT_LOCALE, get_client_ip(request))
    return context


def country_for(context: LocaleContext) -> str:
    return context.detected_country or context.region or DEFAULT_COUNTRY
