from __future__ import annotations

"""Async HTTP helper for outbound JSON lookups (exchange rates, geo-IP).

Every call carries an explicit timeout; transport errors, non-2xx statuses and
undecodable bodies all surface as HttpError so callers handle one type.
"""
import asyncio
from typing import Any, Dict, Optional

import httpx


class HttpError(Exception):
    pass


async def get_json(
    url: str,
    *,
    timeout: float = 2.0,
    retries: int = 0,
    backoff: float = 0.5,
    headers: Optional[Dict[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, Any]:
    last_err: Optional[Exception] = None
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        for attempt in range(retries + 1):
            try:
                resp = await client.get(url, headers=headers)
                if not resp.is_success:
                    raise HttpError(f"HTTP {resp.status_code} for {url}")
                data = resp.json()
                if not isinstance(data, dict):
                    raise HttpError(f"Expected a JSON object from {url}")
                return data
            except (httpx.HTTPError, HttpError, ValueError) as e:  # ValueError for JSON decode
                last_err = e
                if attempt == retries:
                    break
                await asyncio.sleep(backoff * (2**attempt))
    raise HttpError(f"Failed to fetch JSON from {url}: {last_err}")
