"""Seed sample airports, lots and per-locale pricing into the configured DB.

Rates come from the configured provider; if it is unreachable the currency
service degrades (stale cache or 1:1) and pricing is still written.

Usage: python scripts/seed_sample_data.py
"""

import asyncio
import os
import sys
from pprint import pprint


async def run():
    from app.core.config import get_settings
    from app.db.dal import Database
    from app.db.seed import seed_sample_data
    from app.main import build_currency_service
    from app.services.pricing import populate_lot_pricing

    settings = get_settings()
    created = seed_sample_data(settings.db_path)
    db = Database(settings.db_path)
    service = build_currency_service(settings)
    out = {}
    for lot_id, daily_usd in created:
        out[lot_id] = await populate_lot_pricing(db, service, lot_id, daily_usd, "USD")
    pprint({"lots_priced": out, "active_rates": [r.model_dump() for r in db.list_active_rates()]})


if __name__ == "__main__":
    sys.path.append(os.getcwd())
    asyncio.run(run())
