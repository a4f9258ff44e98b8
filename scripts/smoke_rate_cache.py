"""Smoke script for the exchange rate cache.

Demonstrates against a temp DB with the real provider:
 1. First conversion fetches USD->GBP and stores it as the active row.
 2. Second conversion within the TTL reuses the stored row (same id).
 3. Backdating the row past the TTL forces a refresh; the old row stays as history.

NOTE: This is a lightweight diagnostic and not a formal test.
"""

import os
import sqlite3
import sys
import tempfile
from pprint import pprint


def run():
    from fastapi.testclient import TestClient

    from app.core.config import Settings
    from app.main import create_app

    with tempfile.TemporaryDirectory() as d:
        settings = Settings(data_dir=d, initialize_rates_on_startup=False)
        client = TestClient(create_app(settings_override=settings))
        out = {}
        params = {"from": "USD", "to": "GBP", "amount": "10"}

        out["initial"] = client.get("/api/currency/convert", params=params).json()
        out["rates_after_initial"] = client.get("/api/currency/rates").json()
        out["second"] = client.get("/api/currency/convert", params=params).json()

        with sqlite3.connect(settings.db_path) as conn:
            conn.execute(
                "UPDATE exchange_rates SET last_updated = '2000-01-01T00:00:00+00:00'"
            )
        out["forced_refresh"] = client.get("/api/currency/convert", params=params).json()
        out["history"] = client.get("/api/currency/rates/USD/GBP/history").json()
        pprint(out)


if __name__ == "__main__":
    sys.path.append(os.getcwd())
    run()
