"""Database schema DDL definitions and initialization utilities.

Tables:
  - airports: airport reference data (IATA code, country)
  - parking_lots: lots near an airport; distance_to_terminal is in miles
  - parking_pricing: pre-populated prices per (lot, currency, region)
  - exchange_rates: cached currency-pair rates; superseded rows are kept
    with is_active = 0
  - metadata: key/value store (schema_version)
"""

from __future__ import annotations
import sqlite3
from typing import Sequence
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

AIRPORTS_DDL = f"""
CREATE TABLE IF NOT EXISTS airports (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    code TEXT NOT NULL UNIQUE, -- 'LHR', 'JFK'
    name TEXT NOT NULL,
    city TEXT NOT NULL,
    country TEXT NOT NULL,
    country_code TEXT NOT NULL DEFAULT 'US',
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

PARKING_LOTS_DDL = f"""
CREATE TABLE IF NOT EXISTS parking_lots (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    airport_id INTEGER NOT NULL,
    name TEXT NOT NULL,
    address TEXT NOT NULL,
    distance_to_terminal REAL, -- miles
    shuttle_frequency_minutes INTEGER,
    is_shuttle_included INTEGER NOT NULL DEFAULT 1,
    is_covered INTEGER NOT NULL DEFAULT 0,
    has_ev_charging INTEGER NOT NULL DEFAULT 0,
    has_security_patrol INTEGER NOT NULL DEFAULT 0,
    has_cctv INTEGER NOT NULL DEFAULT 0,
    total_spaces INTEGER,
    rating REAL,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (airport_id) REFERENCES airports(id) ON DELETE CASCADE
);
"""

PARKING_PRICING_DDL = f"""
CREATE TABLE IF NOT EXISTS parking_pricing (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    lot_id INTEGER NOT NULL,
    price_type TEXT NOT NULL DEFAULT 'daily', -- 'daily' | 'weekly' | 'monthly'
    base_price REAL NOT NULL,
    currency TEXT NOT NULL DEFAULT 'USD',
    localized_price REAL NOT NULL,
    tax_rate REAL NOT NULL DEFAULT 0,
    region TEXT NOT NULL DEFAULT 'US',
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (lot_id) REFERENCES parking_lots(id) ON DELETE CASCADE
);
"""

EXCHANGE_RATES_DDL = """
CREATE TABLE IF NOT EXISTS exchange_rates (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    base_currency TEXT NOT NULL,
    target_currency TEXT NOT NULL,
    rate TEXT NOT NULL, -- decimal kept as text
    provider TEXT NOT NULL,
    last_updated TEXT NOT NULL, -- ISO timestamp (UTC)
    is_active INTEGER NOT NULL DEFAULT 1
);
"""

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

PARKING_LOTS_AIRPORT_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_parking_lots_airport ON parking_lots(airport_id);"
)
PARKING_PRICING_LOOKUP_INDEX_DDL = """
CREATE INDEX IF NOT EXISTS idx_parking_pricing_lookup
ON parking_pricing(lot_id, currency, region);
"""
EXCHANGE_RATES_PAIR_INDEX_DDL = """
CREATE INDEX IF NOT EXISTS idx_exchange_rates_pair
ON exchange_rates(base_currency, target_currency, is_active);
"""
# Added in schema v2; see migrate._migrate_to_v2
EXCHANGE_RATES_ACTIVE_UNIQUE_DDL = """
CREATE UNIQUE INDEX IF NOT EXISTS uq_exchange_rates_active_pair
ON exchange_rates(base_currency, target_currency)
WHERE is_active = 1;
"""

DDL_ORDER: Sequence[str] = (
    AIRPORTS_DDL,
    PARKING_LOTS_DDL,
    PARKING_PRICING_DDL,
    EXCHANGE_RATES_DDL,
    METADATA_DDL,
)


def init_db(path: Path) -> None:
    """Create all tables idempotently.

    Parameters
    ----------
    path: Path to SQLite database file.
    """
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        for ddl in DDL_ORDER:
            cur.execute(ddl)
        _ensure_indexes(cur)
        conn.commit()
    finally:
        conn.close()


def _ensure_indexes(cur: sqlite3.Cursor) -> None:
    for ddl in (
        PARKING_LOTS_AIRPORT_INDEX_DDL,
        PARKING_PRICING_LOOKUP_INDEX_DDL,
        EXCHANGE_RATES_PAIR_INDEX_DDL,
    ):
        cur.execute(ddl)
