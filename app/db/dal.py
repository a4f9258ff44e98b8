"""Data Access Layer utilities.

Responsibilities
----------------
- Exchange rate cache: active-row lookup, atomic refresh (deactivate + insert
  in one transaction) and history listing.
- Airport / parking lot lookups used by the search endpoint.
- Pre-populated parking pricing rows keyed by (lot, currency, region).
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
import sqlite3
from typing import Any, Dict, List, Optional

from app.models.rates import ExchangeRateRecord

_LOT_FEATURE_COLUMNS = (
    "shuttle_frequency_minutes",
    "is_shuttle_included",
    "is_covered",
    "has_ev_charging",
    "has_security_patrol",
    "has_cctv",
    "total_spaces",
    "rating",
)


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    # ------------------------------------------------------------------
    # Exchange rate cache
    def get_active_rate(self, base: str, target: str) -> Optional[ExchangeRateRecord]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT * FROM exchange_rates
                WHERE base_currency = ? AND target_currency = ? AND is_active = 1
                ORDER BY last_updated DESC, id DESC
                LIMIT 1
                """,
                (base, target),
            )
            row = cur.fetchone()
            return ExchangeRateRecord.from_row(dict(row)) if row else None

    def replace_active_rate(
        self,
        base: str,
        target: str,
        rate: float,
        provider: str,
        fetched_at: datetime,
    ) -> ExchangeRateRecord:
        """Supersede the pair's active row with a fresh one.

        Both statements run in one transaction so readers never observe two
        active rows (or none) for the pair.
        """
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                UPDATE exchange_rates SET is_active = 0
                WHERE base_currency = ? AND target_currency = ? AND is_active = 1
                """,
                (base, target),
            )
            cur.execute(
                """
                INSERT INTO exchange_rates (
                    base_currency, target_currency, rate, provider, last_updated, is_active
                ) VALUES (?, ?, ?, ?, ?, 1)
                """,
                (base, target, str(rate), provider, fetched_at.isoformat()),
            )
            new_id = int(cur.lastrowid)
        return ExchangeRateRecord(
            id=new_id,
            base_currency=base,
            target_currency=target,
            rate=rate,
            provider=provider,
            last_updated=fetched_at,
            is_active=True,
        )

    def list_active_rates(self) -> List[ExchangeRateRecord]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT * FROM exchange_rates WHERE is_active = 1
                ORDER BY base_currency, target_currency
                """
            )
            return [ExchangeRateRecord.from_row(dict(r)) for r in cur.fetchall()]

    def list_rate_history(self, base: str, target: str) -> List[ExchangeRateRecord]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT * FROM exchange_rates
                WHERE base_currency = ? AND target_currency = ?
                ORDER BY last_updated DESC, id DESC
                """,
                (base, target),
            )
            return [ExchangeRateRecord.from_row(dict(r)) for r in cur.fetchall()]

    # ------------------------------------------------------------------
    # Airports & parking lots
    def create_airport(
        self,
        code: str,
        name: str,
        city: str,
        country: str,
        country_code: str = "US",
    ) -> int:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO airports (code, name, city, country, country_code)
                VALUES (?, ?, ?, ?, ?)
                """,
                (code.upper(), name, city, country, country_code.upper()),
            )
            return int(cur.lastrowid)

    def get_airport_by_code(self, code: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM airports WHERE code = ?", (code.upper(),))
            row = cur.fetchone()
            return dict(row) if row else None

    def create_parking_lot(
        self,
        airport_id: int,
        name: str,
        address: str,
        distance_to_terminal: Optional[float] = None,
        **features: Any,
    ) -> int:
        unknown = set(features) - set(_LOT_FEATURE_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown parking lot fields: {sorted(unknown)}")
        columns = ["airport_id", "name", "address", "distance_to_terminal", *features]
        values = [airport_id, name, address, distance_to_terminal, *features.values()]
        placeholders = ", ".join("?" for _ in columns)
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"INSERT INTO parking_lots ({', '.join(columns)}) VALUES ({placeholders})",
                values,
            )
            return int(cur.lastrowid)

    def get_parking_lot(self, lot_id: int) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT l.*, a.code AS airport_code
                FROM parking_lots l JOIN airports a ON a.id = l.airport_id
                WHERE l.id = ?
                """,
                (lot_id,),
            )
            row = cur.fetchone()
            return dict(row) if row else None

    def search_parking_lots(self, airport_code: str) -> List[Dict[str, Any]]:
        """Active lots for an airport, nearest first (unknown distance last)."""
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT l.*, a.code AS airport_code
                FROM parking_lots l JOIN airports a ON a.id = l.airport_id
                WHERE a.code = ? AND l.is_active = 1
                ORDER BY l.distance_to_terminal IS NULL,
                         l.distance_to_terminal ASC,
                         l.name ASC
                """,
                (airport_code.upper(),),
            )
            return [dict(r) for r in cur.fetchall()]

    # ------------------------------------------------------------------
    # Parking pricing
    def get_parking_pricing(
        self, lot_id: int, currency: str, region: str, price_type: str = "daily"
    ) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT * FROM parking_pricing
                WHERE lot_id = ? AND currency = ? AND region = ?
                  AND price_type = ? AND is_active = 1
                ORDER BY id DESC
                LIMIT 1
                """,
                (lot_id, currency, region, price_type),
            )
            row = cur.fetchone()
            return dict(row) if row else None

    def replace_parking_pricing(
        self,
        lot_id: int,
        base_price: float,
        currency: str,
        localized_price: float,
        tax_rate: float,
        region: str,
        price_type: str = "daily",
    ) -> int:
        """Deactivate the matching pricing row (if any) and insert a new one."""
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                UPDATE parking_pricing SET is_active = 0
                WHERE lot_id = ? AND currency = ? AND region = ? AND price_type = ?
                """,
                (lot_id, currency, region, price_type),
            )
            cur.execute(
                """
                INSERT INTO parking_pricing (
                    lot_id, price_type, base_price, currency,
                    localized_price, tax_rate, region, is_active
                ) VALUES (?, ?, ?, ?, ?, ?, ?, 1)
                """,
                (
                    lot_id,
                    price_type,
                    base_price,
                    currency,
                    localized_price,
                    tax_rate,
                    region,
                ),
            )
            return int(cur.lastrowid)
