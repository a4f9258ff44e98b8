"""Database migration utilities.

Handles schema evolution by applying idempotent migrations keyed by an integer
`schema_version` stored in the metadata table. Each migration upgrades the
SQLite schema in-place while preserving existing rows (rate history included).
"""

from __future__ import annotations
from pathlib import Path
import logging
import sqlite3
from typing import Optional

from . import schema as schema_def
from .schema import init_db

CURRENT_SCHEMA_VERSION = 2
SCHEMA_VERSION_KEY = "schema_version"

logger = logging.getLogger("app.db.migrate")


def _get_schema_version(conn: sqlite3.Connection) -> Optional[int]:
    try:
        cur = conn.cursor()
        cur.execute("SELECT value FROM metadata WHERE key=?", (SCHEMA_VERSION_KEY,))
        row = cur.fetchone()
        if row:
            return int(row[0])
    except sqlite3.OperationalError:
        # metadata table may not exist yet (first run before init_db)
        return None
    return None


def apply_migrations(db_path: Path) -> int:
    """Apply required migrations and return resulting schema version."""
    init_db(db_path)
    conn = sqlite3.connect(db_path)
    try:
        version = _get_schema_version(conn) or 1
        if version < 2:
            _migrate_to_v2(conn)
            version = 2
        _set_schema_version(conn, version)
        conn.commit()
        return version
    finally:
        conn.close()


def _set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    cur = conn.cursor()
    cur.execute(
        "INSERT INTO metadata (key, value) VALUES (?, ?) "
        "ON CONFLICT(key) DO UPDATE SET value=excluded.value, "
        f"updated_at=({schema_def.BASIC_UTC_NOW})",
        (SCHEMA_VERSION_KEY, str(version)),
    )


def _migrate_to_v2(conn: sqlite3.Connection) -> None:
    """Upgrade schema to version 2 (one active exchange rate per pair).

    Earlier refreshes could leave two active rows for a pair when requests
    raced. Keep the newest active row, deactivate the rest, then let a partial
    unique index hold the invariant from here on.
    """
    cur = conn.cursor()
    try:
        collapsed = _collapse_duplicate_active_rates(cur)
        if collapsed:
            logger.warning("deactivated %d duplicate active exchange rates", collapsed)
        cur.execute(schema_def.EXCHANGE_RATES_ACTIVE_UNIQUE_DDL)
        conn.commit()
    except Exception:
        conn.rollback()
        raise


def _collapse_duplicate_active_rates(cur: sqlite3.Cursor) -> int:
    cur.execute(
        """
        UPDATE exchange_rates
        SET is_active = 0
        WHERE is_active = 1
          AND id NOT IN (
            SELECT MAX(id) FROM exchange_rates
            WHERE is_active = 1
            GROUP BY base_currency, target_currency
          )
        """
    )
    return cur.rowcount
