"""Seeding helpers for sample airports and parking lots.

`seed_sample_data` inserts a couple of airports with nearby lots; existing
airports (matched by code) are left untouched so this can be safely re-run.
Pricing rows are written separately through
`app.services.pricing.populate_lot_pricing` because they need exchange rates.
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, List, Tuple

from .dal import Database
from .migrate import apply_migrations

SAMPLE_AIRPORTS: Tuple[Dict[str, str], ...] = (
    {
        "code": "LHR",
        "name": "London Heathrow Airport",
        "city": "London",
        "country": "United Kingdom",
        "country_code": "GB",
    },
    {
        "code": "JFK",
        "name": "John F. Kennedy International Airport",
        "city": "New York",
        "country": "United States",
        "country_code": "US",
    },
)

# airport code -> (name, address, miles to terminal, daily price in USD)
SAMPLE_LOTS: Dict[str, Tuple[Tuple[str, str, float, float], ...]] = {
    "LHR": (
        ("Heathrow Park & Ride", "Bath Road, Hounslow TW6", 1.2, 18.50),
        ("Terminal 5 Meet & Greet", "Terminal 5, Heathrow TW6", 0.3, 42.00),
    ),
    "JFK": (
        ("JFK Long Term Lot 9", "Lefferts Blvd, Queens NY", 10.0, 21.00),
        ("Kennedy Valet Garage", "Rockaway Blvd, Queens NY", 2.4, 29.95),
    ),
}


def seed_sample_data(db_path: Path) -> List[Tuple[int, float]]:
    """Insert sample airports/lots; return (lot_id, daily USD price) per new lot."""
    apply_migrations(db_path)  # ensure tables exist
    db = Database(db_path)
    created: List[Tuple[int, float]] = []
    for airport in SAMPLE_AIRPORTS:
        if db.get_airport_by_code(airport["code"]):
            continue
        airport_id = db.create_airport(**airport)
        for name, address, miles, daily_usd in SAMPLE_LOTS.get(airport["code"], ()):
            lot_id = db.create_parking_lot(
                airport_id,
                name,
                address,
                distance_to_terminal=miles,
                shuttle_frequency_minutes=15,
                has_cctv=1,
            )
            created.append((lot_id, daily_usd))
    return created
