import asyncio

import pytest

from app.models.locale import LocaleContext
from app.services.pricing import format_distance, localize_lot, populate_lot_pricing
from app.services.rates.currency_service import CurrencyService
from tests.conftest import NOW
from tests.helpers.fake_fetcher import FakeRateFetcher


@pytest.mark.parametrize(
    "miles, region, expected",
    [
        (10, "GB", "16.1 km"),
        (10, "US", "10.0 miles"),
        (0.3, "GB", "0.5 km"),
        (2.46, "FR", "2.5 miles"),
        (None, "GB", "0.0 km"),
    ],
)
def test_format_distance(miles, region, expected):
    assert format_distance(miles, region) == expected


@pytest.fixture
def lot_id(db):
    airport_id = db.create_airport("LHR", "Heathrow", "London", "United Kingdom", "GB")
    return db.create_parking_lot(airport_id, "Park & Ride", "Bath Road", distance_to_terminal=1.2)


def test_populate_lot_pricing_writes_one_row_per_locale(db, lot_id):
    fetcher = FakeRateFetcher({"USD": {"GBP": 0.8}})
    svc = CurrencyService(db, fetcher, clock=lambda: NOW)

    ids = asyncio.run(populate_lot_pricing(db, svc, lot_id, 20.0, "USD"))

    assert len(ids) == 2
    us = db.get_parking_pricing(lot_id, "USD", "US")
    gb = db.get_parking_pricing(lot_id, "GBP", "GB")
    assert (us["localized_price"], us["tax_rate"], us["base_price"]) == (20.0, 0.0875, 20.0)
    assert (gb["localized_price"], gb["tax_rate"]) == (19.2, 0.2)
    assert fetcher.calls == [("USD", "GBP")]


def test_populate_lot_pricing_rerun_replaces_rows(db, lot_id):
    svc = CurrencyService(db, FakeRateFetcher({"USD": {"GBP": 0.8}}), clock=lambda: NOW)

    asyncio.run(populate_lot_pricing(db, svc, lot_id, 20.0))
    asyncio.run(populate_lot_pricing(db, svc, lot_id, 25.0))

    assert db.get_parking_pricing(lot_id, "USD", "US")["localized_price"] == 25.0
    assert db.get_parking_pricing(lot_id, "GBP", "GB")["localized_price"] == 24.0


def test_populate_lot_pricing_unknown_lot(db):
    svc = CurrencyService(db, FakeRateFetcher(), clock=lambda: NOW)
    with pytest.raises(ValueError):
        asyncio.run(populate_lot_pricing(db, svc, 404, 20.0))


def test_localize_lot_attaches_locale_fields(db, lot_id):
    db.replace_parking_pricing(lot_id, 20.0, "GBP", 19.2, 0.2, "GB")
    context = LocaleContext(locale="en-GB", region="GB", currency="GBP", client_ip="1.2.3.4")

    lot = localize_lot(db, db.get_parking_lot(lot_id), context)

    assert lot.distance_formatted == "1.9 km"
    assert lot.airport_code == "LHR"
    assert lot.pricing is not None and lot.pricing.localized_price == 19.2
    dumped = lot.model_dump(by_alias=True)
    assert dumped["distanceFormatted"] == "1.9 km"
    assert dumped["pricing"]["localizedPrice"] == 19.2
