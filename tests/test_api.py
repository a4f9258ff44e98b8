import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from tests.helpers.fake_fetcher import FULL_RATES, FakeRateFetcher

SEARCH_PARAMS = {"airportCode": "jfk", "startDate": "2026-11-01", "endDate": "2026-11-05"}


@pytest.fixture
def lot_id(app_db):
    airport_id = app_db.create_airport("JFK", "Kennedy", "New York", "United States")
    lot_id = app_db.create_parking_lot(
        airport_id, "Lot 9", "Lefferts Blvd", distance_to_terminal=10.0, has_cctv=1
    )
    app_db.replace_parking_pricing(lot_id, 20.0, "USD", 20.0, 0.0875, "US")
    app_db.replace_parking_pricing(lot_id, 20.0, "GBP", 19.2, 0.2, "GB")
    return lot_id


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_convert_currency(client, fetcher):
    resp = client.get("/api/currency/convert", params={"from": "USD", "to": "GBP", "amount": "10"})

    assert resp.status_code == 200
    assert resp.json() == {
        "convertedAmount": 8.0,
        "from": "USD",
        "to": "GBP",
        "originalAmount": 10.0,
    }
    assert fetcher.calls == [("USD", "GBP")]


@pytest.mark.parametrize(
    "params",
    [
        {"from": "USD", "to": "GBP", "amount": "ten"},
        {"from": "USD", "to": "GBP"},
        {"from": "US", "to": "GBP", "amount": "10"},
        {"from": "USD", "to": "", "amount": "10"},
        {"from": "USD", "to": "GBP", "amount": "nan"},
    ],
)
def test_convert_rejects_bad_input(client, params):
    resp = client.get("/api/currency/convert", params=params)

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Currency conversion failed"


def test_convert_degrades_to_parity_when_provider_is_down(client, fetcher):
    fetcher.fail_all = True

    resp = client.get("/api/currency/convert", params={"from": "USD", "to": "GBP", "amount": "12.5"})

    assert resp.status_code == 200
    assert resp.json()["convertedAmount"] == 12.5


def test_rates_listing_and_history(client):
    client.get("/api/currency/convert", params={"from": "USD", "to": "GBP", "amount": "1"})

    rates = client.get("/api/currency/rates").json()
    assert len(rates) == 1
    assert rates[0]["baseCurrency"] == "USD"
    assert rates[0]["targetCurrency"] == "GBP"
    assert rates[0]["rate"] == 0.8
    assert rates[0]["isActive"] is True

    history = client.get("/api/currency/rates/usd/gbp/history").json()
    assert [h["rate"] for h in history] == [0.8]
    assert client.get("/api/currency/rates/usd/gb/history").status_code == 400


def test_localize_uses_explicit_region(client):
    resp = client.get(
        "/api/currency/localize",
        params={"amount": "100", "from": "USD", "to": "GBP", "region": "GB"},
    )

    assert resp.status_code == 200
    assert resp.json() == {
        "price": 96.0,
        "currency": "GBP",
        "formatted": "£96.00",
        "includesTax": True,
        "taxRate": 0.2,
    }


def test_localize_defaults_to_request_locale(client):
    resp = client.get(
        "/api/currency/localize",
        params={"amount": "100"},
        headers={"Accept-Language": "en-GB,en;q=0.8"},
    )

    body = resp.json()
    assert body["currency"] == "GBP"
    assert body["price"] == 96.0


def test_localize_rejects_bad_amount(client):
    resp = client.get("/api/currency/localize", params={"amount": "lots"})
    assert resp.status_code == 400


def test_search_from_gb_uses_km_and_gbp(client, lot_id):
    resp = client.get("/api/parking/search", params={**SEARCH_PARAMS, "locale": "en-GB"})

    assert resp.status_code == 200
    [lot] = resp.json()
    assert lot["id"] == lot_id
    assert lot["distanceFormatted"] == "16.1 km"
    assert lot["currency"] == "GBP"
    assert lot["region"] == "GB"
    assert lot["locale"] == "en-GB"
    assert lot["hasCctv"] is True
    assert lot["pricing"]["localizedPrice"] == 19.2
    assert lot["pricing"]["region"] == "GB"
    assert "locale=en-GB" in resp.headers["set-cookie"]


def test_search_from_us_uses_miles_and_usd(client, lot_id):
    resp = client.get("/api/parking/search", params=SEARCH_PARAMS)

    [lot] = resp.json()
    assert lot["distanceFormatted"] == "10.0 miles"
    assert lot["currency"] == "USD"
    assert lot["region"] == "US"
    assert lot["locale"] == "en-US"
    assert lot["pricing"]["localizedPrice"] == 20.0
    assert lot["pricing"]["taxRate"] == 0.0875


def test_search_honours_locale_cookie(client, lot_id):
    resp = client.get("/api/parking/search", params=SEARCH_PARAMS, headers={"Cookie": "locale=en-GB"})

    [lot] = resp.json()
    assert lot["distanceFormatted"] == "16.1 km"
    assert "set-cookie" not in resp.headers


def test_search_returns_null_pricing_without_row(client, app_db):
    airport_id = app_db.create_airport("JFK", "Kennedy", "New York", "United States")
    app_db.create_parking_lot(airport_id, "Unpriced", "Somewhere")

    [lot] = client.get("/api/parking/search", params=SEARCH_PARAMS).json()

    assert lot["pricing"] is None
    assert lot["distanceFormatted"] == "0.0 miles"


def test_search_unknown_airport_is_empty(client, lot_id):
    resp = client.get("/api/parking/search", params={**SEARCH_PARAMS, "airportCode": "LAX"})
    assert resp.status_code == 200
    assert resp.json() == []


@pytest.mark.parametrize(
    "params, detail",
    [
        ({"startDate": "2026-11-01", "endDate": "2026-11-05"}, "Airport code is required"),
        ({"airportCode": "JFK", "endDate": "2026-11-05"}, "Start date is required"),
        ({"airportCode": "JFK", "startDate": "2026-11-01"}, "End date is required"),
        ({"airportCode": "JFK", "startDate": "soon", "endDate": "2026-11-05"}, "Invalid start date: soon"),
        (
            {"airportCode": "JFK", "startDate": "2026-11-05", "endDate": "2026-11-01"},
            "End date must not precede start date",
        ),
    ],
)
def test_search_validates_parameters(client, params, detail):
    resp = client.get("/api/parking/search", params=params)

    assert resp.status_code == 400
    assert resp.json() == {"error": "bad_request", "detail": detail}


def test_parking_lot_detail(client, lot_id):
    resp = client.get(f"/api/parking/{lot_id}", params={"locale": "en-GB"})
    assert resp.status_code == 200
    assert resp.json()["distanceFormatted"] == "16.1 km"

    missing = client.get("/api/parking/9999")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Parking lot not found"


def test_geo_detect_private_ip_defaults_to_us(client):
    resp = client.get("/api/geo/detect", headers={"X-Forwarded-For": "10.0.0.7, 172.16.0.1"})

    assert resp.json() == {
        "country": "US",
        "region": "US",
        "currency": "USD",
        "detectedLocale": "en-US",
        "clientIP": "10.0.0.7",
    }


def test_unknown_route_is_404(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


def test_request_id_header_is_echoed(client):
    resp = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert resp.headers["x-request-id"] == "abc-123"


def test_startup_initializes_rates(tmp_path):
    from app.core.config import Settings

    settings = Settings(data_dir=tmp_path, geoip_lookup_enabled=False)
    fetcher = FakeRateFetcher(FULL_RATES, failing_bases={"EUR"})
    app = create_app(settings_override=settings, rate_fetcher=fetcher)

    with TestClient(app) as client:
        rates = client.get("/api/currency/rates").json()

    assert len(fetcher.calls) == 6
    assert len(rates) == 4


def test_routers_share_one_store_dependency():
    from app.routers import currency, parking
    from app.services.rates.currency_service import get_db

    assert currency.get_db is get_db
    assert parking.get_db is get_db
