from datetime import datetime, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.db.dal import Database
from app.db.migrate import apply_migrations
from app.main import create_app
from tests.helpers.fake_fetcher import FakeRateFetcher

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def db(tmp_path: Path) -> Database:
    db_path = tmp_path / "test.sqlite3"
    apply_migrations(db_path)
    return Database(db_path)


@pytest.fixture
def fetcher() -> FakeRateFetcher:
    return FakeRateFetcher({"USD": {"GBP": 0.8, "EUR": 0.9}})


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    settings = Settings(
        data_dir=tmp_path,
        initialize_rates_on_startup=False,
        geoip_lookup_enabled=False,
    )
    settings.init_post_load()
    return settings


@pytest.fixture
def app(settings: Settings, fetcher: FakeRateFetcher):
    return create_app(settings_override=settings, rate_fetcher=fetcher)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def app_db(settings: Settings, app) -> Database:
    return Database(settings.db_path)
