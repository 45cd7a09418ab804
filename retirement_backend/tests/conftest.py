from __future__ import annotations

import pytest
from flask.testing import FlaskClient

from retirement_backend.app import create_app
from retirement_backend.config import Settings
from retirement_backend.core.projection import project_cached
from retirement_backend.schemas.expenses import Transaction
from retirement_backend.schemas.projection import ProjectionParameters


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(db_path=tmp_path / "params.db", openai_api_key=None)


@pytest.fixture()
def client(settings) -> FlaskClient:
    project_cached.cache_clear()
    flask_app = create_app(settings)
    flask_app.config["TESTING"] = True
    with flask_app.test_client() as test_client:
        yield test_client


@pytest.fixture()
def scenario() -> ProjectionParameters:
    """Reference plan: 300/month from 2025, retire 2055 for 20 years."""
    return ProjectionParameters(
        current_year=2025,
        last_year=2080,
        monthly_deposit=300.0,
        deposit_growth_rate=1.0,
        market_rate=6.1,
        retirement_start_year=2055,
        retirement_growth_rate=2.0,
        retirement_duration=20,
        initial_capital=0.0,
    )


@pytest.fixture()
def transactions() -> list:
    rows = [
        {"id": "1", "bookingDate": "2025-05-02", "amount": -50.0, "mcc": "5411", "description": "REWE"},
        {"id": "2", "bookingDate": "2025-05-10", "amount": -30.4, "mcc": "5411", "description": "Lidl"},
        {"id": "3", "bookingDate": "2025-05-12", "amount": -20.0, "mcc": "5812", "description": "Pizza"},
        {"id": "4", "bookingDate": "2025-05-15", "amount": -100.0, "mcc": "6211", "description": "ETF plan"},
        {"id": "5", "bookingDate": "2025-05-20", "amount": -10.0, "mcc": "9999", "description": "Kiosk"},
        {"id": "6", "bookingDate": "2025-05-25", "amount": 500.0, "mcc": "5411", "side": "credit"},
        {"id": "7", "bookingDate": "2025-04-03", "amount": -40.0, "mcc": "5411"},
        {"id": "8", "bookingDate": "2025-04-18", "amount": -40.0, "mcc": "5812"},
    ]
    return [Transaction.model_validate(row) for row in rows]
