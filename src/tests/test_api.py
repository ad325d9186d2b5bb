from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient
from sqlmodel import Session

from services import snapshot_store
from snapshot_factory import make_position, make_snapshot

NOW = datetime(2024, 6, 30, 12, tzinfo=timezone.utc)


def nav_payload(tokens_value: float, **kwargs) -> dict:
    return {
        "fee_settings": {"monthly_expense": 0},
        "portfolio_data": {"total_tokens_value": tokens_value},
        **kwargs,
    }


def test_position_apys_without_data(client: TestClient):
    response = client.get("/api/v1/positions/user-1/apy", params={"target_date": NOW.isoformat()})

    assert response.status_code == 200
    data = response.json()
    assert data["positions"] == {}
    assert data["message"] == "Insufficient data"
    assert data["target_date"] == "2024-06-30T12:00:00+00:00"


def test_position_apys(client: TestClient, db_session: Session):
    snapshot_store.save_snapshot(
        db_session, make_snapshot(NOW - timedelta(days=30), [make_position(supply=1000)])
    )
    snapshot_store.save_snapshot(db_session, make_snapshot(NOW, [make_position(supply=1010)]))

    response = client.get(
        "/api/v1/positions/user-1/apy",
        params={"target_date": NOW.isoformat(), "wallet_address": "0xABC"},
    )

    assert response.status_code == 200
    position = response.json()["positions"]["aave_v3_eth_lending_usdc"]
    assert position["method"] == "value_change"
    assert position["confidence"] == "high"
    assert position["is_reliable"] is True
    assert position["formatted_value"] == "$1,010.00"


def test_save_nav_requires_opening_nav(client: TestClient):
    response = client.post("/api/v1/nav-settings/user-1/2024/3", json=nav_payload(10000))

    assert response.status_code == 400
    assert "prior_pre_fee_nav" in response.json()["detail"]


def test_save_and_get_nav_settings(client: TestClient):
    response = client.post(
        "/api/v1/nav-settings/user-1/2024/3",
        json=nav_payload(10500, prior_pre_fee_nav=10000, net_flows=100),
    )

    assert response.status_code == 200
    nav_calculations = response.json()["nav_calculations"]
    assert nav_calculations["prior_pre_fee_nav_source"] == "fallback"
    assert nav_calculations["performance"] == 600

    response = client.get("/api/v1/nav-settings/user-1/2024/3")
    assert response.status_code == 200
    assert response.json()["month_name"] == "March"
    assert response.json()["nav_calculations"]["pre_fee_nav"] == 10500


def test_get_missing_nav_settings(client: TestClient):
    response = client.get("/api/v1/nav-settings/user-1/2024/3")
    assert response.status_code == 404


def test_invalid_month_is_rejected(client: TestClient):
    response = client.get("/api/v1/nav-settings/user-1/2024/13")

    assert response.status_code == 400
    assert response.json()["error"] == "validation"


def test_nav_listing_endpoints(client: TestClient):
    client.post("/api/v1/nav-settings/user-1/2024/1", json=nav_payload(1000, prior_pre_fee_nav=1000))
    client.post("/api/v1/nav-settings/user-1/2024/2", json=nav_payload(1100))
    client.post("/api/v1/nav-settings/user-1/2024/3", json=nav_payload(1045))

    months = client.get("/api/v1/nav-settings/user-1/available-months").json()
    assert [(m["year"], m["month"]) for m in months] == [(2024, 3), (2024, 2), (2024, 1)]

    history = client.get("/api/v1/nav-settings/user-1/history", params={"limit": 2}).json()
    assert history["total_records"] == 2
    assert history["has_data"] is True
    assert history["history"][0]["month_name"] == "March"

    prior = client.get("/api/v1/nav-settings/user-1/2024/4/prior-nav").json()
    assert prior["found"] is True
    assert prior["prior_pre_fee_nav"] == 1045

    volatility = client.get("/api/v1/nav-settings/user-1/volatility").json()
    assert volatility["months_of_data"] == 3
    assert volatility["annualized_volatility"] > 0


def test_save_nav_with_wallet_net_flows(client: TestClient):
    response = client.post(
        "/api/v1/nav-settings/user-1/2024/3",
        json=nav_payload(
            10500, prior_pre_fee_nav=10000, wallet_net_flows={"0xABC": -200, "0xdef": 50}
        ),
    )

    assert response.status_code == 200
    nav_calculations = response.json()["nav_calculations"]
    assert nav_calculations["wallet_net_flows"] == {"0xabc": -200, "0xdef": 50}
    assert nav_calculations["net_flows"] == -150
    assert nav_calculations["performance"] == 350
