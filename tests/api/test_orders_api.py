"""
Tests for the Orders API.

Callers identify themselves with X-User-Id; non-admins only reach their
own orders.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from ordertrack.adapters.clock import FrozenClock
from ordertrack.api.deps import AppContext, get_context
from ordertrack.api.main import create_app
from ordertrack.domain.entities import UserRef
from ordertrack.rules.models import Rules

ADMIN = {"X-User-Id": "admin"}
MARTA = {"X-User-Id": "u1"}
BRUNO = {"X-User-Id": "u2"}

# --- Test Setup ---


@pytest.fixture
def ctx(rules: Rules, clock: FrozenClock, users: list[UserRef]) -> AppContext:
    return AppContext.in_memory(rules, clock, users)


@pytest.fixture
def app(ctx: AppContext) -> FastAPI:
    app = create_app()
    app.dependency_overrides[get_context] = lambda: ctx
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


def create(client: TestClient, headers: dict[str, str] = MARTA, **fields) -> dict:
    body = {"title": "Door lock jammed", "unit": "Aldeota", **fields}
    response = client.post("/api/orders", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


# --- Identity ---


class TestIdentity:
    def test_missing_header(self, client: TestClient) -> None:
        assert client.get("/api/orders").status_code == 401

    def test_unknown_user(self, client: TestClient) -> None:
        assert client.get("/api/orders", headers={"X-User-Id": "ghost"}).status_code == 401


# --- Create / Read ---


class TestCreateAndRead:
    def test_create_defaults_owner_to_caller(self, client: TestClient) -> None:
        order = create(client)
        assert order["id"] == "OS-26001"
        assert order["owner_id"] == "u1"
        assert order["status"] == "open"
        assert order["history"][0]["message"] == "Order created"

    def test_create_validates_body(self, client: TestClient) -> None:
        response = client.post("/api/orders", json={"title": "", "unit": "Aldeota"}, headers=MARTA)
        assert response.status_code == 422

    def test_create_form_date_is_local_noon(self, client: TestClient) -> None:
        order = create(client, date_opened="2026-01-01")
        assert datetime.fromisoformat(order["date_opened"]) == datetime(2026, 1, 1, 15, tzinfo=UTC)

    def test_create_keeps_full_timestamps(self, client: TestClient) -> None:
        order = create(client, date_opened="2026-01-01T02:00:00Z")
        assert datetime.fromisoformat(order["date_opened"]) == datetime(2026, 1, 1, 2, tzinfo=UTC)

    def test_form_date_reports_in_its_local_year(self, client: TestClient) -> None:
        create(client, date_opened="2026-01-01")

        def count(year: int) -> int:
            response = client.get("/api/reports/managerial", params={"year": year}, headers=ADMIN)
            assert response.status_code == 200, response.text
            return response.json()["order_count"]

        assert count(2026) == 1
        assert count(2025) == 0

    def test_owner_scope(self, client: TestClient) -> None:
        mine = create(client, MARTA)
        create(client, BRUNO, title="Broken chair")

        listed = client.get("/api/orders", headers=MARTA).json()
        assert [o["id"] for o in listed] == [mine["id"]]
        assert len(client.get("/api/orders", headers=ADMIN).json()) == 2

    def test_foreign_order_is_missing(self, client: TestClient) -> None:
        order = create(client, MARTA)
        assert client.get(f"/api/orders/{order['id']}", headers=BRUNO).status_code == 404
        assert client.get(f"/api/orders/{order['id']}", headers=ADMIN).status_code == 200

    def test_unknown_order(self, client: TestClient) -> None:
        response = client.get("/api/orders/OS-26999", headers=ADMIN)
        assert response.status_code == 404
        assert "OS-26999" in response.json()["detail"]


# --- Lifecycle ---


class TestLifecycle:
    def test_transition_and_archive(self, client: TestClient) -> None:
        order = create(client)
        url = f"/api/orders/{order['id']}"

        done = client.post(f"{url}/transition", json={"status": "done"}, headers=MARTA)
        assert done.status_code == 200
        assert done.json()["date_closed"] is not None

        archived = client.post(f"{url}/archive", headers=MARTA)
        assert archived.status_code == 200
        assert archived.json()["archived"] is True

        reopened = client.post(f"{url}/transition", json={"status": "open"}, headers=MARTA)
        assert reopened.status_code == 409

        listed = client.get("/api/orders", params={"archived": "true"}, headers=MARTA).json()
        assert [o["id"] for o in listed] == [order["id"]]

    def test_archive_open_order_conflicts(self, client: TestClient) -> None:
        order = create(client)
        response = client.post(f"/api/orders/{order['id']}/archive", headers=MARTA)
        assert response.status_code == 409

    def test_unknown_status(self, client: TestClient) -> None:
        order = create(client)
        response = client.post(
            f"/api/orders/{order['id']}/transition", json={"status": "lost"}, headers=MARTA
        )
        assert response.status_code == 422

    def test_edit(self, client: TestClient) -> None:
        order = create(client)
        response = client.patch(
            f"/api/orders/{order['id']}",
            json={"title": "Door lock replaced", "priority": "high"},
            headers=MARTA,
        )
        assert response.status_code == 200
        assert response.json()["title"] == "Door lock replaced"
        assert response.json()["priority"] == "high"

    def test_edit_form_date_is_local_noon(self, client: TestClient) -> None:
        order = create(client)
        response = client.patch(
            f"/api/orders/{order['id']}", json={"date_forecast": "2026-02-10"}, headers=MARTA
        )
        assert response.status_code == 200
        forecast = datetime.fromisoformat(response.json()["date_forecast"])
        assert forecast == datetime(2026, 2, 10, 15, tzinfo=UTC)

    def test_log(self, client: TestClient) -> None:
        order = create(client)
        response = client.post(
            f"/api/orders/{order['id']}/logs", json={"message": "Locksmith called"}, headers=MARTA
        )
        entry = response.json()["history"][-1]
        assert entry["message"] == "Locksmith called"
        assert entry["user_id"] == "u1"

    def test_blank_log_rejected(self, client: TestClient) -> None:
        order = create(client)
        response = client.post(
            f"/api/orders/{order['id']}/logs", json={"message": "   "}, headers=MARTA
        )
        assert response.status_code == 400

    def test_delegate_moves_order_out_of_scope(self, client: TestClient) -> None:
        order = create(client)
        url = f"/api/orders/{order['id']}"

        response = client.post(f"{url}/delegate", json={"owner_id": "u2"}, headers=MARTA)
        assert response.status_code == 200
        assert response.json()["history"][-1]["message"] == "Responsibility transferred to Bruno"

        assert client.get(url, headers=MARTA).status_code == 404
        assert client.get(url, headers=BRUNO).status_code == 200


def test_health(client: TestClient) -> None:
    assert client.get("/health").json()["status"] == "ok"
