"""Integration tests for the notification API endpoints."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from bazaarfly.infrastructure.database import get_db
from bazaarfly.infrastructure.email import EmailConfigurationError, EmailDeliveryError
from bazaarfly.interfaces.api.dependencies import get_mailer


@pytest.fixture()
def app(session, mailer):
    """Application wired to the in-memory database and the mailer double."""

    from main import create_app

    application = create_app()

    def _override_get_db():
        yield session

    application.dependency_overrides[get_db] = _override_get_db
    application.dependency_overrides[get_mailer] = lambda: mailer
    return application


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


def _order_payload(recipient: int | None) -> dict[str, object]:
    return {
        "recipient": recipient,
        "type": "order_placed",
        "title": "Order Placed",
        "message": "Your order ORD-1001 is confirmed",
        "channels": ["in_app", "email"],
        "templatePayload": {"orderNumber": "ORD-1001", "orderLink": "/orders/ORD-1001"},
        "clickAction": {"url": "/orders/ORD-1001", "external": False},
        "relatedEntity": {"id": "ORD-1001", "model": "Order"},
    }


def test_dispatch_and_read_flow(client: TestClient, mailer, make_user) -> None:
    """Create, list, mark as read and delete a notification."""

    user = make_user(name="Alice", email="a@b.com")

    response = client.post("/notifications/", json=_order_payload(user.id))
    assert response.status_code == 201
    created = response.json()
    assert created["recipient"] == user.id
    assert created["is_read"] is False
    assert created["click_action"] == {"url": "/orders/ORD-1001", "external": False}
    assert created["related_entity"] == {"id": "ORD-1001", "model": "Order"}
    assert mailer.sent[0]["to"] == "a@b.com"

    list_response = client.get(f"/users/{user.id}/notifications")
    assert list_response.status_code == 200
    body = list_response.json()
    assert [item["id"] for item in body["notifications"]] == [created["id"]]
    assert body["pagination"] == {
        "total": 1,
        "page": 1,
        "limit": 20,
        "total_pages": 1,
        "has_next_page": False,
        "has_prev_page": False,
    }

    read_response = client.patch(f"/notifications/{created['id']}/read")
    assert read_response.status_code == 200
    first_read_at = read_response.json()["read_at"]
    assert read_response.json()["is_read"] is True

    again = client.patch(f"/notifications/{created['id']}/read")
    assert again.json()["read_at"] == first_read_at

    unread = client.get(f"/users/{user.id}/notifications", params={"unread_only": True})
    assert unread.json()["notifications"] == []

    by_type = client.get("/notifications/", params={"type": "order_placed"})
    assert [item["id"] for item in by_type.json()] == [created["id"]]

    delete_response = client.delete(f"/notifications/{created['id']}")
    assert delete_response.status_code == 204
    assert client.get(f"/notifications/{created['id']}").status_code == 404


def test_pagination(client: TestClient, make_user) -> None:
    user = make_user()
    for index in range(3):
        payload = _order_payload(user.id)
        payload["channels"] = ["in_app"]
        payload["title"] = f"Order {index}"
        assert client.post("/notifications/", json=payload).status_code == 201

    response = client.get(f"/users/{user.id}/notifications", params={"page": 2, "limit": 2})

    pagination = response.json()["pagination"]
    assert len(response.json()["notifications"]) == 1
    assert pagination["total"] == 3
    assert pagination["total_pages"] == 2
    assert pagination["has_next_page"] is False
    assert pagination["has_prev_page"] is True


def test_invalid_payload_is_rejected(client: TestClient) -> None:
    payload = _order_payload(None)
    payload["channels"] = []

    assert client.post("/notifications/", json=payload).status_code == 422

    payload = _order_payload(None)
    payload["type"] = "unknown_kind"
    assert client.post("/notifications/", json=payload).status_code == 422


def test_blank_title_is_a_bad_request(client: TestClient) -> None:
    payload = _order_payload(None)
    payload["title"] = "   "

    response = client.post("/notifications/", json=payload)

    assert response.status_code == 400


@pytest.mark.parametrize(
    ("error", "status_code"),
    [
        (EmailDeliveryError("Could not send email"), 502),
        (EmailConfigurationError("Missing required email environment variables"), 503),
    ],
)
def test_email_errors_map_to_gateway_statuses(
    app, session, make_user, make_mailer, error, status_code
) -> None:
    user = make_user()
    app.dependency_overrides[get_mailer] = lambda: make_mailer(error=error)
    client = TestClient(app)

    response = client.post("/notifications/", json=_order_payload(user.id))

    assert response.status_code == status_code
    listing = client.get(f"/users/{user.id}/notifications")
    assert listing.json()["pagination"]["total"] == 1


def test_unknown_user_and_notification(client: TestClient) -> None:
    assert client.get("/users/999/notifications").status_code == 404
    assert client.patch("/notifications/999/read").status_code == 404
    assert client.delete("/notifications/999").status_code == 404
