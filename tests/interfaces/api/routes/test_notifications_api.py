"""Integration tests for the notification adapter endpoints."""

from __future__ import annotations

import json
import time

import httpx
import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient


class Upstream:
    """Marketplace API double serving the stream and REST endpoints."""

    def __init__(self, live, history, *, failing_reads=()):
        self.live = live
        self.history = history
        self.failing_reads = set(failing_reads)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.endswith("/subscribe"):
            body = "".join(f"data: {json.dumps(item)}\n\n" for item in self.live)
            return httpx.Response(
                200, headers={"content-type": "text/event-stream"}, content=body.encode()
            )
        if request.method == "PATCH":
            notification_id = int(path.split("/")[-2])
            if notification_id in self.failing_reads:
                return httpx.Response(500)
            return httpx.Response(200)
        if path == "/api/v1/notification":
            return httpx.Response(200, json={"data": self.history})
        return httpx.Response(404)


def _wait_for_state(client: TestClient, state: str) -> dict:
    for _ in range(200):
        body = client.get("/notifications/session").json()
        if body["state"] == state:
            return body
        time.sleep(0.01)
    raise AssertionError(f"session never reached {state!r}")


@pytest.fixture()
def upstream(make_payload):
    return Upstream(
        live=[make_payload(id=1, title="live copy", type="payment-required")],
        history=[
            make_payload(id=1, title="historical copy"),
            make_payload(id=2, type="payment-completed", actionUrl="/reservations/2"),
        ],
        failing_reads={1},
    )


@pytest.fixture()
def client(settings, upstream):
    """Return a test client bound to an application talking to the upstream double."""

    from main import create_app

    app = create_app(settings, transport=httpx.MockTransport(upstream))
    with TestClient(app) as test_client:
        yield test_client


def test_session_starts_without_identity(client):
    response = client.get("/notifications/session")

    assert response.status_code == 200
    assert response.json() == {"state": "idle", "user_id": None, "user_role": None}
    assert client.get("/notifications/").json() == []


def test_credential_update_streams_and_merges_history(client, mint_token, upstream):
    response = client.put(
        "/notifications/session/credential",
        json={"access_token": mint_token(7, "CUSTOMER"), "refresh_token": "refresh"},
    )
    assert response.status_code == 200
    assert response.json()["user_id"] == 7
    assert response.json()["user_role"] == "CUSTOMER"

    # The upstream double ends the stream after its payloads.
    _wait_for_state(client, "idle")

    notifications = client.get("/notifications/").json()
    assert [item["id"] for item in notifications] == [1, 2]
    assert notifications[0]["title"] == "live copy"
    assert notifications[0]["target"] == "/checkout"
    assert notifications[1]["target"] == "/reservations/2"

    subscribe = [r for r in upstream.requests if r.url.path.endswith("/subscribe")]
    assert subscribe[0].headers["Authorization"].startswith("Bearer ")


def test_target_and_mark_read(client, mint_token):
    client.put("/notifications/session/credential", json={"access_token": mint_token()})
    _wait_for_state(client, "idle")
    client.get("/notifications/")

    target = client.get("/notifications/2/target")
    assert target.status_code == 200
    assert target.json() == {"id": 2, "target": "/reservations/2"}
    assert client.get("/notifications/404/target").status_code == 404

    assert client.get("/notifications/unread/count").json() == {"count": 2}
    read = client.patch("/notifications/2/read")
    assert read.status_code == 200
    assert read.json()["is_read"] is True
    assert client.get("/notifications/unread/count").json() == {"count": 1}

    assert client.patch("/notifications/404/read").status_code == 404
    assert client.patch("/notifications/1/read").status_code == 502


def test_clearing_credential_forgets_notifications(client, mint_token):
    client.put("/notifications/session/credential", json={"access_token": mint_token()})
    _wait_for_state(client, "idle")
    assert client.get("/notifications/").json()

    response = client.delete("/notifications/session/credential")

    assert response.status_code == 200
    assert response.json() == {"state": "idle", "user_id": None, "user_role": None}
    assert client.get("/notifications/").json() == []


def test_invalid_credential_payload_is_rejected(client):
    response = client.put("/notifications/session/credential", json={"access_token": ""})

    assert response.status_code == 422


def test_routes_require_running_session(settings):
    from main import create_app

    app = create_app(settings)
    response = TestClient(app).get("/notifications/session")

    assert response.status_code == 503
