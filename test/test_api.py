"""
HTTP surface checks that need neither Postgres nor Redis: auth failures,
request validation and the error envelope.
"""
import time
import uuid

import pytest
from fastapi.testclient import TestClient

from tailorshop import db
from tailorshop.main import app
from tailorshop.order_state import Role
from tailorshop.security import Principal, current_principal


def _principal(role: Role) -> Principal:
    return Principal(
        id=uuid.uuid4(),
        role=role,
        shop_id=uuid.uuid4(),
        username="someone",
        name="Someone",
        jti=uuid.uuid4().hex,
        expires_at=int(time.time()) + 3600,
    )


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def _login_as(role: Role) -> None:
    app.dependency_overrides[current_principal] = lambda: _principal(role)


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_metrics_exposed(client):
    r = client.get("/metrics")
    assert r.status_code == 200
    assert "orders_created_total" in r.text


def test_missing_token(client):
    r = client.get("/api/admin/dashboard")
    assert r.status_code == 401
    assert r.json() == {"error": "Authentication required"}


def test_garbage_token(client):
    r = client.get("/api/tailor/dashboard", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid token"}


def test_wrong_role_is_denied(client):
    _login_as(Role.TAILOR)
    r = client.get("/api/admin/dashboard")
    assert r.status_code == 401
    assert r.json() == {"error": "Access denied"}

    _login_as(Role.ADMIN)
    r = client.get("/api/cuttingmaster/tailors")
    assert r.status_code == 401


def test_invalid_status_filter(client):
    _login_as(Role.ADMIN)
    r = client.get("/api/admin/orders", params={"status": "Shipped"})
    assert r.status_code == 400
    assert r.json()["error"].startswith("Invalid status")


def test_tailor_invalid_status(client):
    _login_as(Role.TAILOR)
    r = client.patch(f"/api/tailor/orders/{uuid.uuid4()}/status", json={"status": "Done"})
    assert r.status_code == 400


def test_login_body_validated(client):
    r = client.post("/api/auth/admin/login", json={})
    assert r.status_code == 422


def test_track_requires_phone_and_shop_code(client):
    r = client.post("/api/track", json={"phone": ""})
    assert r.status_code == 400
    assert r.json() == {"error": "Phone number is required"}

    r = client.post("/api/track", json={"phone": "98765 43210"})
    assert r.status_code == 400
    assert r.json() == {"error": "Shop code is required"}


def test_lookup_requires_code(client):
    r = client.get("/api/shops/lookup")
    assert r.status_code == 400


def test_register_rejects_short_password(client):
    r = client.post(
        "/api/shops/register",
        json={"shopName": "Stitch Co", "adminUsername": "owner", "adminPassword": "123"},
    )
    assert r.status_code == 400
    assert "Password" in r.json()["error"]


def test_approval_is_admin_only(client):
    _login_as(Role.TAILOR)
    r = client.post(f"/api/admin/orders/{uuid.uuid4()}/approval", json={"approved": True})
    assert r.status_code == 401
    assert r.json() == {"error": "Access denied"}


def test_ready_photo_url_needs_ready_status(client):
    _login_as(Role.ADMIN)
    r = client.put(f"/api/admin/orders/{uuid.uuid4()}", json={"readyPhotoUrl": "/uploads/ready/x.jpg"})
    assert r.status_code == 400
    assert "ReadyForPickup" in r.json()["error"]

    r = client.put(
        f"/api/admin/orders/{uuid.uuid4()}",
        json={"status": "Cutting", "readyPhotoUrl": "/uploads/ready/x.jpg"},
    )
    assert r.status_code == 400


def test_ready_photo_upload_requires_token(client):
    r = client.post(
        f"/api/tailor/orders/{uuid.uuid4()}/ready-photo",
        files={"photo": ("ready.jpg", b"\xff\xd8\xff", "image/jpeg")},
    )
    assert r.status_code == 401


def test_ready_photo_upload_rejects_non_image(client, monkeypatch):
    async def fake_get_pool():
        return None

    async def fake_get_order(pool, shop_id, order_id, **assignee):
        return object()

    monkeypatch.setattr(db, "get_pool", fake_get_pool)
    monkeypatch.setattr(db, "get_order", fake_get_order)
    _login_as(Role.ADMIN)
    r = client.post(
        f"/api/admin/orders/{uuid.uuid4()}/ready-photo",
        files={"photo": ("notes.txt", b"not an image", "text/plain")},
    )
    assert r.status_code == 400
    assert "images" in r.json()["error"]


def test_ready_photo_upload_requires_file(client):
    _login_as(Role.TAILOR)
    r = client.post(f"/api/tailor/orders/{uuid.uuid4()}/ready-photo")
    assert r.status_code == 422
