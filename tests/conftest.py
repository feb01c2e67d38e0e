from __future__ import annotations

from datetime import timedelta

import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "s3cret-pass"

# Smallest valid-looking PNG header; content is never decoded.
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def make_settings(tmp_path, **overrides) -> Settings:
    # Test-only values; nothing here talks to a real database.
    values = dict(
        database_url="mongodb://localhost:27017",
        database_name="booking_test",
        jwt_secret="test-jwt-secret",
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
        token_ttl=timedelta(hours=24),
        bcrypt_rounds=4,
        upload_dir=str(tmp_path / "uploads"),
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def db():
    return mongomock.MongoClient()["booking_test"]


@pytest.fixture
def app(settings, db):
    return create_app(settings=settings, db=db)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def admin_token(client) -> str:
    resp = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200, resp.text
    return resp.json()["token"]


@pytest.fixture
def admin_headers(admin_token) -> dict[str, str]:
    return {"Authorization": f"Bearer {admin_token}"}


def booking_form(**overrides) -> dict[str, str]:
    form = {
        "fullName": "Jane Doe",
        "email": "jane@example.com",
        "phone": "5551234567",
        "date": "2025-06-01",
    }
    form.update(overrides)
    return {k: v for k, v in form.items() if v is not None}


def png_upload(name: str = "valid.png", data: bytes = PNG_BYTES, content_type: str = "image/png"):
    return {"paymentProof": (name, data, content_type)}


@pytest.fixture
def create_booking(client):
    def _create(**overrides):
        resp = client.post("/api/bookings", data=booking_form(**overrides), files=png_upload())
        assert resp.status_code == 201, resp.text
        return resp.json()["booking"]

    return _create
