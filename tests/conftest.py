"""
Shared fixtures: an in-memory SQLite database, the FastAPI test client,
user/property factories and a Wompi event builder.

Environment variables are set before any application module is imported
because `config.settings` is read once at import time.
"""
import hashlib
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "test"
os.environ["TEST_OTP_ENABLED"] = "true"
os.environ["OTP_NOTIFIER"] = "log"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["APPROVAL_FEE_PERCENTAGE"] = "5"
os.environ["WOMPI_PUBLIC_KEY"] = "pub_test_key"
os.environ["WOMPI_PRIVATE_KEY"] = "prv_test_key"
os.environ["WOMPI_INTEGRITY_SECRET"] = "test_integrity_secret"
os.environ["WOMPI_EVENTS_SECRET"] = "test_events_secret"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from database import SessionLocal, engine
from dependencies import create_access_token
from main import app
from models import Base, Property, User

EVENTS_SECRET = "test_events_secret"

VERIFICATION = {
    "documentType": "cc",
    "documentNumber": "1020304050",
    "occupation": "Software engineer",
    "monthlyIncome": "6500000",
    "referenceName": "Maria Lopez",
    "referencePhone": "3001234567",
    "referenceRelation": "Former landlord",
}


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user(db):
    def _make(email, roles=("tenant",), name=None):
        user = User(email=email, name=name or email.split("@")[0].title(), roles=",".join(roles))
        db.add(user)
        db.commit()
        return user
    return _make


@pytest.fixture
def landlord(make_user):
    return make_user("landlord@example.com", roles=("tenant", "landlord"), name="Laura Landlord")


@pytest.fixture
def tenant(make_user):
    return make_user("tenant@example.com", name="Tomas Tenant")


@pytest.fixture
def admin(make_user):
    return make_user("admin@example.com", roles=("admin",))


@pytest.fixture
def rental_property(db, landlord):
    prop = Property(
        owner_id=landlord.id,
        title="Apartment in Chapinero",
        price=Decimal("1500000"),
        currency="COP",
        address="Calle 60 # 9-20",
        city="Bogota",
        neighborhood="Chapinero",
        bedrooms=2,
        bathrooms=1,
    )
    db.add(prop)
    db.commit()
    return prop


def auth(user):
    """Authorization header for a user."""
    token = create_access_token(user.id, user.email, user.role_list)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def lease_at_step(client, tenant, rental_property):
    """Drive a fresh lease through the tenant steps and return its id."""
    def _advance(step):
        headers = auth(tenant)
        resp = client.post("/api/rent", json={"propertyId": rental_property.id}, headers=headers)
        assert resp.status_code == 201, resp.text
        lease_id = resp.json()["id"]
        if step >= 2:
            assert client.put(f"/api/rent/{lease_id}", json={"currentStep": 2}, headers=headers).status_code == 200
        if step >= 3:
            assert client.post(f"/api/rent/{lease_id}/verify", json=VERIFICATION, headers=headers).status_code == 200
        if step >= 4:
            assert client.post(f"/api/rent/{lease_id}/contract", headers=headers).status_code == 200
        if step >= 5:
            assert client.post(f"/api/rent/{lease_id}/otp", headers=headers).status_code == 200
            resp = client.post(f"/api/rent/{lease_id}/otp/verify", json={"code": "123456"}, headers=headers)
            assert resp.status_code == 200, resp.text
        return lease_id
    return _advance


def _lookup(data, path):
    value = data
    for key in path.split("."):
        value = value.get(key) if isinstance(value, dict) else None
    return "" if value is None else str(value)


def build_event(
    data,
    event_type="transaction.updated",
    properties=("transaction.id", "transaction.status", "transaction.amount_in_cents"),
    timestamp=1760875200,
    secret=EVENTS_SECRET,
):
    """A Wompi event signed the way the provider signs it."""
    concatenated = "".join(_lookup(data, p) for p in properties) + str(timestamp) + secret
    return {
        "event": event_type,
        "data": data,
        "environment": "test",
        "signature": {
            "properties": list(properties),
            "timestamp": timestamp,
            "checksum": hashlib.sha256(concatenated.encode("utf-8")).hexdigest(),
        },
        "timestamp": timestamp,
        "sent_at": "2026-10-19T12:00:00.000Z",
    }


def transaction_event(reference, status, txn_id="txn-0001", amount_in_cents=7500000, **kwargs):
    data = {
        "transaction": {
            "id": txn_id,
            "reference": reference,
            "status": status,
            "amount_in_cents": amount_in_cents,
            "currency": "COP",
            "payment_method_type": "CARD",
            "customer_email": "landlord@example.com",
            "finalized_at": "2026-10-19T12:00:00.000Z",
        }
    }
    return build_event(data, **kwargs)
