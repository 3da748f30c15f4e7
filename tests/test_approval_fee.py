"""
Approval fee checkout: landlord only, idempotent while outstanding,
retryable after a failed payment.
"""
from decimal import Decimal
from types import SimpleNamespace

from database import SessionLocal
from models import LeaseApprovalFee, PaymentStatus, PaymentTransaction
from services import approval_fee_service
from services.authorization import Principal
from tests.conftest import auth, transaction_event


def _create(client, user, lease_id):
    return client.post("/api/payments/approval-fee/create", json={"leaseId": lease_id}, headers=auth(user))


def test_checkout_is_idempotent(client, db, landlord, lease_at_step):
    lease_id = lease_at_step(5)
    first = _create(client, landlord, lease_id)
    second = _create(client, landlord, lease_id)

    assert first.status_code == second.status_code == 200
    assert first.json()["reference"] == second.json()["reference"]
    assert first.json()["checkoutUrl"] == second.json()["checkoutUrl"]
    assert db.query(PaymentTransaction).count() == 1


def test_fee_snapshot(client, db, landlord, lease_at_step):
    lease_id = lease_at_step(5)
    body = _create(client, landlord, lease_id).json()
    assert body["currency"] == "COP"
    assert body["publicKey"] == "pub_test_key"
    assert len(body["integritySignature"]) == 64

    fee = db.query(LeaseApprovalFee).filter_by(lease_id=lease_id).one()
    assert int(fee.fee_amount) == 75000
    assert int(fee.fee_percentage) == 5
    assert fee.is_paid is False


def test_only_the_landlord_pays(client, tenant, lease_at_step):
    lease_id = lease_at_step(5)
    assert _create(client, tenant, lease_id).status_code == 403


def test_lease_must_be_signed(client, landlord, lease_at_step):
    lease_id = lease_at_step(4)
    assert _create(client, landlord, lease_id).status_code == 400


def test_already_paid(client, landlord, lease_at_step):
    lease_id = lease_at_step(5)
    reference = _create(client, landlord, lease_id).json()["reference"]
    client.post("/api/webhooks/wompi", json=transaction_event(reference, "APPROVED"))

    resp = _create(client, landlord, lease_id)
    assert resp.status_code == 400
    assert "already been paid" in resp.json()["error"]


def test_retry_after_declined(client, db, landlord, lease_at_step):
    lease_id = lease_at_step(5)
    first = _create(client, landlord, lease_id).json()["reference"]
    client.post("/api/webhooks/wompi", json=transaction_event(first, "DECLINED"))

    second = _create(client, landlord, lease_id)
    assert second.status_code == 200
    assert second.json()["reference"] != first

    db.expire_all()
    fee = db.query(LeaseApprovalFee).filter_by(lease_id=lease_id).one()
    assert fee.payment.reference == second.json()["reference"]
    assert db.query(PaymentTransaction).count() == 2


def test_status_poll(client, tenant, landlord, lease_at_step):
    lease_id = lease_at_step(5)
    resp = client.get(f"/api/payments/approval-fee/{lease_id}/status", headers=auth(tenant))
    assert resp.json() == {"isPaid": False, "message": "No payment has been created"}

    reference = _create(client, landlord, lease_id).json()["reference"]
    resp = client.get(f"/api/payments/approval-fee/{lease_id}/status", headers=auth(landlord))
    assert resp.json()["status"] == "pending"
    assert resp.json()["reference"] == reference
    assert resp.json()["isPaid"] is False


def test_status_poll_forbidden_for_strangers(client, make_user, lease_at_step):
    lease_id = lease_at_step(5)
    stranger = make_user("stranger@example.com")
    resp = client.get(f"/api/payments/approval-fee/{lease_id}/status", headers=auth(stranger))
    assert resp.status_code == 403


def test_concurrent_creation_returns_the_winner(monkeypatch, db, landlord, lease_at_step):
    """The request that loses the insert race hands back the winner's checkout."""
    lease_id = lease_at_step(5)
    find_fee = approval_fee_service._find_fee
    calls = []

    def racing_find_fee(session, fee_lease_id):
        if not calls:
            calls.append(fee_lease_id)
            other = SessionLocal()
            payment = PaymentTransaction(
                reference=f"LEASE-{fee_lease_id}-1",
                amount=Decimal("75000"),
                currency="COP",
                status=PaymentStatus.PENDING,
                integrity_signature="0" * 64,
                checkout_url="https://checkout.wompi.co/p/?reference=winner",
                user_id=landlord.id,
                lease_id=fee_lease_id,
            )
            other.add(LeaseApprovalFee(
                lease_id=fee_lease_id,
                payment=payment,
                monthly_rent=Decimal("1500000"),
                fee_percentage=Decimal("5"),
                fee_amount=Decimal("75000"),
                is_paid=False,
            ))
            other.commit()
            other.close()
            return None
        return find_fee(session, fee_lease_id)

    monkeypatch.setattr(approval_fee_service, "_find_fee", racing_find_fee)

    checkout = approval_fee_service.create_approval_fee(db, Principal.of(landlord.id, ["landlord"]), lease_id)
    db.commit()

    assert checkout["reference"] == f"LEASE-{lease_id}-1"
    db.expire_all()
    assert db.query(LeaseApprovalFee).filter_by(lease_id=lease_id).count() == 1
    assert db.query(PaymentTransaction).count() == 1


def test_retry_in_the_same_millisecond_gets_a_new_reference(monkeypatch, client, db, landlord, lease_at_step):
    monkeypatch.setattr(approval_fee_service, "time", SimpleNamespace(time=lambda: 1760875200.0))
    lease_id = lease_at_step(5)
    first = _create(client, landlord, lease_id).json()["reference"]
    assert first == f"LEASE-{lease_id}-1760875200000"
    client.post("/api/webhooks/wompi", json=transaction_event(first, "DECLINED"))

    second = _create(client, landlord, lease_id)
    assert second.status_code == 200
    assert second.json()["reference"] == f"LEASE-{lease_id}-1760875200001"

    db.expire_all()
    fee = db.query(LeaseApprovalFee).filter_by(lease_id=lease_id).one()
    assert fee.payment.reference == second.json()["reference"]
    assert fee.payment.status == PaymentStatus.PENDING
