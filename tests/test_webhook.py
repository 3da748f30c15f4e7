"""
Wompi webhook ingestion: checksum validation, audit trail, payment and
fee updates, redelivery and ordering.
"""
from models import LeaseApprovalFee, PaymentStatus, PaymentTransaction, WebhookEvent
from tests.conftest import auth, build_event, transaction_event

WEBHOOK = "/api/webhooks/wompi"


def _checkout(client, landlord, lease_id):
    resp = client.post("/api/payments/approval-fee/create", json={"leaseId": lease_id}, headers=auth(landlord))
    return resp.json()["reference"]


def _state(db, reference):
    db.expire_all()
    payment = db.query(PaymentTransaction).filter_by(reference=reference).one()
    fee = db.query(LeaseApprovalFee).filter_by(lease_id=payment.lease_id).one()
    return payment, fee


def test_tampered_event_is_rejected_and_audited(client, db, landlord, lease_at_step):
    reference = _checkout(client, landlord, lease_at_step(5))
    event = transaction_event(reference, "DECLINED")
    event["data"]["transaction"]["status"] = "APPROVED"

    resp = client.post(WEBHOOK, json=event)
    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid signature"

    record = db.query(WebhookEvent).one()
    assert record.is_valid is False
    assert record.processed is False
    assert record.reference == reference
    assert len(record.calculated_checksum) == 64

    payment, fee = _state(db, reference)
    assert payment.status == PaymentStatus.PENDING
    assert fee.is_paid is False


def test_wrong_secret(client, db, landlord, lease_at_step):
    reference = _checkout(client, landlord, lease_at_step(5))
    resp = client.post(WEBHOOK, json=transaction_event(reference, "APPROVED", secret="guessed"))
    assert resp.status_code == 401
    assert _state(db, reference)[1].is_paid is False


def test_missing_signature(client, db):
    resp = client.post(WEBHOOK, json={"event": "transaction.updated", "data": {}})
    assert resp.status_code == 401
    assert db.query(WebhookEvent).one().is_valid is False


def test_approved_marks_fee_paid(client, db, landlord, lease_at_step):
    reference = _checkout(client, landlord, lease_at_step(5))
    resp = client.post(WEBHOOK, json=transaction_event(reference, "APPROVED"))
    assert resp.json() == {"received": True, "processed": True}

    payment, fee = _state(db, reference)
    assert payment.status == PaymentStatus.APPROVED
    assert payment.provider_transaction_id == "txn-0001"
    assert payment.paid_at is not None
    assert fee.is_paid is True
    assert fee.paid_at is not None

    record = db.query(WebhookEvent).one()
    assert record.is_valid and record.processed
    assert record.payment_transaction_id == payment.id


def test_declined_leaves_fee_unpaid(client, db, landlord, lease_at_step):
    reference = _checkout(client, landlord, lease_at_step(5))
    client.post(WEBHOOK, json=transaction_event(reference, "DECLINED"))
    payment, fee = _state(db, reference)
    assert payment.status == PaymentStatus.DECLINED
    assert fee.is_paid is False


def test_pending_maps_to_processing(client, db, landlord, lease_at_step):
    reference = _checkout(client, landlord, lease_at_step(5))
    client.post(WEBHOOK, json=transaction_event(reference, "PENDING"))
    assert _state(db, reference)[0].status == PaymentStatus.PROCESSING


def test_voided_sets_voided_at(client, db, landlord, lease_at_step):
    reference = _checkout(client, landlord, lease_at_step(5))
    client.post(WEBHOOK, json=transaction_event(reference, "VOIDED"))
    payment, _ = _state(db, reference)
    assert payment.status == PaymentStatus.VOIDED
    assert payment.voided_at is not None


def test_unknown_reference_is_acknowledged(client, db):
    resp = client.post(WEBHOOK, json=transaction_event("LEASE-missing-1", "APPROVED"))
    assert resp.status_code == 200
    assert resp.json() == {"received": True, "processed": False}
    assert db.query(WebhookEvent).one().error_message == "Payment not found in database"


def test_other_event_types_are_acknowledged(client, db):
    event = build_event(
        {"nequi_token": {"id": "nequi-1", "status": "APPROVED"}},
        event_type="nequi_token.updated",
        properties=("nequi_token.id", "nequi_token.status"),
    )
    resp = client.post(WEBHOOK, json=event)
    assert resp.status_code == 200
    assert resp.json() == {"received": True}
    assert db.query(WebhookEvent).one().processed is True


def test_header_checksum_takes_precedence(client, db, landlord, lease_at_step):
    reference = _checkout(client, landlord, lease_at_step(5))
    event = transaction_event(reference, "APPROVED")
    valid = event["signature"]["checksum"]

    event["signature"]["checksum"] = "0" * 64
    resp = client.post(WEBHOOK, json=event, headers={"X-Event-Checksum": valid.upper()})
    assert resp.status_code == 200

    event["signature"]["checksum"] = valid
    resp = client.post(WEBHOOK, json=event, headers={"X-Event-Checksum": "0" * 64})
    assert resp.status_code == 401


def test_duplicate_delivery_is_a_no_op(client, db, landlord, lease_at_step):
    reference = _checkout(client, landlord, lease_at_step(5))
    event = transaction_event(reference, "APPROVED")
    client.post(WEBHOOK, json=event)
    first_paid_at = _state(db, reference)[1].paid_at

    resp = client.post(WEBHOOK, json=event)
    assert resp.json() == {"received": True, "processed": True}
    assert _state(db, reference)[1].paid_at == first_paid_at

    records = db.query(WebhookEvent).order_by(WebhookEvent.created_at).all()
    assert len(records) == 2
    assert any(r.error_message == "Duplicate delivery; already applied" for r in records)


def test_approved_payment_never_reverts(client, db, landlord, lease_at_step):
    lease_id = lease_at_step(5)
    reference = _checkout(client, landlord, lease_id)
    client.post(WEBHOOK, json=transaction_event(reference, "APPROVED"))

    resp = client.post(WEBHOOK, json=transaction_event(reference, "DECLINED", txn_id="txn-0002"))
    assert resp.json() == {"received": True, "processed": False}

    payment, fee = _state(db, reference)
    assert payment.status == PaymentStatus.APPROVED
    assert fee.is_paid is True

    resp = client.post(f"/api/rent/{lease_id}/respond", json={"action": "approve"}, headers=auth(landlord))
    assert resp.status_code == 200


def test_late_approval_of_replaced_attempt(client, db, landlord, lease_at_step):
    """Money arriving on an older attempt still pays the fee."""
    lease_id = lease_at_step(5)
    first = _checkout(client, landlord, lease_id)
    client.post(WEBHOOK, json=transaction_event(first, "DECLINED", txn_id="txn-a"))
    second = _checkout(client, landlord, lease_id)
    assert second != first

    client.post(WEBHOOK, json=transaction_event(first, "APPROVED", txn_id="txn-a"))

    db.expire_all()
    fee = db.query(LeaseApprovalFee).filter_by(lease_id=lease_id).one()
    assert fee.is_paid is True
    assert fee.payment.reference == first


def test_webhook_health(client):
    resp = client.get(WEBHOOK)
    assert resp.json()["status"] == "active"


def test_numeric_checksum_is_audited_and_rejected(client, db, landlord, lease_at_step):
    reference = _checkout(client, landlord, lease_at_step(5))
    event = transaction_event(reference, "APPROVED")
    event["signature"]["checksum"] = 12345

    resp = client.post(WEBHOOK, json=event)
    assert resp.status_code == 401

    record = db.query(WebhookEvent).one()
    assert record.is_valid is False
    assert record.received_checksum == "12345"
    assert _state(db, reference)[1].is_paid is False


def test_non_list_properties_are_audited_and_rejected(client, db, landlord, lease_at_step):
    reference = _checkout(client, landlord, lease_at_step(5))
    event = transaction_event(reference, "APPROVED")
    event["signature"]["properties"] = 7

    resp = client.post(WEBHOOK, json=event)
    assert resp.status_code == 401

    record = db.query(WebhookEvent).one()
    assert record.is_valid is False
    assert record.reference == reference
    assert _state(db, reference)[0].status == PaymentStatus.PENDING
