"""
Workflow guards: ownership, step order, duplicate applications and
compare-and-set transitions.
"""
import pytest

from models import Lease, LeaseStatus
from models.lease import is_consistent
from services import lease_service
from services.authorization import Principal
from services.errors import PreconditionFailed
from tests.conftest import VERIFICATION, auth


class TestCreateLease:
    def test_requires_authentication(self, client, rental_property):
        resp = client.post("/api/rent", json={"propertyId": rental_property.id})
        assert resp.status_code == 401

    def test_duplicate_open_lease_returns_existing_id(self, client, tenant, rental_property):
        first = client.post("/api/rent", json={"propertyId": rental_property.id}, headers=auth(tenant))
        second = client.post("/api/rent", json={"propertyId": rental_property.id}, headers=auth(tenant))
        assert second.status_code == 409
        assert second.json()["leaseId"] == first.json()["id"]

    def test_cannot_rent_own_property(self, client, landlord, rental_property):
        resp = client.post("/api/rent", json={"propertyId": rental_property.id}, headers=auth(landlord))
        assert resp.status_code == 400

    def test_unknown_property(self, client, tenant):
        resp = client.post(
            "/api/rent",
            json={"propertyId": "00000000-0000-0000-0000-000000000000"},
            headers=auth(tenant),
        )
        assert resp.status_code == 404

    def test_invalid_body(self, client, tenant):
        resp = client.post("/api/rent", json={"propertyId": "not-a-uuid"}, headers=auth(tenant))
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid data"
        assert "propertyId" in resp.json()["details"]

    def test_landlord_only_account_cannot_apply(self, client, make_user, rental_property):
        owner_only = make_user("owner@example.com", roles=("landlord",))
        resp = client.post("/api/rent", json={"propertyId": rental_property.id}, headers=auth(owner_only))
        assert resp.status_code == 403


class TestStepGuards:
    def test_cannot_skip_to_verification(self, client, tenant, lease_at_step):
        lease_id = lease_at_step(1)
        resp = client.post(f"/api/rent/{lease_id}/verify", json=VERIFICATION, headers=auth(tenant))
        assert resp.status_code == 400

    def test_only_step_two_can_be_requested(self, client, tenant, lease_at_step):
        lease_id = lease_at_step(1)
        resp = client.put(f"/api/rent/{lease_id}", json={"currentStep": 4}, headers=auth(tenant))
        assert resp.status_code == 400

    def test_repeating_a_step_is_refused(self, client, tenant, lease_at_step):
        lease_id = lease_at_step(2)
        resp = client.put(f"/api/rent/{lease_id}", json={"currentStep": 2}, headers=auth(tenant))
        assert resp.status_code == 400

    def test_contract_requires_verification(self, client, tenant, lease_at_step):
        lease_id = lease_at_step(2)
        assert client.post(f"/api/rent/{lease_id}/contract", headers=auth(tenant)).status_code == 400

    def test_landlord_cannot_drive_tenant_steps(self, client, landlord, lease_at_step):
        lease_id = lease_at_step(1)
        resp = client.put(f"/api/rent/{lease_id}", json={"currentStep": 2}, headers=auth(landlord))
        assert resp.status_code == 403

    def test_respond_before_signature(self, client, landlord, lease_at_step):
        lease_id = lease_at_step(4)
        resp = client.post(f"/api/rent/{lease_id}/respond", json={"action": "reject"}, headers=auth(landlord))
        assert resp.status_code == 400

    def test_tenant_cannot_respond(self, client, tenant, lease_at_step):
        lease_id = lease_at_step(5)
        resp = client.post(f"/api/rent/{lease_id}/respond", json={"action": "reject"}, headers=auth(tenant))
        assert resp.status_code == 403

    def test_stranger_cannot_view(self, client, make_user, lease_at_step):
        lease_id = lease_at_step(1)
        stranger = make_user("stranger@example.com")
        assert client.get(f"/api/rent/{lease_id}", headers=auth(stranger)).status_code == 403

    def test_admin_can_view(self, client, admin, lease_at_step):
        lease_id = lease_at_step(1)
        assert client.get(f"/api/rent/{lease_id}", headers=auth(admin)).status_code == 200

    def test_unknown_lease(self, client, tenant):
        assert client.get("/api/rent/does-not-exist", headers=auth(tenant)).status_code == 404

    def test_unknown_route(self, client):
        resp = client.get("/api/nothing-here")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Route not found"}


class TestCompareAndSet:
    def test_stale_read_loses_the_race(self, client, db, tenant, lease_at_step):
        """A request holding an outdated copy of the lease cannot overwrite a newer state."""
        lease_id = lease_at_step(1)
        stale = db.get(Lease, lease_id)
        assert stale.current_step == 1

        resp = client.put(f"/api/rent/{lease_id}", json={"currentStep": 2}, headers=auth(tenant))
        assert resp.status_code == 200

        with pytest.raises(PreconditionFailed):
            lease_service.transition(db, stale, LeaseStatus.DRAFT, 1, LeaseStatus.DRAFT, 2)
        db.rollback()

        db.expire_all()
        assert db.get(Lease, lease_id).current_step == 2

    def test_guard_uses_loaded_state(self, db, tenant, lease_at_step):
        lease_id = lease_at_step(3)
        principal = Principal.of(tenant.id, ["tenant"])
        with pytest.raises(PreconditionFailed):
            lease_service.start_verification(db, principal, lease_id)

    def test_inconsistent_target_rejected(self, db, lease_at_step):
        lease = db.get(Lease, lease_at_step(1))
        with pytest.raises(ValueError):
            lease_service.transition(db, lease, LeaseStatus.DRAFT, 1, LeaseStatus.PENDING_SIGNATURE, 2)


@pytest.mark.parametrize(
    "status, step, expected",
    [
        (LeaseStatus.DRAFT, 1, True),
        (LeaseStatus.DRAFT, 3, True),
        (LeaseStatus.DRAFT, 4, False),
        (LeaseStatus.PENDING_SIGNATURE, 4, True),
        (LeaseStatus.PENDING_SIGNATURE, 3, False),
        (LeaseStatus.PENDING_LANDLORD_APPROVAL, 5, True),
        (LeaseStatus.PENDING_LANDLORD_APPROVAL, 4, False),
        (LeaseStatus.APPROVED, 5, True),
        (LeaseStatus.CANCELLED, 2, True),
    ],
)
def test_status_step_consistency(status, step, expected):
    assert is_consistent(status, step) is expected
