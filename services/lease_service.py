# services/lease_service.py
"""
Lease Service - the rental application state machine.

Workflow (status / current_step):
     draft / 1 -> draft / 2 -> draft / 3 -> pending_signature / 4
          -> pending_landlord_approval / 5 -> approved | rejected

Every transition is a compare-and-set: the UPDATE only matches the row while
it still holds the expected (status, step). When another request got there
first no row matches and the transition is refused instead of overwriting.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from models import Lease, LeaseStatus, Property, TenantProfile, LeaseApprovalFee, User
from models.lease import CLOSED_STATUSES, is_consistent
from services.authorization import (
     Principal,
     ROLE_TENANT,
     can_request_lease,
     require_landlord,
     require_role,
     require_tenant,
     require_view,
)
from services.contract_service import generate_lease_contract
from services.errors import ActiveLeaseExists, NotFound, PaymentRequired, PreconditionFailed
from utils.time import utcnow

logger = logging.getLogger(__name__)

ACTION_APPROVE = "approve"
ACTION_REJECT = "reject"


# ---------------------------------------------------------------------------
# Loading and guards
# ---------------------------------------------------------------------------

def load_lease(db: Session, lease_id: str) -> Lease:
     lease = db.get(Lease, lease_id)
     if lease is None:
          raise NotFound("Lease not found")
     return lease


def load_profile(db: Session, user_id: str) -> Optional[TenantProfile]:
     return db.query(TenantProfile).filter(TenantProfile.user_id == user_id).first()


def require_state(lease: Lease, status: LeaseStatus, step: Optional[int] = None, message: Optional[str] = None) -> None:
     """Raise PreconditionFailed unless the lease is at the given status (and step)."""
     if lease.status != status or (step is not None and lease.current_step != step):
          logger.warning(
               "Guard refused lease %s: expected %s/%s, found %s/%s",
               lease.id, status.value, step, lease.status.value, lease.current_step,
          )
          raise PreconditionFailed(message)


def transition(
     db: Session,
     lease: Lease,
     from_status: LeaseStatus,
     from_step: int,
     to_status: LeaseStatus,
     to_step: int,
     **values,
) -> Lease:
     """
     Move a lease from one (status, step) to another atomically.

     Raises:
          PreconditionFailed: if the row no longer holds (from_status, from_step)
     """
     if not is_consistent(to_status, to_step):
          raise ValueError(f"Inconsistent target state {to_status.value}/{to_step}")

     values.update(status=to_status, current_step=to_step)
     updated = (
          db.query(Lease)
          .filter(
               Lease.id == lease.id,
               Lease.status == from_status,
               Lease.current_step == from_step,
          )
          .update(values, synchronize_session=False)
     )
     if updated != 1:
          logger.warning(
               "Lease %s transition %s/%s -> %s/%s lost a race",
               lease.id, from_status.value, from_step, to_status.value, to_step,
          )
          raise PreconditionFailed("This lease was modified by another request; reload and try again")

     db.refresh(lease)
     logger.info("Lease %s moved to %s/%s", lease.id, to_status.value, to_step)
     return lease


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def create_lease(db: Session, principal: Principal, property_id: str) -> Lease:
     """
     Open a rental application (draft / step 1) for a property.

     Raises:
          Forbidden: caller is not a tenant
          NotFound: property does not exist
          PreconditionFailed: property unavailable or owned by the caller
          ActiveLeaseExists: an open application for the pair already exists
     """
     require_role(principal, ROLE_TENANT)

     prop = db.query(Property).filter(Property.id == property_id).with_for_update().first()
     if prop is None:
          raise NotFound("Property not found")
     if not prop.is_available:
          raise PreconditionFailed("The property is not available")
     if not can_request_lease(principal, prop.owner_id):
          raise PreconditionFailed("You cannot rent your own property")

     existing = (
          db.query(Lease)
          .filter(
               Lease.property_id == prop.id,
               Lease.tenant_id == principal.id,
               Lease.status.notin_(CLOSED_STATUSES),
          )
          .order_by(Lease.created_at.desc())
          .first()
     )
     if existing is not None:
          logger.info("Tenant %s already has lease %s for property %s", principal.id, existing.id, prop.id)
          raise ActiveLeaseExists(existing.id)

     lease = Lease(
          property_id=prop.id,
          tenant_id=principal.id,
          landlord_id=prop.owner_id,
          monthly_rent=prop.price,
          currency=prop.currency,
          deposit_amount=prop.price,
          status=LeaseStatus.DRAFT,
          current_step=1,
     )
     db.add(lease)
     db.flush()
     logger.info("Lease %s created by tenant %s for property %s", lease.id, principal.id, prop.id)
     return lease


def get_lease(db: Session, principal: Principal, lease_id: str) -> Lease:
     lease = load_lease(db, lease_id)
     require_view(principal, lease)
     return lease


def list_leases(db: Session, principal: Principal, as_role: str = "tenant") -> list[Lease]:
     """Leases the caller applied for (tenant) or received (landlord), newest first."""
     query = db.query(Lease)
     if as_role == "landlord":
          query = query.filter(Lease.landlord_id == principal.id)
     else:
          query = query.filter(Lease.tenant_id == principal.id)
     return query.order_by(Lease.created_at.desc()).all()


def start_verification(db: Session, principal: Principal, lease_id: str) -> Lease:
     """Step 1 -> 2: the tenant has reviewed the summary."""
     lease = load_lease(db, lease_id)
     require_tenant(principal, lease)
     require_state(lease, LeaseStatus.DRAFT, 1)
     return transition(db, lease, LeaseStatus.DRAFT, 1, LeaseStatus.DRAFT, 2)


def submit_verification(db: Session, principal: Principal, lease_id: str, profile_data: dict) -> Lease:
     """
     Step 2 -> 3: upsert the tenant's verification profile.

     The profile belongs to the user, not the lease, so a later application
     reuses (and overwrites) it.
     """
     lease = load_lease(db, lease_id)
     require_tenant(principal, lease)
     require_state(lease, LeaseStatus.DRAFT, 2)

     profile = load_profile(db, principal.id)
     if profile is None:
          profile = TenantProfile(user_id=principal.id, **profile_data)
          db.add(profile)
     else:
          for key, value in profile_data.items():
               setattr(profile, key, value)
     db.flush()

     return transition(db, lease, LeaseStatus.DRAFT, 2, LeaseStatus.DRAFT, 3)


def _render_contract(db: Session, lease: Lease) -> str:
     profile = load_profile(db, lease.tenant_id)
     if profile is None or not profile.is_complete:
          raise PreconditionFailed("The tenant profile is not complete")

     return generate_lease_contract(
          property=lease.property,
          landlord=db.get(User, lease.landlord_id),
          tenant=db.get(User, lease.tenant_id),
          tenant_profile=profile,
          lease=lease,
     )


def preview_contract(db: Session, principal: Principal, lease_id: str) -> str:
     lease = load_lease(db, lease_id)
     require_view(principal, lease)
     return _render_contract(db, lease)


def accept_contract(db: Session, principal: Principal, lease_id: str) -> Lease:
     """Step 3 -> 4: persist the generated contract and await signature."""
     lease = load_lease(db, lease_id)
     require_tenant(principal, lease)
     require_state(lease, LeaseStatus.DRAFT, 3)

     contract_html = _render_contract(db, lease)
     return transition(
          db,
          lease,
          LeaseStatus.DRAFT,
          3,
          LeaseStatus.PENDING_SIGNATURE,
          4,
          contract_content=contract_html,
     )


def record_tenant_signature(db: Session, lease: Lease, signed_at, signature_hash: str) -> Lease:
     """Step 4 -> 5. Called by the OTP signer inside its unit of work."""
     return transition(
          db,
          lease,
          LeaseStatus.PENDING_SIGNATURE,
          4,
          LeaseStatus.PENDING_LANDLORD_APPROVAL,
          5,
          tenant_signed_at=signed_at,
          tenant_signature_hash=signature_hash,
     )


def respond(db: Session, principal: Principal, lease_id: str, action: str, notes: Optional[str] = None) -> Lease:
     """
     Landlord decision on a signed lease.

     Approval is gated on the approval fee having been paid; this function
     only reads that flag.

     Raises:
          PaymentRequired: approve requested while the fee is missing or unpaid
     """
     lease = load_lease(db, lease_id)
     require_landlord(principal, lease)
     require_state(
          lease,
          LeaseStatus.PENDING_LANDLORD_APPROVAL,
          message="This lease is not pending approval",
     )

     if action == ACTION_APPROVE:
          fee = db.query(LeaseApprovalFee).filter(LeaseApprovalFee.lease_id == lease.id).first()
          if fee is None or not fee.is_paid:
               logger.info("Lease %s approval blocked: approval fee unpaid", lease.id)
               raise PaymentRequired(lease.id)
          new_status = LeaseStatus.APPROVED
     elif action == ACTION_REJECT:
          new_status = LeaseStatus.REJECTED
     else:
          raise ValueError(f"Unknown action: {action}")

     return transition(
          db,
          lease,
          LeaseStatus.PENDING_LANDLORD_APPROVAL,
          lease.current_step,
          new_status,
          lease.current_step,
          landlord_responded_at=utcnow(),
          landlord_notes=notes or None,
     )
