# services/approval_fee_service.py
"""
Approval Fee Service - the payment a landlord makes before approving a lease.

create_approval_fee is idempotent while a payment is outstanding: a second
call returns the same reference and checkout URL instead of opening another
payment intent. The lease row is locked for the check-then-insert, and the
unique constraint on lease_approval_fees.lease_id settles any race that
slips through (the loser re-reads the winner's payment).
"""
import logging
import time

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import settings
from models import Lease, LeaseApprovalFee, LeaseStatus, PaymentTransaction, PaymentStatus
from models.payment_transaction import PaymentPurpose, RETRYABLE_STATUSES
from services.authorization import Principal, require_landlord, require_view
from services.errors import AlreadyPaid, NotFound
from services.lease_service import load_lease, require_state
from services.wompi import (
     build_checkout_url,
     calculate_approval_fee,
     generate_integrity_signature,
     generate_payment_reference,
     to_cents,
)

logger = logging.getLogger(__name__)


def _checkout_data(fee: LeaseApprovalFee, payment: PaymentTransaction) -> dict:
     return {
          "checkout_url": payment.checkout_url,
          "payment_id": payment.id,
          "reference": payment.reference,
          "amount": fee.fee_amount,
          "amount_in_cents": to_cents(payment.amount),
          "currency": payment.currency,
          "integrity_signature": payment.integrity_signature,
          "public_key": settings.wompi_public_key,
     }


def _find_fee(db: Session, lease_id: str):
     return db.query(LeaseApprovalFee).filter(LeaseApprovalFee.lease_id == lease_id).first()


def _new_reference(db: Session, lease_id: str) -> str:
     """Next unused LEASE-{lease_id}-{epoch_millis}; bumps the millisecond on a clash."""
     timestamp_ms = int(time.time() * 1000)
     reference = generate_payment_reference(lease_id, timestamp_ms)
     while db.query(PaymentTransaction.id).filter(PaymentTransaction.reference == reference).first() is not None:
          timestamp_ms += 1
          reference = generate_payment_reference(lease_id, timestamp_ms)
     return reference


def create_approval_fee(db: Session, principal: Principal, lease_id: str) -> dict:
     """
     Create (or return the outstanding) approval fee payment for a lease.

     Raises:
          NotFound: lease does not exist
          Forbidden: caller is not the lease's landlord
          PreconditionFailed: lease is not pending landlord approval
          AlreadyPaid: the fee has been paid
     """
     lease = db.query(Lease).filter(Lease.id == lease_id).with_for_update().first()
     if lease is None:
          raise NotFound("Lease not found")
     require_landlord(principal, lease)
     require_state(lease, LeaseStatus.PENDING_LANDLORD_APPROVAL, message="The lease is not pending approval")

     fee = _find_fee(db, lease.id)
     if fee is not None:
          if fee.is_paid or fee.payment.status == PaymentStatus.APPROVED:
               raise AlreadyPaid()
          if fee.payment.status not in RETRYABLE_STATUSES:
               logger.info("Returning outstanding payment %s for lease %s", fee.payment.reference, lease.id)
               return _checkout_data(fee, fee.payment)

     percentage = settings.approval_fee_percentage
     amount = calculate_approval_fee(lease.monthly_rent, percentage)
     amount_in_cents = to_cents(amount)
     reference = _new_reference(db, lease.id)
     signature = generate_integrity_signature(reference, amount_in_cents, lease.currency)

     payment = PaymentTransaction(
          reference=reference,
          amount=amount,
          currency=lease.currency,
          status=PaymentStatus.PENDING,
          integrity_signature=signature,
          checkout_url=build_checkout_url(reference, amount_in_cents, lease.currency, signature),
          user_id=principal.id,
          lease_id=lease.id,
          purpose=PaymentPurpose.APPROVAL_FEE.value,
     )
     db.add(payment)

     if fee is None:
          fee = LeaseApprovalFee(lease_id=lease.id, is_paid=False)
          db.add(fee)
     # A declined / voided / failed attempt is replaced by the new payment
     fee.payment = payment
     fee.monthly_rent = lease.monthly_rent
     fee.fee_percentage = percentage
     fee.fee_amount = amount

     try:
          db.flush()
     except IntegrityError:
          db.rollback()
          existing = _find_fee(db, lease_id)
          if existing is None:
               raise
          if existing.is_paid:
               raise AlreadyPaid()
          logger.info("Concurrent approval fee creation for lease %s; reusing %s", lease_id, existing.payment.reference)
          return _checkout_data(existing, existing.payment)

     logger.info("Approval fee %s (%s %s) created for lease %s", reference, amount, lease.currency, lease.id)
     return _checkout_data(fee, payment)


def get_payment_status(db: Session, principal: Principal, lease_id: str) -> dict:
     """Payment status poll for the lease's tenant, landlord or an admin."""
     lease = load_lease(db, lease_id)
     require_view(principal, lease)

     fee = _find_fee(db, lease.id)
     if fee is None:
          return {"is_paid": False, "status": None, "message": "No payment has been created"}

     return {
          "is_paid": fee.is_paid,
          "status": fee.payment.status.value,
          "amount": fee.fee_amount,
          "paid_at": fee.paid_at,
          "checkout_url": fee.payment.checkout_url,
          "reference": fee.payment.reference,
     }
