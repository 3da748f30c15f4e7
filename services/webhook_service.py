# services/webhook_service.py
"""
Webhook Ingestor - applies Wompi payment events.

1. Resolve the signed property paths and recompute the event checksum
2. Persist a WebhookEvent audit row (committed even when the event is forged)
3. Reject invalid signatures
4. Acknowledge event types other than transaction.updated
5. Update the PaymentTransaction found by reference and, on approval,
   flip the linked LeaseApprovalFee to paid

This is the only code path that sets LeaseApprovalFee.is_paid.

Redelivery of an event already applied (same provider transaction id and
status) is acknowledged without rewriting payment or fee rows, and an
approved payment is never moved back to another status.
"""
import json
import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from models import LeaseApprovalFee, PaymentStatus, PaymentTransaction, WebhookEvent
from schemas.webhook import ProviderTransaction
from services.errors import SignatureInvalid
from services.wompi import TRANSACTION_UPDATED, resolve_property, validate_event_checksum
from utils.time import parse_iso_utc, utcnow

logger = logging.getLogger(__name__)

STATUS_MAP = {
     "APPROVED": PaymentStatus.APPROVED,
     "DECLINED": PaymentStatus.DECLINED,
     "VOIDED": PaymentStatus.VOIDED,
     "ERROR": PaymentStatus.ERROR,
     "PENDING": PaymentStatus.PROCESSING,
}


def map_status(provider_status: str) -> PaymentStatus:
     return STATUS_MAP.get((provider_status or "").upper(), PaymentStatus.ERROR)


def _as_dict(value) -> dict:
     return value if isinstance(value, dict) else {}


def _mark_processed(
     record: WebhookEvent,
     payment: Optional[PaymentTransaction] = None,
     error_message: Optional[str] = None,
) -> None:
     record.processed = True
     record.processed_at = utcnow()
     if payment is not None:
          record.payment_transaction_id = payment.id
     if error_message:
          record.error_message = error_message


def record_event(db: Session, event: dict, header_checksum: Optional[str] = None) -> WebhookEvent:
     """Validate the event signature and commit the audit row."""
     signature = _as_dict(event.get("signature"))
     raw_properties = signature.get("properties")
     properties = [p for p in raw_properties if isinstance(p, str)] if isinstance(raw_properties, list) else []
     timestamp = signature.get("timestamp")
     # The header checksum is authoritative when present
     received = str(header_checksum or signature.get("checksum") or "")

     values = [resolve_property(event, path) for path in properties]
     is_valid, calculated = validate_event_checksum(values, timestamp, received)
     if not properties or timestamp is None:
          is_valid = False

     transaction = _as_dict(_as_dict(event.get("data")).get("transaction"))
     record = WebhookEvent(
          event_type=str(event.get("event") or "unknown")[:100],
          provider_transaction_id=str(transaction["id"])[:255] if transaction.get("id") is not None else None,
          reference=str(transaction["reference"])[:255] if transaction.get("reference") is not None else None,
          payload=json.dumps(event, default=str),
          received_checksum=received[:128] or None,
          calculated_checksum=calculated,
          is_valid=is_valid,
          processed=False,
     )
     db.add(record)
     db.commit()
     return record


def _apply_transaction(db: Session, record: WebhookEvent, txn: ProviderTransaction) -> dict:
     payment = (
          db.query(PaymentTransaction)
          .filter(PaymentTransaction.reference == txn.reference)
          .with_for_update()
          .first()
     )
     if payment is None:
          logger.warning("Webhook %s references unknown payment %s", record.id, txn.reference)
          _mark_processed(record, error_message="Payment not found in database")
          return {"received": True, "processed": False}

     new_status = map_status(txn.status)

     if payment.provider_transaction_id == txn.id and payment.status == new_status:
          logger.info("Webhook %s is a redelivery for payment %s", record.id, payment.reference)
          _mark_processed(record, payment, error_message="Duplicate delivery; already applied")
          return {"received": True, "processed": True}

     if payment.status == PaymentStatus.APPROVED and new_status != PaymentStatus.APPROVED:
          logger.warning(
               "Webhook %s tried to move approved payment %s to %s",
               record.id, payment.reference, new_status.value,
          )
          _mark_processed(record, payment, error_message=f"Ignored {txn.status} for an approved payment")
          return {"received": True, "processed": False}

     now = utcnow()
     payment.provider_transaction_id = txn.id
     payment.status = new_status
     payment.payment_method = txn.method
     payment.paid_at = None
     payment.voided_at = None
     if new_status == PaymentStatus.APPROVED:
          try:
               payment.paid_at = parse_iso_utc(txn.finalized_at) if txn.finalized_at else now
          except ValueError:
               payment.paid_at = now
     elif new_status == PaymentStatus.VOIDED:
          payment.voided_at = now

     if new_status == PaymentStatus.APPROVED:
          fee = (
               db.query(LeaseApprovalFee)
               .filter(LeaseApprovalFee.payment_transaction_id == payment.id)
               .first()
          )
          if fee is None and payment.lease_id:
               # The fee moved on to a newer attempt; the money arrived on this one
               fee = db.query(LeaseApprovalFee).filter(LeaseApprovalFee.lease_id == payment.lease_id).first()
               if fee is not None and not fee.is_paid:
                    fee.payment = payment
          if fee is not None and not fee.is_paid:
               fee.is_paid = True
               fee.paid_at = now
               logger.info("Approval fee for lease %s paid (%s)", fee.lease_id, payment.reference)

     _mark_processed(record, payment)
     db.flush()
     logger.info("Payment %s updated to %s by webhook %s", payment.reference, new_status.value, record.id)
     return {"received": True, "processed": True}


def ingest_event(db: Session, event: dict, header_checksum: Optional[str] = None) -> dict:
     """
     Process one provider notification.

     Returns:
          Acknowledgement dict ({"received": True, "processed": bool?})

     Raises:
          SignatureInvalid: checksum mismatch (after the audit row is stored)
     """
     record = record_event(db, event, header_checksum)

     if not record.is_valid:
          logger.warning(
               "Invalid webhook signature for event %s (received %s)",
               record.id, record.received_checksum,
          )
          raise SignatureInvalid()

     if record.event_type != TRANSACTION_UPDATED:
          _mark_processed(record)
          db.flush()
          return {"received": True}

     try:
          txn = ProviderTransaction.model_validate(_as_dict(event.get("data")).get("transaction"))
     except PydanticValidationError:
          logger.warning("Webhook %s carries a malformed transaction payload", record.id)
          _mark_processed(record, error_message="Malformed transaction payload")
          db.flush()
          return {"received": True, "processed": False}

     return _apply_transaction(db, record, txn)
