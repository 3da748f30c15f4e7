# services/otp_service.py
"""
OTP Signer - one-time codes used to electronically sign a lease.

1. request_code: mint a 6-digit code for (lease, tenant), valid for a fixed
   window, unless a live one already exists.
2. verify_code: consume a matching unused code and, in the same unit of
   work, advance the lease to pending_landlord_approval with a SHA-256
   signature hash over code, lease id, user id and signing time.
"""
import hashlib
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from config import settings
from models import Lease, LeaseStatus, OtpCode, User
from services.authorization import Principal, require_tenant
from services.errors import Expired, InvalidCode, PreconditionFailed
from services.lease_service import load_lease, record_tenant_signature, require_state
from services.notifier import OtpNotifier
from utils.time import to_iso_utc, utcnow

logger = logging.getLogger(__name__)

OTP_LENGTH = 6
TEST_OTP = "123456"


def generate_code() -> str:
     """Random numeric code, leading zeros preserved. Fixed in test mode."""
     if settings.otp_test_mode:
          return TEST_OTP
     return f"{secrets.randbelow(10 ** OTP_LENGTH):0{OTP_LENGTH}d}"


def get_expiry(now: datetime) -> datetime:
     return now + timedelta(minutes=settings.otp_expiry_minutes)


def create_signature_hash(code: str, lease_id: str, user_id: str, signed_at: datetime) -> str:
     """
     SHA-256 over code:lease_id:user_id:signed_at (ISO 8601 UTC).
     Returns 64-char hex string.
     """
     payload = ":".join([code, lease_id, user_id, to_iso_utc(signed_at)])
     return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _require_signable(principal: Principal, lease: Lease) -> None:
     require_tenant(principal, lease)
     require_state(lease, LeaseStatus.PENDING_SIGNATURE, 4, "The contract is not ready to be signed")


def find_live_code(db: Session, lease_id: str, user_id: str, now: datetime) -> Optional[OtpCode]:
     return (
          db.query(OtpCode)
          .filter(
               OtpCode.lease_id == lease_id,
               OtpCode.user_id == user_id,
               OtpCode.used_at.is_(None),
               OtpCode.expires_at > now,
          )
          .order_by(OtpCode.expires_at.desc())
          .first()
     )


def request_code(
     db: Session,
     principal: Principal,
     lease_id: str,
     notifier: Optional[OtpNotifier] = None,
) -> dict:
     """
     Issue a signature code, or report the live one.

     Repeated requests while a code is live return that code's expiry and
     mint nothing. The code itself is only included outside production.
     """
     lease = load_lease(db, lease_id)
     _require_signable(principal, lease)

     now = utcnow()
     live = find_live_code(db, lease.id, principal.id, now)
     if live is not None:
          return {
               "message": "You already have an active OTP code",
               "expires_at": live.expires_at,
               "code": None,
          }

     otp = OtpCode(
          user_id=principal.id,
          lease_id=lease.id,
          code=generate_code(),
          expires_at=get_expiry(now),
     )
     db.add(otp)
     db.flush()
     logger.info("OTP issued for lease %s (expires %s)", lease.id, otp.expires_at)

     if notifier is not None:
          user = db.get(User, principal.id)
          notifier.send(user.email if user else principal.email, otp.code, settings.otp_expiry_minutes)

     if settings.expose_otp_codes:
          return {
               "message": f"OTP code generated: {otp.code} (visible outside production only)",
               "expires_at": otp.expires_at,
               "code": otp.code,
          }
     return {
          "message": "A verification code has been sent to you",
          "expires_at": otp.expires_at,
          "code": None,
     }


def verify_code(db: Session, principal: Principal, lease_id: str, code: str) -> Lease:
     """
     Sign the lease with a previously issued code.

     Raises:
          InvalidCode: no unused code for (lease, user) matches
          Expired: the matching code is past its expiry (it stays unused)
          PreconditionFailed: the lease left step 4 concurrently; the code
               consumption is rolled back
     """
     lease = load_lease(db, lease_id)
     _require_signable(principal, lease)

     otp = (
          db.query(OtpCode)
          .filter(
               OtpCode.lease_id == lease.id,
               OtpCode.user_id == principal.id,
               OtpCode.code == code,
               OtpCode.used_at.is_(None),
          )
          .order_by(OtpCode.expires_at.desc())
          .first()
     )
     if otp is None:
          logger.warning("Invalid OTP submitted for lease %s", lease.id)
          raise InvalidCode()

     signed_at = utcnow()
     if otp.is_expired(signed_at):
          raise Expired()

     consumed = (
          db.query(OtpCode)
          .filter(OtpCode.id == otp.id, OtpCode.used_at.is_(None))
          .update({"used_at": signed_at}, synchronize_session=False)
     )
     if consumed != 1:
          raise InvalidCode()

     signature_hash = create_signature_hash(otp.code, lease.id, principal.id, signed_at)
     try:
          record_tenant_signature(db, lease, signed_at, signature_hash)
     except PreconditionFailed:
          db.rollback()
          raise

     logger.info("Lease %s signed by tenant %s", lease.id, principal.id)
     return lease
