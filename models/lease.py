# models/lease.py
import enum
from sqlalchemy import (
     Column, Integer, String, Numeric, Date, Text, DateTime, ForeignKey, Enum, CheckConstraint, func,
)
from sqlalchemy.orm import relationship
from .base import Base, new_uuid


class LeaseStatus(str, enum.Enum):
     """Workflow status of a rental application."""
     DRAFT = "draft"
     PENDING_SIGNATURE = "pending_signature"
     PENDING_LANDLORD_APPROVAL = "pending_landlord_approval"
     APPROVED = "approved"
     REJECTED = "rejected"
     CANCELLED = "cancelled"
     ACTIVE = "active"
     COMPLETED = "completed"


# Statuses that free the (property, tenant) pair for a new application
CLOSED_STATUSES = (LeaseStatus.REJECTED, LeaseStatus.CANCELLED, LeaseStatus.COMPLETED)

# Steps each in-flight status may be at
STEPS_BY_STATUS = {
     LeaseStatus.DRAFT: (1, 2, 3),
     LeaseStatus.PENDING_SIGNATURE: (4,),
     LeaseStatus.PENDING_LANDLORD_APPROVAL: (5,),
}

FINAL_STEP = 5


def is_consistent(status: LeaseStatus, step: int) -> bool:
     """Check a (status, step) pair against the workflow table."""
     allowed = STEPS_BY_STATUS.get(LeaseStatus(status))
     if allowed is None:
          # Closed and downstream statuses keep whatever step they left from
          return 1 <= step <= FINAL_STEP
     return step in allowed


class Lease(Base):
     """
     Lease model - one tenant's rental application for one property.

     Rent, currency and deposit are snapshotted from the property at creation
     so later property edits never alter an application in flight.
     """
     __tablename__ = "leases"
     __table_args__ = (
          CheckConstraint(
               "(status = 'draft' AND current_step IN (1, 2, 3))"
               " OR (status = 'pending_signature' AND current_step = 4)"
               " OR (status = 'pending_landlord_approval' AND current_step = 5)"
               " OR status NOT IN ('draft', 'pending_signature', 'pending_landlord_approval')",
               name="ck_leases_step_matches_status",
          ),
     )

     id = Column(String(36), primary_key=True, default=new_uuid)
     property_id = Column(String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
     tenant_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
     landlord_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

     # Pricing snapshot
     monthly_rent = Column(Numeric(12, 2), nullable=False)
     currency = Column(String(3), nullable=False, default="COP")
     deposit_amount = Column(Numeric(12, 2), nullable=True)

     # Lease period
     start_date = Column(Date, nullable=True)
     end_date = Column(Date, nullable=True)

     # Workflow
     status = Column(
          Enum(
               LeaseStatus,
               name="lease_status",
               native_enum=False,
               create_constraint=True,
               length=32,
               values_callable=lambda e: [m.value for m in e],
          ),
          default=LeaseStatus.DRAFT,
          nullable=False,
          index=True,
     )
     current_step = Column(Integer, nullable=False, default=1)

     # Contract and signature
     contract_content = Column(Text, nullable=True)
     tenant_signed_at = Column(DateTime, nullable=True)
     tenant_signature_hash = Column(String(64), nullable=True)  # SHA-256 hex length

     # Landlord decision
     landlord_responded_at = Column(DateTime, nullable=True)
     landlord_notes = Column(Text, nullable=True)

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     # Relationships
     property = relationship("Property", back_populates="leases")
     tenant = relationship("User", foreign_keys=[tenant_id])
     landlord = relationship("User", foreign_keys=[landlord_id])
     approval_fee = relationship("LeaseApprovalFee", back_populates="lease", uselist=False)
     otp_codes = relationship("OtpCode", back_populates="lease", cascade="all, delete-orphan")

     def __repr__(self):
          return f"<Lease(id={self.id}, status='{self.status.value}', step={self.current_step})>"
