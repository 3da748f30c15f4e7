# models/lease_approval_fee.py
from sqlalchemy import Column, String, Numeric, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from .base import Base, new_uuid


class LeaseApprovalFee(Base):
     """
     LeaseApprovalFee model - the fee a landlord pays before approving a lease.

     The inputs of the calculation (rent, percentage) are stored with the
     result so a later change of the configured rate does not rewrite history.
     `is_paid` is only ever set by the webhook ingestor.
     """
     __tablename__ = "lease_approval_fees"

     id = Column(String(36), primary_key=True, default=new_uuid)
     lease_id = Column(String(36), ForeignKey("leases.id", ondelete="CASCADE"), nullable=False, unique=True)
     payment_transaction_id = Column(
          String(36),
          ForeignKey("payment_transactions.id"),
          nullable=False,
          index=True
     )

     monthly_rent = Column(Numeric(12, 2), nullable=False)
     fee_percentage = Column(Numeric(5, 2), nullable=False)
     fee_amount = Column(Numeric(12, 2), nullable=False)

     is_paid = Column(Boolean, nullable=False, default=False)
     paid_at = Column(DateTime, nullable=True)

     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     # Relationships
     lease = relationship("Lease", back_populates="approval_fee")
     payment = relationship("PaymentTransaction")

     def __repr__(self):
          return f"<LeaseApprovalFee(lease_id={self.lease_id}, amount={self.fee_amount}, is_paid={self.is_paid})>"
