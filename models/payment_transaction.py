# models/payment_transaction.py
import enum
from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey, Enum, func
from .base import Base, new_uuid


class PaymentStatus(str, enum.Enum):
     """Lifecycle of one payment attempt at the provider."""
     PENDING = "pending"
     PROCESSING = "processing"
     APPROVED = "approved"
     DECLINED = "declined"
     VOIDED = "voided"
     ERROR = "error"


# A fee whose payment ended in one of these may be retried with a new payment
RETRYABLE_STATUSES = (PaymentStatus.DECLINED, PaymentStatus.VOIDED, PaymentStatus.ERROR)


class PaymentPurpose(str, enum.Enum):
     APPROVAL_FEE = "approval_fee"


class PaymentTransaction(Base):
     """
     PaymentTransaction model - one attempt to pay through Wompi.

     `reference` is ours, globally unique, and is echoed back by the provider in
     every webhook; it is the lookup key for incoming events.
     """
     __tablename__ = "payment_transactions"

     id = Column(String(36), primary_key=True, default=new_uuid)
     reference = Column(String(255), nullable=False, unique=True, index=True)
     provider_transaction_id = Column(String(255), nullable=True, index=True)

     amount = Column(Numeric(12, 2), nullable=False)
     currency = Column(String(3), nullable=False, default="COP")
     status = Column(
          Enum(
               PaymentStatus,
               name="payment_status",
               native_enum=False,
               create_constraint=True,
               length=20,
               values_callable=lambda e: [m.value for m in e],
          ),
          default=PaymentStatus.PENDING,
          nullable=False,
          index=True,
     )
     payment_method = Column(String(50), nullable=True)

     # Checkout
     integrity_signature = Column(String(64), nullable=False)
     checkout_url = Column(String(1000), nullable=True)

     # Metadata
     user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
     lease_id = Column(String(36), ForeignKey("leases.id"), nullable=True, index=True)
     purpose = Column(String(50), nullable=False, default=PaymentPurpose.APPROVAL_FEE.value)

     paid_at = Column(DateTime, nullable=True)
     voided_at = Column(DateTime, nullable=True)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     def __repr__(self):
          return f"<PaymentTransaction(id={self.id}, reference='{self.reference}', status='{self.status.value}')>"
