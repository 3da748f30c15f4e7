# models/__init__.py
from .base import Base
from .user import User
from .property import Property
from .lease import Lease, LeaseStatus
from .tenant_profile import TenantProfile
from .otp_code import OtpCode
from .payment_transaction import PaymentTransaction, PaymentStatus
from .lease_approval_fee import LeaseApprovalFee
from .webhook_event import WebhookEvent

__all__ = [
     "Base",
     "User",
     "Property",
     "Lease",
     "LeaseStatus",
     "TenantProfile",
     "OtpCode",
     "PaymentTransaction",
     "PaymentStatus",
     "LeaseApprovalFee",
     "WebhookEvent",
]
