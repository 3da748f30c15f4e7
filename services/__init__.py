# services/__init__.py
from . import (
     approval_fee_service,
     contract_service,
     lease_service,
     otp_service,
     webhook_service,
     wompi,
)
from .authorization import Principal
from .errors import (
     LeaseFlowError,
     Unauthenticated,
     Forbidden,
     NotFound,
     PreconditionFailed,
     ActiveLeaseExists,
     AlreadyPaid,
     InvalidCode,
     Expired,
     PaymentRequired,
     SignatureInvalid,
     ValidationError,
)

__all__ = [
     "approval_fee_service",
     "contract_service",
     "lease_service",
     "otp_service",
     "webhook_service",
     "wompi",
     "Principal",
     "LeaseFlowError",
     "Unauthenticated",
     "Forbidden",
     "NotFound",
     "PreconditionFailed",
     "ActiveLeaseExists",
     "AlreadyPaid",
     "InvalidCode",
     "Expired",
     "PaymentRequired",
     "SignatureInvalid",
     "ValidationError",
]
