# schemas/__init__.py
from .lease import (
     LeaseCreate,
     LeaseAdvance,
     TenantVerificationRequest,
     OtpVerifyRequest,
     LeaseRespondRequest,
     LeaseResponse,
     ContractResponse,
     OtpRequestResponse,
     LeaseActionResponse,
)
from .payment import ApprovalFeeCreateRequest, CheckoutResponse, PaymentStatusResponse
from .user import BecomeLandlordResponse
from .webhook import ProviderTransaction, WebhookAck

__all__ = [
     "LeaseCreate",
     "LeaseAdvance",
     "TenantVerificationRequest",
     "OtpVerifyRequest",
     "LeaseRespondRequest",
     "LeaseResponse",
     "ContractResponse",
     "OtpRequestResponse",
     "LeaseActionResponse",
     "ApprovalFeeCreateRequest",
     "CheckoutResponse",
     "PaymentStatusResponse",
     "BecomeLandlordResponse",
     "ProviderTransaction",
     "WebhookAck",
]
