# services/errors.py
"""
Domain errors raised by the service layer.

Each error knows its HTTP status and a user-facing message; `main.py` turns
them into JSON responses. Routers never catch these.
"""
from typing import Optional


class LeaseFlowError(Exception):
     """Base class for every expected failure of a rental operation."""
     status_code = 500
     default_message = "Internal server error"

     def __init__(self, message: Optional[str] = None, **extra):
          self.message = message or self.default_message
          self.extra = extra
          super().__init__(self.message)

     def to_payload(self) -> dict:
          return {"error": self.message, **self.extra}


class Unauthenticated(LeaseFlowError):
     status_code = 401
     default_message = "Not authenticated"


class Forbidden(LeaseFlowError):
     status_code = 403
     default_message = "You do not have permission to perform this action"


class NotFound(LeaseFlowError):
     status_code = 404
     default_message = "Resource not found"


class PreconditionFailed(LeaseFlowError):
     """A workflow guard did not hold (wrong status or step, missing data)."""
     status_code = 400
     default_message = "This step was already completed or is not valid yet"


class ActiveLeaseExists(PreconditionFailed):
     status_code = 409
     default_message = "You already have an active rental process for this property"

     def __init__(self, lease_id: str, message: Optional[str] = None):
          super().__init__(message, leaseId=lease_id)
          self.lease_id = lease_id


class AlreadyPaid(PreconditionFailed):
     default_message = "The approval fee for this lease has already been paid"


class InvalidCode(LeaseFlowError):
     status_code = 400
     default_message = "Invalid OTP code"

     def to_payload(self) -> dict:
          return {"error": self.message, "code": "invalid_code"}


class Expired(LeaseFlowError):
     status_code = 400
     default_message = "The OTP code has expired"

     def to_payload(self) -> dict:
          return {"error": self.message, "code": "expired_code"}


class PaymentRequired(LeaseFlowError):
     status_code = 402
     default_message = "You must pay the approval fee before approving this lease"

     def __init__(self, lease_id: str, message: Optional[str] = None):
          super().__init__(message, requiresPayment=True, leaseId=lease_id)


class SignatureInvalid(LeaseFlowError):
     status_code = 401
     default_message = "Invalid signature"


class ValidationError(LeaseFlowError):
     status_code = 400
     default_message = "Invalid data"

     def __init__(self, details: dict, message: Optional[str] = None):
          super().__init__(message, details=details)
