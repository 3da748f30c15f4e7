# schemas/payment.py
"""
Pydantic schemas for the approval fee payment API.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import ConfigDict, Field

from schemas.base import CamelModel


class ApprovalFeeCreateRequest(CamelModel):
     """Body of POST /api/payments/approval-fee/create."""
     lease_id: UUID = Field(..., description="Lease pending landlord approval")


class CheckoutResponse(CamelModel):
     checkout_url: Optional[str]
     payment_id: str
     reference: str
     amount: Decimal
     amount_in_cents: int
     currency: str
     integrity_signature: str
     public_key: str

     model_config = CamelModel.model_config | ConfigDict(
          json_schema_extra={
               "example": {
                    "checkoutUrl": "https://checkout.wompi.co/p/?reference=LEASE-...",
                    "paymentId": "6f1c...",
                    "reference": "LEASE-2b7e...-1735689600000",
                    "amount": "75000",
                    "amountInCents": 7500000,
                    "currency": "COP",
                    "integritySignature": "a1b2c3...",
                    "publicKey": "pub_test_...",
               }
          }
     )


class PaymentStatusResponse(CamelModel):
     is_paid: bool
     status: Optional[str] = None
     amount: Optional[Decimal] = None
     paid_at: Optional[datetime] = None
     checkout_url: Optional[str] = None
     reference: Optional[str] = None
     message: Optional[str] = None
