# schemas/lease.py
"""
Pydantic schemas for the rental workflow API.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional
from uuid import UUID

from pydantic import Field

from models.lease import LeaseStatus
from schemas.base import CamelModel


class LeaseCreate(CamelModel):
     """Body of POST /api/rent."""
     property_id: UUID = Field(..., description="Property to rent")


class LeaseAdvance(CamelModel):
     """Body of PUT /api/rent/{lease_id}: the only client-driven step change is 1 -> 2."""
     current_step: Literal[2]


class TenantVerificationRequest(CamelModel):
     """Step 2: tenant verification profile."""
     document_type: Literal["cc", "ce", "passport"]
     document_number: str = Field(..., min_length=5, max_length=50)
     occupation: str = Field(..., min_length=3, max_length=255)
     monthly_income: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
     reference_name: str = Field(..., min_length=3, max_length=255)
     reference_phone: str = Field(..., min_length=7, max_length=50)
     reference_relation: str = Field(..., min_length=2, max_length=100)

     model_config = CamelModel.model_config | {
          "json_schema_extra": {
               "example": {
                    "documentType": "cc",
                    "documentNumber": "1020304050",
                    "occupation": "Software engineer",
                    "monthlyIncome": "6500000",
                    "referenceName": "Maria Lopez",
                    "referencePhone": "3001234567",
                    "referenceRelation": "Former landlord",
               }
          }
     }


class OtpVerifyRequest(CamelModel):
     code: str = Field(..., pattern=r"^\d{6}$", description="6-digit signature code")


class LeaseRespondRequest(CamelModel):
     action: Literal["approve", "reject"]
     notes: Optional[str] = Field(None, max_length=2000)


class PropertySummary(CamelModel):
     id: str
     title: str
     address: str
     city: str
     price: Decimal
     currency: str


class LeaseResponse(CamelModel):
     id: str
     property_id: str
     tenant_id: str
     landlord_id: str
     monthly_rent: Decimal
     currency: str
     deposit_amount: Optional[Decimal] = None
     start_date: Optional[date] = None
     end_date: Optional[date] = None
     status: LeaseStatus
     current_step: int
     contract_content: Optional[str] = None
     tenant_signed_at: Optional[datetime] = None
     tenant_signature_hash: Optional[str] = None
     landlord_responded_at: Optional[datetime] = None
     landlord_notes: Optional[str] = None
     created_at: Optional[datetime] = None
     updated_at: Optional[datetime] = None
     property: Optional[PropertySummary] = None


class ContractResponse(CamelModel):
     contract_html: str


class OtpRequestResponse(CamelModel):
     message: str
     expires_at: datetime
     code: Optional[str] = None


class LeaseActionResponse(CamelModel):
     """OTP verification and landlord response both return the updated lease."""
     message: str
     lease: LeaseResponse
