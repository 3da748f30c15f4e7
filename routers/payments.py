# routers/payments.py
"""
Approval fee payment API.

POST /api/payments/approval-fee/create: landlord opens (or resumes) the Wompi
checkout for a lease's approval fee.
GET  /api/payments/approval-fee/{lease_id}/status: poll the fee state.

Marking a fee paid only happens through the Wompi webhook.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_current_principal
from schemas.payment import ApprovalFeeCreateRequest, CheckoutResponse, PaymentStatusResponse
from services import approval_fee_service
from services.authorization import Principal

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post("/approval-fee/create", response_model=CheckoutResponse, summary="Create approval fee payment")
def create_approval_fee(
     body: ApprovalFeeCreateRequest,
     db: Session = Depends(get_session),
     principal: Principal = Depends(get_current_principal),
):
     checkout = approval_fee_service.create_approval_fee(db, principal, str(body.lease_id))
     db.commit()
     return CheckoutResponse(**checkout)


@router.get(
     "/approval-fee/{lease_id}/status",
     response_model=PaymentStatusResponse,
     response_model_exclude_none=True,
)
def get_approval_fee_status(
     lease_id: str,
     db: Session = Depends(get_session),
     principal: Principal = Depends(get_current_principal),
):
     return PaymentStatusResponse(**approval_fee_service.get_payment_status(db, principal, lease_id))
