# routers/leases.py
"""
Rental workflow API.

Step flow for a tenant:
     POST /api/rent                       -> draft, step 1
     PUT  /api/rent/{id}                  -> step 2
     POST /api/rent/{id}/verify           -> step 3
     POST /api/rent/{id}/contract         -> pending_signature, step 4
     POST /api/rent/{id}/otp[/verify]     -> pending_landlord_approval, step 5
Landlord:
     POST /api/rent/{id}/respond          -> approved | rejected
"""
from typing import List, Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_current_principal
from schemas.lease import (
     ContractResponse,
     LeaseActionResponse,
     LeaseAdvance,
     LeaseCreate,
     LeaseRespondRequest,
     LeaseResponse,
     OtpRequestResponse,
     OtpVerifyRequest,
     TenantVerificationRequest,
)
from services import lease_service, otp_service
from services.authorization import Principal
from services.notifier import OtpNotifier, get_notifier

router = APIRouter(prefix="/api/rent", tags=["rent"])


def _lease_response(lease) -> LeaseResponse:
     return LeaseResponse.model_validate(lease)


@router.post(
     "",
     response_model=LeaseResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Start a rental process",
)
def create_lease(
     body: LeaseCreate,
     db: Session = Depends(get_session),
     principal: Principal = Depends(get_current_principal),
):
     """
     Open a rental application for a property.

     Returns **409** with the existing `leaseId` when the tenant already has
     an open application for the same property, so the client can resume it.
     """
     lease = lease_service.create_lease(db, principal, str(body.property_id))
     db.commit()
     return _lease_response(lease)


@router.get("", response_model=List[LeaseResponse], summary="List my leases")
def list_leases(
     as_role: Literal["tenant", "landlord"] = Query("tenant", alias="as"),
     db: Session = Depends(get_session),
     principal: Principal = Depends(get_current_principal),
):
     return [_lease_response(lease) for lease in lease_service.list_leases(db, principal, as_role)]


@router.get("/{lease_id}", response_model=LeaseResponse)
def get_lease(
     lease_id: str,
     db: Session = Depends(get_session),
     principal: Principal = Depends(get_current_principal),
):
     return _lease_response(lease_service.get_lease(db, principal, lease_id))


@router.put("/{lease_id}", response_model=LeaseResponse, summary="Advance from summary to verification")
def advance_lease(
     lease_id: str,
     body: LeaseAdvance,
     db: Session = Depends(get_session),
     principal: Principal = Depends(get_current_principal),
):
     lease = lease_service.start_verification(db, principal, lease_id)
     db.commit()
     return _lease_response(lease)


@router.post("/{lease_id}/verify", response_model=LeaseResponse, summary="Submit tenant verification")
def submit_verification(
     lease_id: str,
     body: TenantVerificationRequest,
     db: Session = Depends(get_session),
     principal: Principal = Depends(get_current_principal),
):
     lease = lease_service.submit_verification(db, principal, lease_id, body.model_dump())
     db.commit()
     return _lease_response(lease)


@router.get("/{lease_id}/contract", response_model=ContractResponse)
def get_contract(
     lease_id: str,
     db: Session = Depends(get_session),
     principal: Principal = Depends(get_current_principal),
):
     return ContractResponse(contract_html=lease_service.preview_contract(db, principal, lease_id))


@router.post("/{lease_id}/contract", response_model=LeaseResponse, summary="Accept the generated contract")
def accept_contract(
     lease_id: str,
     db: Session = Depends(get_session),
     principal: Principal = Depends(get_current_principal),
):
     lease = lease_service.accept_contract(db, principal, lease_id)
     db.commit()
     return _lease_response(lease)


@router.post(
     "/{lease_id}/otp",
     response_model=OtpRequestResponse,
     response_model_exclude_none=True,
     summary="Request a signature code",
)
def request_otp(
     lease_id: str,
     db: Session = Depends(get_session),
     principal: Principal = Depends(get_current_principal),
     notifier: OtpNotifier = Depends(get_notifier),
):
     issued = otp_service.request_code(db, principal, lease_id, notifier)
     db.commit()
     return OtpRequestResponse(**issued)


@router.post("/{lease_id}/otp/verify", response_model=LeaseActionResponse, summary="Sign with a code")
def verify_otp(
     lease_id: str,
     body: OtpVerifyRequest,
     db: Session = Depends(get_session),
     principal: Principal = Depends(get_current_principal),
):
     lease = otp_service.verify_code(db, principal, lease_id, body.code)
     db.commit()
     return LeaseActionResponse(message="Contract signed successfully", lease=_lease_response(lease))


@router.post("/{lease_id}/respond", response_model=LeaseActionResponse, summary="Landlord decision")
def respond(
     lease_id: str,
     body: LeaseRespondRequest,
     db: Session = Depends(get_session),
     principal: Principal = Depends(get_current_principal),
):
     """
     Approve or reject a signed lease.

     Approval answers **402** with `requiresPayment: true` until the approval
     fee has been paid.
     """
     lease = lease_service.respond(db, principal, lease_id, body.action, body.notes)
     db.commit()
     message = "Contract approved successfully" if body.action == "approve" else "Contract rejected"
     return LeaseActionResponse(message=message, lease=_lease_response(lease))
