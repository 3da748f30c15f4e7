# routers/webhooks.py
"""
Wompi event endpoint.

Receives payment events, verifies their checksum and updates payments.
The X-Event-Checksum header, when present, is authoritative over the
checksum inside the body.
"""
from typing import Optional

from fastapi import APIRouter, Body, Depends, Header
from sqlalchemy.orm import Session

from database import get_session
from schemas.webhook import WebhookAck
from services import webhook_service

router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])


@router.post("/wompi", response_model=WebhookAck, response_model_exclude_none=True)
def wompi_webhook(
     payload: dict = Body(...),
     x_event_checksum: Optional[str] = Header(None),
     db: Session = Depends(get_session),
):
     """
     Receives Wompi payment results.

     Answers 401 on an invalid signature; the event is still stored for audit.
     """
     ack = webhook_service.ingest_event(db, payload, x_event_checksum)
     db.commit()
     return WebhookAck(**ack)


@router.get("/wompi")
def wompi_webhook_health():
     return {"service": "Wompi webhook handler", "status": "active"}
