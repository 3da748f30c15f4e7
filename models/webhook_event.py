# models/webhook_event.py
"""
WebhookEvent model - append-only audit log of provider notifications.

Every delivery is recorded, forged or not. Rows are never modified except to
mark them processed (and link the payment they affected).
"""
from sqlalchemy import Column, String, Boolean, Text, DateTime, ForeignKey, func
from .base import Base, new_uuid


class WebhookEvent(Base):
     __tablename__ = "webhook_events"

     id = Column(String(36), primary_key=True, default=new_uuid)
     event_type = Column(String(100), nullable=False)
     provider_transaction_id = Column(String(255), nullable=True, index=True)
     reference = Column(String(255), nullable=True, index=True)

     payload = Column(Text, nullable=False)  # Raw JSON as received
     received_checksum = Column(String(128), nullable=True)
     calculated_checksum = Column(String(64), nullable=False)
     is_valid = Column(Boolean, nullable=False, default=False)

     processed = Column(Boolean, nullable=False, default=False)
     processed_at = Column(DateTime, nullable=True)
     error_message = Column(Text, nullable=True)
     payment_transaction_id = Column(String(36), ForeignKey("payment_transactions.id"), nullable=True)

     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     def __repr__(self):
          return f"<WebhookEvent(id={self.id}, type='{self.event_type}', valid={self.is_valid}, processed={self.processed})>"
