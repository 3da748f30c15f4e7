# schemas/webhook.py
"""
Pydantic schemas for Wompi event notifications.

Only the transaction envelope is typed; the raw event is always kept as
received on the WebhookEvent audit row.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class PaymentMethodInfo(BaseModel):
     type: Optional[str] = None

     model_config = ConfigDict(extra="allow")


class ProviderTransaction(BaseModel):
     """`data.transaction` of a transaction.updated event."""
     id: str
     reference: str
     status: str = Field(..., description="APPROVED, DECLINED, VOIDED, ERROR or PENDING")
     amount_in_cents: Optional[int] = None
     currency: Optional[str] = None
     customer_email: Optional[str] = None
     payment_method_type: Optional[str] = None
     payment_method: Optional[PaymentMethodInfo] = None
     finalized_at: Optional[str] = None

     model_config = ConfigDict(extra="allow")

     @property
     def method(self) -> Optional[str]:
          method = (self.payment_method.type if self.payment_method else None) or self.payment_method_type
          return method.lower() if method else None


class WebhookAck(BaseModel):
     received: bool = True
     processed: Optional[bool] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {"received": True, "processed": True}
          }
     )
