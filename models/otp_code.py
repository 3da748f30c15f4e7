# models/otp_code.py
"""
OtpCode model - one-time signature codes bound to a (lease, user) pair.

Several rows may exist per lease (a new code is minted once the previous one
expires). A row is consumed by setting used_at; consumed rows never verify again.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Index, func
from sqlalchemy.orm import relationship
from .base import Base, new_uuid


class OtpCode(Base):
     __tablename__ = "otp_codes"
     __table_args__ = (
          Index("ix_otp_codes_lease_user", "lease_id", "user_id"),
     )

     id = Column(String(36), primary_key=True, default=new_uuid)
     user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
     lease_id = Column(String(36), ForeignKey("leases.id", ondelete="CASCADE"), nullable=False)
     code = Column(String(6), nullable=False)
     expires_at = Column(DateTime, nullable=False)
     used_at = Column(DateTime, nullable=True)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     lease = relationship("Lease", back_populates="otp_codes")

     def is_expired(self, now) -> bool:
          return now > self.expires_at

     def is_live(self, now) -> bool:
          return self.used_at is None and not self.is_expired(now)

     def __repr__(self):
          return f"<OtpCode(id={self.id}, lease_id={self.lease_id}, expires_at={self.expires_at})>"
