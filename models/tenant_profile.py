# models/tenant_profile.py
from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from .base import Base, new_uuid


class TenantProfile(Base):
     """
     TenantProfile model - verification data a tenant submits at step 2.
     One row per user; overwritten on every submission and reused across leases.
     """
     __tablename__ = "tenant_profiles"

     id = Column(String(36), primary_key=True, default=new_uuid)
     user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)

     # ID verification
     document_type = Column(String(20), nullable=False)  # cc, ce, passport
     document_number = Column(String(50), nullable=False)

     # Occupation
     occupation = Column(String(255), nullable=False)
     monthly_income = Column(Numeric(12, 2), nullable=False)

     # Personal reference
     reference_name = Column(String(255), nullable=False)
     reference_phone = Column(String(50), nullable=False)
     reference_relation = Column(String(100), nullable=False)

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     # Relationships
     user = relationship("User", back_populates="tenant_profile")

     @property
     def is_complete(self) -> bool:
          return all([
               self.document_type,
               self.document_number,
               self.occupation,
               self.monthly_income is not None,
               self.reference_name,
               self.reference_phone,
               self.reference_relation,
          ])

     def __repr__(self):
          return f"<TenantProfile(user_id={self.user_id}, document='{self.document_type} {self.document_number}')>"
