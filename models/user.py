# models/user.py
from sqlalchemy import Column, String, DateTime, func
from sqlalchemy.orm import relationship
from .base import Base, new_uuid

ROLE_TENANT = "tenant"
ROLE_LANDLORD = "landlord"
ROLE_ADMIN = "admin"
VALID_ROLES = (ROLE_TENANT, ROLE_LANDLORD, ROLE_ADMIN)


class User(Base):
     """
     User model - central identity table.
     Roles are stored comma-separated (tenant, landlord, admin).
     """
     __tablename__ = "users"

     id = Column(String(36), primary_key=True, default=new_uuid)
     email = Column(String(255), unique=True, nullable=False, index=True)
     name = Column(String(255), nullable=True)
     phone = Column(String(50), nullable=True)
     password_hash = Column(String(255), nullable=True)
     roles = Column(String(100), nullable=False, default=ROLE_TENANT)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     # Relationships
     properties = relationship("Property", back_populates="owner")
     tenant_profile = relationship("TenantProfile", back_populates="user", uselist=False)

     @property
     def role_list(self) -> list[str]:
          return [r for r in (self.roles or "").split(",") if r]

     def add_role(self, role: str) -> None:
          if role not in VALID_ROLES:
               raise ValueError(f"Unknown role: {role}")
          if role not in self.role_list:
               self.roles = ",".join(self.role_list + [role])

     def __repr__(self):
          return f"<User(id={self.id}, email='{self.email}', roles='{self.roles}')>"
