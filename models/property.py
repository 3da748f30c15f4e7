# models/property.py
from sqlalchemy import Column, Integer, String, Numeric, Boolean, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from .base import Base, new_uuid


class Property(Base):
     """
     Property model - a listing offered for rent by its owner.
     Only the fields the rental workflow reads are modelled here.
     """
     __tablename__ = "properties"

     id = Column(String(36), primary_key=True, default=new_uuid)
     owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
     title = Column(String(255), nullable=False)
     description = Column(Text, nullable=True)
     property_type = Column(String(20), nullable=False, default="apartment")  # apartment, house, room, studio, commercial

     # Pricing
     price = Column(Numeric(12, 2), nullable=False)
     currency = Column(String(3), nullable=False, default="COP")

     # Address
     address = Column(String(500), nullable=False)
     city = Column(String(100), nullable=False)
     neighborhood = Column(String(100), nullable=True)

     # Features
     bedrooms = Column(Integer, nullable=False, default=1)
     bathrooms = Column(Integer, nullable=False, default=1)
     area_sqm = Column(Numeric(8, 2), nullable=True)
     is_furnished = Column(Boolean, nullable=False, default=False)
     is_available = Column(Boolean, nullable=False, default=True)

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     # Relationships
     owner = relationship("User", back_populates="properties")
     leases = relationship("Lease", back_populates="property")

     def __repr__(self):
          return f"<Property(id={self.id}, title='{self.title}')>"
