from sqlalchemy import Column, String, Boolean, DateTime, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from timekeeper.core.database import Base, generate_uuid


class Company(Base):
    __tablename__ = "companies"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    address = Column(String(500))
    contact_email = Column(String(255))
    contact_phone = Column(String(20))
    logo_url = Column(String(500))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    profiles = relationship("Profile", back_populates="company")
