from sqlalchemy import Column, String, Boolean, DateTime, Text, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from timekeeper.core.database import Base, generate_uuid


class User(Base):
    """Platform identity used to authenticate bearer tokens."""

    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    profile = relationship("Profile", back_populates="user", uselist=False)
