from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, Text, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from timekeeper.core.database import Base, generate_uuid
from timekeeper.vacations.models import status_column


class ExtraHour(Base):
    """Hours granted by an administrator; credited immediately."""

    __tablename__ = "extra_hours"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=generate_uuid)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True)
    company_id = Column(Uuid(as_uuid=True), ForeignKey("companies.id"), index=True)
    hours = Column(Float, nullable=False)
    date = Column(Date, nullable=False)
    reason = Column(Text)
    granted_by = Column(Uuid(as_uuid=True), ForeignKey("profiles.id"))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    employee = relationship("Profile", foreign_keys=[user_id])


class ExtraHoursRequest(Base):
    """Employee request to take accumulated hours off."""

    __tablename__ = "extra_hours_requests"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=generate_uuid)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True)
    company_id = Column(Uuid(as_uuid=True), ForeignKey("companies.id"), index=True)
    hours_requested = Column(Float, nullable=False)
    requested_date = Column(Date, nullable=False)
    reason = Column(Text)
    status = status_column()
    admin_comments = Column(Text)
    approved_by = Column(Uuid(as_uuid=True), ForeignKey("profiles.id"))
    approved_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    employee = relationship("Profile", foreign_keys=[user_id])


class CompensatoryDay(Base):
    __tablename__ = "compensatory_days"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=generate_uuid)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True)
    company_id = Column(Uuid(as_uuid=True), ForeignKey("companies.id"), index=True)
    date = Column(Date, nullable=False)
    days_count = Column(Integer, nullable=False, default=1)
    reason = Column(Text)
    granted_by = Column(Uuid(as_uuid=True), ForeignKey("profiles.id"))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    employee = relationship("Profile", foreign_keys=[user_id])
