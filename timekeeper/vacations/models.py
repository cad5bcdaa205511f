from sqlalchemy import (
    Column, String, Date, DateTime, Integer, ForeignKey, Enum, Text, UniqueConstraint, Uuid
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from timekeeper.core.database import Base, generate_uuid


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def status_column():
    """Status column shared by every request table."""
    return Column(
        Enum(RequestStatus, values_callable=lambda e: [m.value for m in e], native_enum=False),
        nullable=False,
        default=RequestStatus.PENDING
    )


class VacationRequest(Base):
    __tablename__ = "vacation_requests"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=generate_uuid)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True)
    company_id = Column(Uuid(as_uuid=True), ForeignKey("companies.id"), index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    total_days = Column(Integer, nullable=False)
    status = status_column()
    reason = Column(Text)
    comments = Column(Text)
    approved_by = Column(Uuid(as_uuid=True), ForeignKey("profiles.id"))
    approved_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    employee = relationship("Profile", foreign_keys=[user_id])


class VacationBalance(Base):
    __tablename__ = "vacation_balance"
    __table_args__ = (
        UniqueConstraint("user_id", "year", name="uq_vacation_balance_user_year"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=generate_uuid)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True)
    company_id = Column(Uuid(as_uuid=True), ForeignKey("companies.id"), index=True)
    year = Column(Integer, nullable=False)  # vacation-period year (March of this year)
    total_days = Column(Integer, nullable=False, default=22)
    used_days = Column(Integer, nullable=False, default=0)
    remaining_days = Column(Integer, nullable=False, default=22)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
