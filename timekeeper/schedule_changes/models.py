from sqlalchemy import Column, Date, DateTime, ForeignKey, Text, Time, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from timekeeper.core.database import Base, generate_uuid
from timekeeper.vacations.models import status_column


class ScheduleChangeRequest(Base):
    __tablename__ = "schedule_changes"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=generate_uuid)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True)
    company_id = Column(Uuid(as_uuid=True), ForeignKey("companies.id"), index=True)
    requested_date = Column(Date, nullable=False)
    current_check_in = Column(Time)
    current_check_out = Column(Time)
    requested_check_in = Column(Time, nullable=False)
    requested_check_out = Column(Time, nullable=False)
    reason = Column(Text, nullable=False)
    status = status_column()
    admin_comments = Column(Text)
    approved_by = Column(Uuid(as_uuid=True), ForeignKey("profiles.id"))
    approved_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    employee = relationship("Profile", foreign_keys=[user_id])
