from sqlalchemy import (
    Column, String, Date, DateTime, Float, ForeignKey, Enum, SmallInteger, Text, UniqueConstraint, Uuid
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from timekeeper.core.database import Base, generate_uuid


class EntryStatus(str, enum.Enum):
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"


class TimeEntry(Base):
    __tablename__ = "time_entries"
    __table_args__ = (
        # Second concurrent check-in for the same day fails at commit time
        UniqueConstraint("user_id", "date", "segment", name="uq_time_entries_user_date_segment"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=generate_uuid)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True)
    company_id = Column(Uuid(as_uuid=True), ForeignKey("companies.id"), index=True)
    date = Column(Date, nullable=False, index=True)
    segment = Column(SmallInteger, nullable=False, default=0)  # 0 clock-in / morning, 1 afternoon block
    check_in_time = Column(DateTime)
    check_out_time = Column(DateTime)
    check_in_latitude = Column(Float)
    check_in_longitude = Column(Float)
    check_out_latitude = Column(Float)
    check_out_longitude = Column(Float)
    total_hours = Column(String(16))  # HH:MM:SS
    status = Column(
        Enum(EntryStatus, values_callable=lambda e: [m.value for m in e], native_enum=False),
        nullable=False,
        default=EntryStatus.CHECKED_IN
    )
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    employee = relationship("Profile")
