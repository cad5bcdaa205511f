from sqlalchemy import (
    Column, String, DateTime, ForeignKey, Integer, Numeric, Enum, UniqueConstraint, Uuid
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from timekeeper.core.database import Base, generate_uuid


class PayrollStatus(str, enum.Enum):
    DRAFT = "draft"
    APPROVED = "approved"
    PAID = "paid"


class PayrollRecord(Base):
    __tablename__ = "payroll_records"
    __table_args__ = (
        UniqueConstraint("user_id", "month", "year", name="uq_payroll_records_user_month_year"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=generate_uuid)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True)
    company_id = Column(Uuid(as_uuid=True), ForeignKey("companies.id"), index=True)
    month = Column(Integer, nullable=False)  # 1-12
    year = Column(Integer, nullable=False)
    base_salary = Column(Numeric(10, 2), nullable=False)
    overtime_hours = Column(Numeric(8, 2), default=0)
    overtime_rate = Column(Numeric(8, 2), default=0)
    deductions = Column(Numeric(10, 2), default=0)
    bonuses = Column(Numeric(10, 2), default=0)
    net_salary = Column(Numeric(10, 2), nullable=False)
    status = Column(
        Enum(PayrollStatus, values_callable=lambda e: [m.value for m in e], native_enum=False),
        nullable=False,
        default=PayrollStatus.DRAFT
    )
    file_url = Column(String(500))
    created_by = Column(Uuid(as_uuid=True), ForeignKey("profiles.id"))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    employee = relationship("Profile", foreign_keys=[user_id])
