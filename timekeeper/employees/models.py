from sqlalchemy import Column, String, Boolean, Date, DateTime, ForeignKey, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from timekeeper.core.database import Base


class Role(str, enum.Enum):
    EMPLOYEE = "employee"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


ADMIN_ROLES = (Role.ADMIN.value, Role.SUPER_ADMIN.value)


class Profile(Base):
    """Employee record; shares its primary key with the platform identity."""

    __tablename__ = "profiles"

    id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), primary_key=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    role = Column(String(20), nullable=False, default=Role.EMPLOYEE.value)
    department = Column(String(100))
    employee_id = Column(String(50), unique=True)
    phone = Column(String(20))
    hire_date = Column(Date)
    company_id = Column(Uuid(as_uuid=True), ForeignKey("companies.id"), index=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="profile")
    company = relationship("Company", back_populates="profiles")

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES
