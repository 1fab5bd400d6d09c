# ============================================================================
# FILE: appointly/models/user.py
# Staff members (owners and employees) of a business
# ============================================================================
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Uuid, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
import enum
from appointly.models.base import Base


class StaffRole(str, enum.Enum):
    """User roles within a business."""
    OWNER = "owner"
    STAFF = "staff"


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id"), nullable=True, index=True)

    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    username = Column(String(100), unique=True, nullable=True)

    role = Column(SQLEnum(StaffRole), default=StaffRole.STAFF, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    business = relationship("Business", back_populates="staff")
    working_hours = relationship("WorkingHours", back_populates="user")

    def to_dict(self):
        """Public staff fields (no credentials live on this table)"""
        return {
            "id": str(self.id),
            "business_id": str(self.business_id) if self.business_id else None,
            "name": self.name,
            "email": self.email,
            "username": self.username,
            "role": self.role.value if self.role else None,
        }

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
