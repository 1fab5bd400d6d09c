# appointly/models/business.py
"""
Business Model - tenant root
Every staff member, service, event type, customer and appointment belongs to
exactly one business, and every query is scoped by business_id.
"""
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from appointly.config.settings import get_settings
from appointly.models.base import Base


class Business(Base):
    __tablename__ = "businesses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    slug = Column(String(100), nullable=True, unique=True)

    # Stored for display; slot computation runs in the business's wall-clock time
    timezone = Column(String(50), default=lambda: get_settings().DEFAULT_TIMEZONE)

    # Default buffers applied to service bookings (minutes)
    buffer_before = Column(Integer, default=0, nullable=False)
    buffer_after = Column(Integer, default=0, nullable=False)

    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    staff = relationship("User", back_populates="business")
    services = relationship("Service", back_populates="business")

    def __repr__(self):
        return f"<Business(id={self.id}, name={self.name})>"

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "name": self.name,
            "slug": self.slug,
            "timezone": self.timezone,
            "buffer_before": self.buffer_before,
            "buffer_after": self.buffer_after,
            "is_active": self.is_active,
        }
