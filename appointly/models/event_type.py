# appointly/models/event_type.py
"""
EventType Model - configurable meeting templates
Carries its own duration, buffers, minimum notice and confirmation policy.
"""
from sqlalchemy import Column, String, Integer, ForeignKey, Boolean, DateTime, Text, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from appointly.models.base import Base


class EventType(Base):
    __tablename__ = "event_types"
    __table_args__ = (
        UniqueConstraint("creator_id", "slug", name="uq_event_types_creator_slug"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    creator_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    service_id = Column(Uuid(as_uuid=True), ForeignKey("services.id"), nullable=True)

    title = Column(String(200), nullable=False)
    slug = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    color = Column(String(20), default="#3788d8")

    # Scheduling rules (minutes)
    duration = Column(Integer, nullable=False)
    buffer_before = Column(Integer, default=0, nullable=False)
    buffer_after = Column(Integer, default=0, nullable=False)
    minimum_notice = Column(Integer, default=0, nullable=False)

    requires_confirmation = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    creator = relationship("User")
    service = relationship("Service")

    def __repr__(self):
        return f"<EventType(id={self.id}, slug={self.slug})>"

    def to_dict(self):
        return {
            "id": str(self.id),
            "business_id": str(self.business_id),
            "title": self.title,
            "slug": self.slug,
            "description": self.description,
            "location": self.location,
            "duration": self.duration,
            "buffer_before": self.buffer_before,
            "buffer_after": self.buffer_after,
            "minimum_notice": self.minimum_notice,
            "requires_confirmation": self.requires_confirmation,
            "is_active": self.is_active,
        }
