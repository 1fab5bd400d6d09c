# appointly/models/working_hours.py
from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
import uuid
from appointly.models.base import Base


class WorkingHours(Base):
    """Weekly open/close window for a staff member, or the business default when user_id is null"""
    __tablename__ = "working_hours"
    __table_args__ = (
        UniqueConstraint("business_id", "user_id", "day_of_week", name="uq_working_hours_owner_day"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)

    day_of_week = Column(Integer, nullable=False)  # 0=Sunday, 6=Saturday
    start_time = Column(String(5), nullable=False)  # HH:MM format
    end_time = Column(String(5), nullable=False)  # HH:MM format
    is_enabled = Column(Boolean, default=True, nullable=False)

    user = relationship("User", back_populates="working_hours")

    def __repr__(self):
        return f"<WorkingHours(day={self.day_of_week}, {self.start_time}-{self.end_time}, enabled={self.is_enabled})>"
