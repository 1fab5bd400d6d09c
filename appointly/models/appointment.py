# ===== appointly/models/appointment.py =====
from sqlalchemy import Column, Text, DateTime, ForeignKey, Uuid, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
import uuid
from .base import Base


class AppointmentStatus(str, enum.Enum):
    """Appointment lifecycle. CANCELLED and COMPLETED are terminal."""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"

    @property
    def blocks_time(self) -> bool:
        """Every status except CANCELLED occupies its interval"""
        return self is not AppointmentStatus.CANCELLED

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self]

    def can_transition_to(self, target: "AppointmentStatus") -> bool:
        return target in ALLOWED_TRANSITIONS[self]


ALLOWED_TRANSITIONS = {
    AppointmentStatus.PENDING: frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.CONFIRMED: frozenset({AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED}),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.COMPLETED: frozenset(),
}


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_staff_start", "staff_id", "start_time"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id"), nullable=False, index=True)
    staff_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    service_id = Column(Uuid(as_uuid=True), ForeignKey("services.id"), nullable=True)
    event_type_id = Column(Uuid(as_uuid=True), ForeignKey("event_types.id"), nullable=True)
    customer_id = Column(Uuid(as_uuid=True), ForeignKey("customers.id"), nullable=False)

    # Unbuffered interval, business wall-clock time
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)

    status = Column(SQLEnum(AppointmentStatus), default=AppointmentStatus.PENDING, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    service = relationship("Service")
    event_type = relationship("EventType")
    staff = relationship("User")
    customer = relationship("Customer")

    def __repr__(self):
        return f"<Appointment(id={self.id}, staff_id={self.staff_id}, {self.start_time}-{self.end_time}, {self.status})>"

    def to_dict(self, include_relations: bool = True):
        """Convert to dictionary for API responses"""
        data = {
            "id": str(self.id),
            "business_id": str(self.business_id),
            "staff_id": str(self.staff_id),
            "service_id": str(self.service_id) if self.service_id else None,
            "event_type_id": str(self.event_type_id) if self.event_type_id else None,
            "customer_id": str(self.customer_id),
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "status": self.status.value,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "cancelled_at": self.cancelled_at.isoformat() if self.cancelled_at else None,
        }

        if include_relations:
            data.update({
                "service": self.service.to_dict() if self.service else None,
                "event_type": self.event_type.to_dict() if self.event_type else None,
                "staff": self.staff.to_dict() if self.staff else None,
                "customer": self.customer.to_dict() if self.customer else None,
            })

        return data
