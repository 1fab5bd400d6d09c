# appointly/repositories/working_hours_repository.py
import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from appointly.models import WorkingHours
from appointly.services.availability.types import WorkingHoursRule

logger = logging.getLogger(__name__)

# Mon-Fri 09:00-17:00, weekends closed (0=Sunday, 6=Saturday)
DEFAULT_START_TIME = "09:00"
DEFAULT_END_TIME = "17:00"
DEFAULT_CLOSED_DAYS = (0, 6)


class WorkingHoursRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_for_day(self, business_id: UUID, staff_id: Optional[UUID], weekday: int) -> Optional[WorkingHoursRule]:
        """Staff-specific rule for the weekday, falling back to the business default."""
        row = None
        if staff_id is not None:
            row = self.db.query(WorkingHours).filter(
                WorkingHours.business_id == business_id,
                WorkingHours.user_id == staff_id,
                WorkingHours.day_of_week == weekday
            ).first()

        if row is None:
            row = self.db.query(WorkingHours).filter(
                WorkingHours.business_id == business_id,
                WorkingHours.user_id.is_(None),
                WorkingHours.day_of_week == weekday
            ).first()

        if row is None:
            return None

        return WorkingHoursRule.from_model(row)

    def create_defaults(self, business_id: UUID, staff_id: Optional[UUID] = None) -> List[WorkingHours]:
        """Seed a full week of working hours; weekdays open, weekends disabled."""
        rows = [
            WorkingHours(
                business_id=business_id,
                user_id=staff_id,
                day_of_week=day,
                start_time=DEFAULT_START_TIME,
                end_time=DEFAULT_END_TIME,
                is_enabled=day not in DEFAULT_CLOSED_DAYS,
            )
            for day in range(7)
        ]
        self.db.add_all(rows)
        self.db.flush()

        logger.info(f"Created default working hours for business {business_id} staff {staff_id}")
        return rows
