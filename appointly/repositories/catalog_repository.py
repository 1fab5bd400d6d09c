# appointly/repositories/catalog_repository.py
"""Read access to staff, businesses, services and event types"""
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from appointly.models import Business, EventType, Service, User


class CatalogRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_staff(self, staff_id: UUID) -> Optional[User]:
        return self.db.query(User).filter(
            User.id == staff_id,
            User.is_active == True  # noqa: E712
        ).first()

    def get_business(self, business_id: UUID) -> Optional[Business]:
        return self.db.query(Business).filter(Business.id == business_id).first()

    def get_service(self, service_id: UUID) -> Optional[Service]:
        return self.db.query(Service).filter(
            Service.id == service_id,
            Service.is_active == True  # noqa: E712
        ).first()

    def get_event_type(self, event_type_id: UUID) -> Optional[EventType]:
        return self.db.query(EventType).filter(
            EventType.id == event_type_id,
            EventType.is_active == True  # noqa: E712
        ).first()
