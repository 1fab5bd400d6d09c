#!/usr/bin/env python3
"""
Script to create a demo business with one owner, a service, an event type
and default working hours
Usage: python -m appointly.scripts.seed_demo_business
"""
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from appointly.config.database import SessionLocal, create_tables
from appointly.models import Business, EventType, Service, StaffRole, User
from appointly.repositories.working_hours_repository import WorkingHoursRepository
from appointly.utils.my_logging import setup_logging

logger = logging.getLogger(__name__)


def seed_demo_business():
    """Create the demo business and print the ids needed to query it"""
    db: Session = SessionLocal()

    try:
        business = Business(
            name="Sunset Physiotherapy",
            slug="sunset-physio",
            timezone="America/New_York",
            buffer_before=0,
            buffer_after=15,
        )
        db.add(business)
        db.flush()

        owner = User(
            business_id=business.id,
            email="owner@sunset-physio.example",
            name="Demo Owner",
            username="sunset-owner",
            role=StaffRole.OWNER,
        )
        db.add(owner)
        db.flush()

        service = Service(
            business_id=business.id,
            name="Initial Assessment",
            description="First visit with a full assessment",
            duration=60,
        )
        event_type = EventType(
            business_id=business.id,
            creator_id=owner.id,
            title="Follow-up Call",
            slug="follow-up-call",
            duration=30,
            buffer_before=5,
            buffer_after=5,
            minimum_notice=120,
            requires_confirmation=False,
        )
        db.add_all([service, event_type])

        # Business-wide defaults; staff rows would override per weekday
        WorkingHoursRepository(db).create_defaults(business.id)

        db.commit()

        logger.info("Demo business created")
        print(f"business_id:   {business.id}")
        print(f"staff_id:      {owner.id}")
        print(f"service_id:    {service.id}")
        print(f"event_type_id: {event_type.id}")

    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error seeding demo business: {e}", exc_info=True)
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    setup_logging()
    create_tables()
    seed_demo_business()
