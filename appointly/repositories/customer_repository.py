# appointly/repositories/customer_repository.py
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from appointly.models import Customer


class CustomerRepository:
    def __init__(self, db: Session):
        self.db = db

    def upsert_by_email(
            self, business_id: UUID, email: str, name: str, phone: Optional[str] = None
    ) -> Customer:
        """Create the customer, or refresh name and phone of the existing one."""
        email = email.strip().lower()
        customer = self.db.query(Customer).filter(
            Customer.business_id == business_id,
            Customer.email == email
        ).first()

        if customer is None:
            customer = Customer(business_id=business_id, email=email, name=name, phone=phone)
            self.db.add(customer)
        else:
            customer.name = name
            if phone is not None:
                customer.phone = phone

        self.db.flush()
        return customer
