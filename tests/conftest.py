"""
Shared fixtures: a frozen application clock and an in-memory database.

FROZEN_NOW is Monday 2025-06-02 08:00, so with the default two hour lead time
nothing before 10:00 that day can be booked. 2025-06-04 is a Wednesday
(day_of_week 3) and is the usual booking day in these tests.
"""
from datetime import date, datetime, time
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from booking.config.context import init_context, reset_context
from booking.models import Base, Service, Staff, Customer, WeeklyAvailability, BlockedDate, Appointment

FROZEN_NOW = datetime(2025, 6, 2, 8, 0)
MONDAY = date(2025, 6, 2)
WEDNESDAY = date(2025, 6, 4)
NEXT_WEDNESDAY = date(2025, 6, 11)


@pytest.fixture(autouse=True)
def frozen_context():
    reset_context()
    context = init_context(clock=lambda: FROZEN_NOW)
    yield context
    reset_context()


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


class Seeder:
    """Inserts rows with sensible defaults"""

    def __init__(self, db):
        self.db = db

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def service(self, duration=45, buffer_before=0, buffer_after=15, name="Haircut", price=Decimal("30.00")):
        return self._save(Service(
            id=uuid4(),
            name=name,
            duration=duration,
            buffer_before=buffer_before,
            buffer_after=buffer_after,
            price=price,
        ))

    def staff(self, name="Alex", email="alex@example.com"):
        return self._save(Staff(id=uuid4(), name=name, email=email))

    def customer(self, name="Sam", email="sam@example.com"):
        return self._save(Customer(id=uuid4(), name=name, email=email))

    def window(self, staff, day_of_week=3, start=time(9, 0), end=time(17, 0), is_available=True):
        return self._save(WeeklyAvailability(
            id=uuid4(),
            staff_id=staff.id,
            day_of_week=day_of_week,
            start_time=start,
            end_time=end,
            is_available=is_available,
        ))

    def blocked(self, staff, start_date, end_date=None, reason="Vacation"):
        return self._save(BlockedDate(
            id=uuid4(),
            staff_id=staff.id,
            start_date=start_date,
            end_date=end_date or start_date,
            reason=reason,
        ))

    def appointment(self, staff, service, day=WEDNESDAY, start=time(10, 0), end=None, status="confirmed"):
        if end is None:
            total = start.hour * 60 + start.minute + service.duration
            end = time(total // 60, total % 60)
        return self._save(Appointment(
            id=uuid4(),
            staff_id=staff.id,
            service_id=service.id,
            appointment_date=day,
            start_time=start,
            end_time=end,
            status=status,
        ))


@pytest.fixture
def seed(db_session):
    return Seeder(db_session)
