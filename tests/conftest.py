import os
from datetime import date, datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from booking.database import Base  # noqa: E402
from booking.models import availability, notification  # noqa: E402,F401
from booking.models.inquiry import Inquiry  # noqa: E402
from booking.models.timeslot import Timeslot  # noqa: E402
from booking.routes import availability_routes  # noqa: E402
from booking.services import notifications  # noqa: E402

ROUTE_MODULES = (
    'booking.routes.availability_routes',
    'booking.routes.appointment_routes',
    'booking.routes.notification_routes',
)


@pytest.fixture
def booking_db():
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def reset_caches():
    availability_routes.settings_cache.clear()
    notifications.notification_cache.clear()
    yield
    availability_routes.settings_cache.clear()
    notifications.notification_cache.clear()


@pytest.fixture
def skip_schema_checks(monkeypatch: pytest.MonkeyPatch) -> None:
    for module in ROUTE_MODULES:
        monkeypatch.setattr(f'{module}.ensure_database_ready', lambda: None)


@pytest.fixture
def make_inquiry(booking_db):
    def _make_inquiry(
        preferred_date: date | str,
        preferred_time: str = '09:00',
        status: str = 'pending',
        **overrides,
    ) -> Inquiry:
        if isinstance(preferred_date, date):
            preferred_date = preferred_date.isoformat()

        fields = {
            'name': 'Maria Santos',
            'email': 'maria@example.com',
            'phone': '09171234567',
            'message': 'Interested in the two-storey design.',
            'meeting_type': 'onsite',
            'design_id': 'design-1',
            'design_name': 'Modern Bungalow',
            'submitted_at': datetime(2026, 1, 1, 9, 0),
        }
        fields.update(overrides)

        inquiry = Inquiry(
            preferred_date=preferred_date,
            preferred_time=preferred_time,
            status=status,
            **fields,
        )
        booking_db.add(inquiry)
        booking_db.commit()
        booking_db.refresh(inquiry)
        return inquiry

    return _make_inquiry


@pytest.fixture
def make_booked_slot(booking_db):
    def _make_booked_slot(inquiry: Inquiry) -> Timeslot:
        timeslot = Timeslot(
            date=inquiry.preferred_date,
            time=inquiry.preferred_time,
            is_available=False,
            inquiry_id=inquiry.id,
            meeting_type=inquiry.meeting_type,
        )
        booking_db.add(timeslot)
        booking_db.commit()
        booking_db.refresh(timeslot)
        return timeslot

    return _make_booked_slot
