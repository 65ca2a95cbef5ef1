"""Inquiry (appointment request) model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, Integer, String
from booking.database import Base


class Inquiry(Base):
    """A client's appointment request for a catalog design."""
    __tablename__ = "inquiries"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    phone = Column(String, default="")
    message = Column(String, default="")
    preferred_date = Column(String, nullable=False)  # YYYY-MM-DD
    preferred_time = Column(String, nullable=False)  # HH:MM
    meeting_type = Column(String, default="onsite")  # phone/onsite/video
    design_id = Column(String, nullable=True)
    design_name = Column(String, nullable=True)
    design_price = Column(Float, nullable=True)
    submitted_at = Column(DateTime, default=datetime.now)
    status = Column(String, nullable=False, default="pending")
    cancellation_reason = Column(String, nullable=True)
    reschedule_notes = Column(String, nullable=True)
