"""Notification model definitions."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from booking.database import Base


class Notification(Base):
    """Represents a notification shown in a user's notification center."""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True)
    recipient = Column(String, nullable=False, index=True)
    inquiry_id = Column(Integer, nullable=True)
    type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    message = Column(String, nullable=False)
    is_read = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.now)
