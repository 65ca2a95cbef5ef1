"""Notification dispatcher.

Dispatching is fire-and-forget: a failure to store a notification is logged
and never undoes the appointment change that triggered it.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from booking.core import config
from booking.core.availability import format_time_label
from booking.core.cache import TTLCache
from booking.models.inquiry import Inquiry
from booking.models.notification import Notification

logger = logging.getLogger(__name__)

# Listings keyed by normalized recipient. Writes for a recipient drop its entry.
notification_cache = TTLCache()

NEW_INQUIRY_EVENT = 'new_inquiry'

EVENT_TITLES = {
    NEW_INQUIRY_EVENT: 'New appointment request',
    'confirmed': 'Appointment confirmed',
    'cancelled': 'Appointment cancelled',
    'rescheduled': 'Appointment rescheduled',
    'completed': 'Appointment completed',
}


@dataclass(frozen=True)
class NotificationStats:
    total: int
    unread: int


def cache_key(recipient: str) -> str:
    return recipient.strip().lower()


def _when(inquiry: Inquiry) -> str:
    return f'{inquiry.preferred_date} at {format_time_label(inquiry.preferred_time)}'


def build_message(inquiry: Inquiry, event: str, **details) -> str:
    if event == NEW_INQUIRY_EVENT:
        return f'{inquiry.name} requested an appointment on {_when(inquiry)}.'
    if event == 'confirmed':
        return f'Your appointment on {_when(inquiry)} has been confirmed.'
    if event == 'cancelled':
        reason = details.get('reason')
        suffix = f' Reason: {reason}' if reason else ''
        return f'Your appointment on {_when(inquiry)} has been cancelled.{suffix}'
    if event == 'rescheduled':
        notes = details.get('notes')
        suffix = f' Notes: {notes}' if notes else ''
        return f'Your appointment has been moved to {_when(inquiry)}.{suffix}'
    if event == 'completed':
        return f'Your appointment on {_when(inquiry)} has been marked as completed.'
    return f'Your appointment on {_when(inquiry)} was updated.'


def dispatch(db: Session, inquiry: Inquiry, event: str, **details) -> Notification | None:
    recipient = config.ADMIN_NOTIFICATION_RECIPIENT if event == NEW_INQUIRY_EVENT else inquiry.email

    try:
        notification = Notification(
            recipient=recipient,
            inquiry_id=inquiry.id,
            type=event,
            title=EVENT_TITLES.get(event, 'Appointment updated'),
            message=build_message(inquiry, event, **details),
            is_read=False,
        )
        db.add(notification)
        db.commit()
        db.refresh(notification)
        notification_cache.invalidate(cache_key(recipient))
        return notification
    except SQLAlchemyError:
        db.rollback()
        logger.exception('Failed to dispatch %s notification for inquiry %s', event, inquiry.id)
        return None


def list_for_recipient(db: Session, recipient: str, unread_only: bool = False) -> list[Notification]:
    query = db.query(Notification).filter(Notification.recipient == recipient)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()


def _find_for_recipient(db: Session, notification_id: int, recipient: str) -> Notification | None:
    return db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.recipient == recipient,
    ).first()


def mark_as_read(db: Session, notification_id: int, recipient: str) -> Notification | None:
    notification = _find_for_recipient(db, notification_id, recipient)
    if notification is None:
        return None

    notification.is_read = True
    db.commit()
    db.refresh(notification)
    notification_cache.invalidate(cache_key(recipient))
    return notification


def mark_all_as_read(db: Session, recipient: str) -> int:
    updated = db.query(Notification).filter(
        Notification.recipient == recipient,
        Notification.is_read.is_(False),
    ).update({Notification.is_read: True}, synchronize_session=False)
    db.commit()
    notification_cache.invalidate(cache_key(recipient))
    return updated


def delete(db: Session, notification_id: int, recipient: str) -> bool:
    notification = _find_for_recipient(db, notification_id, recipient)
    if notification is None:
        return False

    db.delete(notification)
    db.commit()
    notification_cache.invalidate(cache_key(recipient))
    return True


def clear_all(db: Session, recipient: str) -> int:
    deleted = db.query(Notification).filter(
        Notification.recipient == recipient,
    ).delete(synchronize_session=False)
    db.commit()
    notification_cache.invalidate(cache_key(recipient))

    logger.info('Cleared %s notifications for %s', deleted, recipient)
    return deleted


def stats(db: Session, recipient: str) -> NotificationStats:
    total = db.query(func.count(Notification.id)).filter(
        Notification.recipient == recipient,
    ).scalar()
    unread = db.query(func.count(Notification.id)).filter(
        Notification.recipient == recipient,
        Notification.is_read.is_(False),
    ).scalar()
    return NotificationStats(total=total or 0, unread=unread or 0)
