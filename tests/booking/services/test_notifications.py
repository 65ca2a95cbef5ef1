from datetime import date

import pytest
from sqlalchemy.exc import SQLAlchemyError

from booking.models.notification import Notification
from booking.services import notifications

DAY = date(2026, 3, 4)


def test_dispatch_builds_message_for_event(booking_db, make_inquiry) -> None:
    inquiry = make_inquiry(DAY, '13:30', status='rescheduled')

    notification = notifications.dispatch(booking_db, inquiry, 'rescheduled', notes='Bring floor plans')

    assert notification.recipient == 'maria@example.com'
    assert notification.title == 'Appointment rescheduled'
    assert notification.message == 'Your appointment has been moved to 2026-03-04 at 1:30 PM. Notes: Bring floor plans'
    assert notification.is_read is False


def test_dispatch_failure_is_logged_not_raised(booking_db, make_inquiry, monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    inquiry = make_inquiry(DAY, '09:00')

    def failing_commit():
        raise SQLAlchemyError('database is locked')

    monkeypatch.setattr(booking_db, 'commit', failing_commit)

    assert notifications.dispatch(booking_db, inquiry, 'confirmed') is None
    assert 'Failed to dispatch confirmed notification' in caplog.text


def test_mark_as_read_only_for_recipient(booking_db, make_inquiry) -> None:
    inquiry = make_inquiry(DAY, '09:00')
    notification = notifications.dispatch(booking_db, inquiry, 'confirmed')

    assert notifications.mark_as_read(booking_db, notification.id, 'someone@example.com') is None
    assert notifications.mark_as_read(booking_db, notification.id, 'maria@example.com').is_read is True


def test_mark_all_as_read(booking_db, make_inquiry) -> None:
    inquiry = make_inquiry(DAY, '09:00')
    notifications.dispatch(booking_db, inquiry, 'confirmed')
    notifications.dispatch(booking_db, inquiry, 'completed')

    assert len(notifications.list_for_recipient(booking_db, 'maria@example.com', unread_only=True)) == 2
    assert notifications.mark_all_as_read(booking_db, 'maria@example.com') == 2
    assert notifications.list_for_recipient(booking_db, 'maria@example.com', unread_only=True) == []
    assert booking_db.query(Notification).count() == 2


def test_dispatch_drops_cached_listing_for_recipient(booking_db, make_inquiry) -> None:
    inquiry = make_inquiry(DAY, '09:00')
    notifications.notification_cache.set('maria@example.com', [], 30)

    notifications.dispatch(booking_db, inquiry, 'confirmed')

    assert notifications.notification_cache.get('maria@example.com') is None


def test_delete_only_for_recipient(booking_db, make_inquiry) -> None:
    notification = notifications.dispatch(booking_db, make_inquiry(DAY, '09:00'), 'confirmed')

    assert notifications.delete(booking_db, notification.id, 'someone@example.com') is False
    assert notifications.delete(booking_db, notification.id, 'maria@example.com') is True
    assert booking_db.query(Notification).count() == 0


def test_clear_all_and_stats(booking_db, make_inquiry) -> None:
    inquiry = make_inquiry(DAY, '09:00')
    first = notifications.dispatch(booking_db, inquiry, 'confirmed')
    notifications.dispatch(booking_db, inquiry, 'completed')
    notifications.mark_as_read(booking_db, first.id, 'maria@example.com')

    assert notifications.stats(booking_db, 'maria@example.com') == notifications.NotificationStats(total=2, unread=1)
    assert notifications.clear_all(booking_db, 'maria@example.com') == 2
    assert notifications.stats(booking_db, 'maria@example.com') == notifications.NotificationStats(total=0, unread=0)
