from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from booking.core import config
from booking.routes.dependencies import database_unavailable, ensure_database_ready, get_db
from booking.services import notifications

router = APIRouter(tags=['notifications'])


class NotificationResponse(BaseModel):
    id: int
    recipient: str
    inquiry_id: int | None = None
    type: str
    title: str
    message: str
    is_read: bool
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class MarkAllReadResponse(BaseModel):
    updated: int


class DeleteNotificationsResponse(BaseModel):
    deleted: int


class NotificationStatsResponse(BaseModel):
    total: int
    unread: int


def _normalize_recipient(recipient: str) -> str:
    normalized = notifications.cache_key(recipient)
    if not normalized:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Recipient is required.',
        )
    return normalized


def _notification_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail='Notification not found.',
    )


@router.get('/', response_model=list[NotificationResponse])
def list_notifications(
    recipient: str = Query(...),
    db: Session = Depends(get_db),
):
    normalized_recipient = _normalize_recipient(recipient)
    ensure_database_ready()

    try:
        return notifications.notification_cache.get_or_fetch(
            normalized_recipient,
            config.NOTIFICATION_CACHE_TTL_SECONDS,
            lambda: [
                NotificationResponse.model_validate(notification)
                for notification in notifications.list_for_recipient(db, normalized_recipient)
            ],
        )
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/stats', response_model=NotificationStatsResponse)
def read_notification_stats(
    recipient: str = Query(...),
    db: Session = Depends(get_db),
):
    normalized_recipient = _normalize_recipient(recipient)
    ensure_database_ready()

    try:
        counts = notifications.stats(db, normalized_recipient)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return NotificationStatsResponse(total=counts.total, unread=counts.unread)


@router.post('/{notification_id}/read', response_model=NotificationResponse)
def mark_notification_as_read(
    notification_id: int,
    recipient: str = Query(...),
    db: Session = Depends(get_db),
):
    normalized_recipient = _normalize_recipient(recipient)
    ensure_database_ready()

    try:
        notification = notifications.mark_as_read(db, notification_id, normalized_recipient)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc

    if notification is None:
        raise _notification_not_found()

    return NotificationResponse.model_validate(notification)


@router.post('/read-all', response_model=MarkAllReadResponse)
def mark_all_notifications_as_read(
    recipient: str = Query(...),
    db: Session = Depends(get_db),
):
    normalized_recipient = _normalize_recipient(recipient)
    ensure_database_ready()

    try:
        updated = notifications.mark_all_as_read(db, normalized_recipient)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc

    return MarkAllReadResponse(updated=updated)


@router.delete('/{notification_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: int,
    recipient: str = Query(...),
    db: Session = Depends(get_db),
):
    normalized_recipient = _normalize_recipient(recipient)
    ensure_database_ready()

    try:
        deleted = notifications.delete(db, notification_id, normalized_recipient)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc

    if not deleted:
        raise _notification_not_found()


@router.delete('/', response_model=DeleteNotificationsResponse)
def clear_notifications(
    recipient: str = Query(...),
    db: Session = Depends(get_db),
):
    normalized_recipient = _normalize_recipient(recipient)
    ensure_database_ready()

    try:
        deleted = notifications.clear_all(db, normalized_recipient)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc

    return DeleteNotificationsResponse(deleted=deleted)
