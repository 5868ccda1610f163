# Overview: Notification sink; writes user-facing events without ever failing the caller.

"""
Notification delivery contract.

notify() is fire-and-forget from the caller's point of view: the row is
written inside a SAVEPOINT of the caller's unit of work, so a failure rolls
back only the notification, is logged, and the business operation carries on.
"""
from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..errors import NotFoundError
from ..models import Notification, NotificationType


def _build_notification(user_id, title, message, type, related_id, data) -> Notification:
    return Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=NotificationType(type),
        related_id=related_id,
        data=data,
    )


def notify(
    user_id: str,
    title: str,
    message: str,
    type: NotificationType | str = NotificationType.INFO,
    *,
    related_id: str | None = None,
    data: dict | None = None,
) -> Notification | None:
    """
    Append a notification for user_id.

    Returns the notification, or None if it could not be written.
    """
    try:
        with db.session.begin_nested():
            notification = _build_notification(user_id, title, message, type, related_id, data)
            db.session.add(notification)
        return notification
    except Exception:
        current_app.logger.exception(
            "Failed to create notification %r for user %s", title, user_id
        )
        return None


def list_notifications(user_id: str, unread_only: bool = False) -> list[Notification]:
    q = db.session.query(Notification).filter_by(user_id=user_id)
    if unread_only:
        q = q.filter(Notification.read.is_(False))
    return q.order_by(Notification.created_at.desc()).all()


def mark_read(notification_id: str) -> Notification:
    notification = db.session.get(Notification, notification_id)
    if not notification:
        raise NotFoundError(f"Notification {notification_id} not found")
    notification.read = True
    db.session.commit()
    return notification


def mark_all_read(user_id: str) -> int:
    changed = (
        db.session.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read.is_(False))
        .update({Notification.read: True}, synchronize_session=False)
    )
    db.session.commit()
    return changed
