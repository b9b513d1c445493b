"""
In-app notifications

A notification belongs to one user; the acting user only ever sees their
own. Delivery channels (push, email, SMS) live outside this service.
"""
import logging

from app import db
from app.errors import NotFoundError
from app.models import Notification
from app.schemas import CreateNotificationInput
from app.services.base import atomic, reading
from app.services.query import paginate
from app.utils.helpers import utcnow

logger = logging.getLogger(__name__)


def _own(scope):
    return scope.query(Notification).filter(Notification.user_id == scope.user_id)


def _get_own(scope, notification_id):
    notification = _own(scope).filter(Notification.id == notification_id).first()
    if notification is None:
        raise NotFoundError('Notification not found')
    return notification


def create_notification(scope, data):
    """Notify a user of the caller's company"""
    payload = CreateNotificationInput.from_dict(data)

    with atomic():
        user = scope.get_user(payload.user_id)
        notification = Notification(**scope.stamp({
            'user_id': user.id,
            'type': payload.type,
            'title': payload.title,
            'message': payload.message,
            'link': payload.link,
            'data': payload.data,
        }))
        db.session.add(notification)

    logger.debug('Notification %s created for user %s', notification.id, payload.user_id)
    return notification


def unread_count(scope):
    with reading():
        return _own(scope).filter(Notification.read_at.is_(None)).count()


def list_notifications(scope, params=None, unread_only=False):
    """
    The acting user's notifications, newest first

    Returns:
        tuple: (Page, unread count)
    """
    with reading():
        query = _own(scope)
        if unread_only:
            query = query.filter(Notification.read_at.is_(None))
        page = paginate(query, Notification, params)
    return page, unread_count(scope)


def get_notification(scope, notification_id):
    with reading():
        return _get_own(scope, notification_id)


def mark_read(scope, notification_id):
    with atomic():
        notification = _get_own(scope, notification_id)
        notification.mark_read()
    return notification


def mark_unread(scope, notification_id):
    with atomic():
        notification = _get_own(scope, notification_id)
        notification.mark_unread()
    return notification


def mark_all_read(scope):
    """Returns the number of notifications that changed"""
    with atomic():
        updated = _own(scope).filter(Notification.read_at.is_(None)).update(
            {Notification.read_at: utcnow()}, synchronize_session=False
        )
    return updated


def delete_notification(scope, notification_id):
    with atomic():
        notification = _get_own(scope, notification_id)
        db.session.delete(notification)
