import logging

from django.conf import settings

from bizsuite.notifications.models import Notification
from bizsuite.users.principal import users_with_role

logger = logging.getLogger(__name__)


def add_notification(recipient_id, type, title, description, link=""):
    notification = Notification.objects.create(
        recipient_id=recipient_id,
        type=type,
        title=title,
        description=description,
        link=link or "",
    )
    logger.debug(
        "notification id=%s type=%s recipient=%s", notification.id, type, recipient_id
    )
    return notification


def notify_role(role, type, title, description, link=""):
    sent = [
        add_notification(user.id, type, title, description, link)
        for user in users_with_role(role)
    ]
    logger.info("notified role=%s recipients=%s title=%r", role, len(sent), title)
    return sent


def notifications_for_user(user_id, limit=None):
    limit = limit or getattr(settings, "NOTIFICATION_FEED_LIMIT", 20)
    return Notification.objects.filter(recipient_id=user_id).order_by(
        "-created_at", "-id"
    )[:limit]


def mark_notifications_as_read(user_id, notification_ids) -> int:
    if not notification_ids:
        return 0
    # only the recipient may mark their own notifications
    return Notification.objects.filter(
        recipient_id=user_id, id__in=notification_ids
    ).update(is_read=True)
