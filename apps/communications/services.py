import logging

from django.utils import timezone

from .models import Notification

logger = logging.getLogger(__name__)


def mark_notifications_read(user, notification_ids=None):
    """
    Mark the user's unread notifications as read and return how many changed.

    With ``notification_ids`` only those rows are touched; ids belonging to
    another recipient are ignored. Already-read rows keep their ``read_at``.
    """
    unread = Notification.objects.filter(recipient=user, is_read=False)
    if notification_ids is not None:
        unread = unread.filter(pk__in=notification_ids)
    count = unread.update(is_read=True, read_at=timezone.now())
    logger.info("Marked %d notification(s) read for user %s", count, user.pk)
    return count
