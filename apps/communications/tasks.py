"""
Notification creation and delivery.

Every notification is stored as a row (the in-app inbox). Channels with an
external leg (email) are handed to Django-Q2; if the queue cannot take the
task the delivery runs inline instead.
"""
import logging

logger = logging.getLogger(__name__)

DELIVERY_TASK = "apps.communications.tasks.send_notification"


def _send_email_notification(notification):
    from apps.core.services.email import send_email
    from apps.core.url_utils import get_absolute_url

    recipient = notification.recipient
    if not recipient.email:
        logger.warning(
            "User %s has no email address; skipping email notification %s.",
            recipient,
            notification.pk,
        )
        return False

    message = notification.body
    if notification.action_url:
        message = f"{message}\n\n{get_absolute_url(notification.action_url)}"

    return send_email(
        subject=notification.title,
        message=message,
        recipient_list=[recipient.email],
        source="notification",
    )


# Channels delivered outside the app
EXTERNAL_SENDERS = {
    "email": _send_email_notification,
}


def send_notification(notification_id):
    """
    Deliver a stored notification over its external channel.
    Runs as a Django-Q2 task.
    """
    from .models import Notification

    try:
        notification = Notification.objects.select_related("recipient").get(pk=notification_id)
    except Notification.DoesNotExist:
        logger.error("Notification %s does not exist.", notification_id)
        return

    sender = EXTERNAL_SENDERS.get(notification.channel)
    if sender is None:
        logger.debug("Notification %s is %s only; nothing to deliver.", notification_id, notification.channel)
        return
    sender(notification)


def _enqueue_delivery(notification):
    try:
        from django_q.tasks import async_task

        async_task(DELIVERY_TASK, str(notification.pk), task_name=f"notify-{notification.pk}")
    except Exception:
        logger.warning("Task queue unavailable; delivering notification %s inline.", notification.pk)
        send_notification(str(notification.pk))


def create_notification(
    recipient_id,
    title,
    body,
    category="system",
    channel="in_app",
    action_url="",
    notification_type="general",
    metadata=None,
):
    """
    Store a Notification for ``recipient_id`` and queue external delivery.

    Returns the Notification, or None when the recipient does not exist.
    Database errors propagate to the caller.
    """
    from apps.accounts.models import User

    from .models import Notification

    try:
        recipient = User.objects.get(pk=recipient_id)
    except User.DoesNotExist:
        logger.error("Cannot create notification: user %s does not exist.", recipient_id)
        return None

    notification = Notification.objects.create(
        recipient=recipient,
        title=title,
        body=body,
        category=category,
        channel=channel,
        action_url=action_url,
        notification_type=notification_type,
        metadata=metadata or {},
    )

    if channel in EXTERNAL_SENDERS:
        _enqueue_delivery(notification)

    return notification
