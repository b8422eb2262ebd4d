import json
import uuid
from datetime import timedelta
from unittest.mock import patch

from django.core import mail
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from apps.accounts.models import User
from apps.core.services.email import send_email

from .models import Notification, NotificationLog
from .services import mark_notifications_read
from .tasks import create_notification, send_notification


class NotificationTestMixin:

    @classmethod
    def setUpTestData(cls):
        super().setUpTestData()
        cls.user = User.objects.create_user(
            username="tenant", email="tenant@test.com", password="pass", role="tenant",
        )


class CreateNotificationTests(NotificationTestMixin, TestCase):

    def test_in_app_notification(self):
        with patch("django_q.tasks.async_task") as async_task:
            notification = create_notification(
                recipient_id=self.user.pk,
                title="Lease Signature Reminder",
                body="Please sign",
                category="lease",
                notification_type="lease_signature_reminder",
                action_url="/dashboard/my-lease",
                metadata={"lease_id": "abc"},
            )

        async_task.assert_not_called()
        self.assertEqual(notification.channel, "in_app")
        self.assertEqual(notification.category, "lease")
        self.assertEqual(notification.metadata, {"lease_id": "abc"})
        self.assertFalse(notification.is_read)
        self.assertEqual(len(mail.outbox), 0)

    def test_email_notification_is_queued(self):
        with patch("django_q.tasks.async_task") as async_task:
            notification = create_notification(
                recipient_id=self.user.pk, title="Hello", body="World", channel="email",
            )

        async_task.assert_called_once_with(
            "apps.communications.tasks.send_notification",
            str(notification.pk),
            task_name=f"notify-{notification.pk}",
        )

    def test_email_sent_inline_when_queue_unavailable(self):
        with patch("django_q.tasks.async_task", side_effect=ConnectionError("broker down")):
            with self.assertLogs("apps.communications.tasks", level="WARNING"):
                create_notification(
                    recipient_id=self.user.pk,
                    title="Lease Agreement Active",
                    body="Your lease is now active!",
                    channel="email",
                    action_url="/dashboard/my-lease",
                )

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, "Lease Agreement Active")
        self.assertIn("https://app.example.com/dashboard/my-lease", mail.outbox[0].body)
        log = NotificationLog.objects.get()
        self.assertEqual(log.status, "sent")
        self.assertEqual(log.source, "notification")

    def test_missing_recipient(self):
        with self.assertLogs("apps.communications.tasks", level="ERROR"):
            self.assertIsNone(create_notification(recipient_id=uuid.uuid4(), title="t", body="b"))
        self.assertFalse(Notification.objects.exists())


class SendNotificationTests(NotificationTestMixin, TestCase):

    def test_recipient_without_email_is_skipped(self):
        user = User.objects.create_user(username="noemail", password="pass")
        notification = Notification.objects.create(recipient=user, title="t", body="b", channel="email")

        with self.assertLogs("apps.communications.tasks", level="WARNING"):
            send_notification(str(notification.pk))

        self.assertEqual(len(mail.outbox), 0)

    def test_unknown_notification(self):
        with self.assertLogs("apps.communications.tasks", level="ERROR"):
            send_notification(str(uuid.uuid4()))


class SendEmailTests(TestCase):

    def test_success_is_logged(self):
        self.assertTrue(send_email("Subject", "Body", ["a@test.com", "b@test.com"], source="lease_signing"))

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(
            sorted(NotificationLog.objects.values_list("recipient", flat=True)),
            ["a@test.com", "b@test.com"],
        )

    def test_failure_is_logged_not_raised(self):
        with patch("apps.core.services.email.send_mail", side_effect=OSError("smtp down")):
            with self.assertLogs("apps.core.services.email", level="ERROR"):
                self.assertFalse(send_email("Subject", "Body", ["a@test.com"]))

        log = NotificationLog.objects.get()
        self.assertEqual(log.status, "failed")
        self.assertEqual(log.error_message, "smtp down")


class MarkNotificationsReadTests(NotificationTestMixin, TestCase):

    def setUp(self):
        self.other = User.objects.create_user(username="other", password="pass")
        self.first = Notification.objects.create(recipient=self.user, title="one", body="b")
        self.second = Notification.objects.create(recipient=self.user, title="two", body="b")
        self.foreign = Notification.objects.create(recipient=self.other, title="theirs", body="b")

    def test_marks_all_unread(self):
        self.assertEqual(mark_notifications_read(self.user), 2)

        for notification in (self.first, self.second):
            notification.refresh_from_db()
            self.assertTrue(notification.is_read)
            self.assertIsNotNone(notification.read_at)
        self.foreign.refresh_from_db()
        self.assertFalse(self.foreign.is_read)

    def test_only_requested_ids_of_own_notifications(self):
        count = mark_notifications_read(self.user, [self.first.pk, self.foreign.pk])

        self.assertEqual(count, 1)
        self.assertEqual(
            list(Notification.objects.filter(is_read=True).values_list("pk", flat=True)),
            [self.first.pk],
        )

    def test_already_read_keeps_read_at(self):
        earlier = timezone.now() - timedelta(days=1)
        Notification.objects.filter(pk=self.first.pk).update(is_read=True, read_at=earlier)

        self.assertEqual(mark_notifications_read(self.user, [self.first.pk]), 0)

        self.first.refresh_from_db()
        self.assertEqual(self.first.read_at, earlier)

    def test_empty_id_list_marks_nothing(self):
        self.assertEqual(mark_notifications_read(self.user, []), 0)
        self.assertFalse(Notification.objects.filter(is_read=True).exists())


class MarkReadViewTests(NotificationTestMixin, TestCase):

    def setUp(self):
        self.url = reverse("communications:mark_read")
        self.notification = Notification.objects.create(recipient=self.user, title="one", body="b")
        Notification.objects.create(recipient=self.user, title="two", body="b")

    def test_anonymous_gets_401(self):
        response = self.client.post(self.url)

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["code"], "unauthorized")

    def test_mark_selected_with_json(self):
        self.client.force_login(self.user)

        response = self.client.post(
            self.url,
            data=json.dumps({"notification_ids": [str(self.notification.pk), "not-a-uuid"]}),
            content_type="application/json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True, "data": {"marked_read": 1}})
        self.notification.refresh_from_db()
        self.assertTrue(self.notification.is_read)

    def test_mark_all_without_ids(self):
        self.client.force_login(self.user)

        response = self.client.post(self.url)

        self.assertEqual(response.json()["data"], {"marked_read": 2})
        self.assertFalse(Notification.objects.filter(is_read=False).exists())

    def test_get_not_allowed(self):
        self.client.force_login(self.user)
        self.assertEqual(self.client.get(self.url).status_code, 405)
