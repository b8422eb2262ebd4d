from django.test import TestCase

from apps.accounts.models import User

from .models import ActivityLog
from .services import log_activity


class LogActivityTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.user = User.objects.create_user(username="landlord", password="pass", role="landlord")

    def test_entry_is_created(self):
        entry = log_activity(
            self.user,
            "lease_signed",
            "Signed lease agreement for Unit 4B",
            metadata={"lease_id": "123"},
            ip_address="203.0.113.7",
            user_agent="Mozilla/5.0",
        )

        entry.refresh_from_db()
        self.assertEqual(entry.user, self.user)
        self.assertEqual(entry.metadata, {"lease_id": "123"})
        self.assertEqual(entry.ip_address, "203.0.113.7")

    def test_blank_ip_stored_as_null(self):
        entry = log_activity(self.user, "lease_activated", "Activated", ip_address="")
        self.assertIsNone(entry.ip_address)
        self.assertEqual(entry.metadata, {})

    def test_entries_are_append_only(self):
        entry = log_activity(self.user, "lease_signed", "Signed")
        entry.action = "Rewritten"

        with self.assertRaises(ValueError):
            entry.save()

        self.assertEqual(ActivityLog.objects.get(pk=entry.pk).action, "Signed")
