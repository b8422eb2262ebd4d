"""Append-only audit trail of user actions."""
from django.conf import settings
from django.db import models

from apps.core.models import TimeStampedModel


class ActivityLog(TimeStampedModel):
    """Immutable audit trail entry."""

    ACTIVITY_TYPE_CHOICES = [
        ("lease_signed", "Lease Signed"),
        ("lease_activated", "Lease Activated"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="activity_logs",
    )
    activity_type = models.CharField(max_length=30, choices=ACTIVITY_TYPE_CHOICES, db_index=True)
    action = models.CharField(max_length=500)
    metadata = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["activity_type", "created_at"], name="idx_activity_type_ts"),
        ]

    def __str__(self):
        return f"{self.created_at} [{self.activity_type}] {self.user}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Activity log entries are append-only.")
        super().save(*args, **kwargs)
