from django.contrib import admin

from .models import Notification, NotificationLog


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("title", "recipient", "notification_type", "channel", "is_read", "created_at")
    list_filter = ("notification_type", "channel", "category", "is_read")
    search_fields = ("title", "body", "recipient__email")
    raw_id_fields = ("recipient",)
    readonly_fields = ("created_at", "updated_at")


@admin.register(NotificationLog)
class NotificationLogAdmin(admin.ModelAdmin):
    list_display = ("recipient", "channel", "status", "subject", "source", "created_at")
    list_filter = ("channel", "status", "source")
    search_fields = ("recipient", "subject")
    readonly_fields = (
        "channel", "status", "recipient", "subject", "body_preview",
        "error_message", "source", "created_at",
    )

    def has_add_permission(self, request):
        return False
