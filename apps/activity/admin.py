from django.contrib import admin

from .models import ActivityLog


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "activity_type", "user", "action", "ip_address")
    list_filter = ("activity_type",)
    search_fields = ("action", "user__email")
    readonly_fields = (
        "user", "activity_type", "action", "metadata",
        "ip_address", "user_agent", "created_at", "updated_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
