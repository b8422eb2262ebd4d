from django.contrib import admin

from .models import Property, Unit


class UnitInline(admin.TabularInline):
    model = Unit
    extra = 0
    fields = ["unit_number", "bedrooms", "base_rent", "status"]


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = ("name", "landlord", "property_type", "city", "state", "is_active")
    list_filter = ("property_type", "is_active", "state")
    search_fields = ("name", "address_line1", "city", "landlord__user__email")
    raw_id_fields = ("landlord",)
    readonly_fields = ("created_by", "updated_by", "created_at", "updated_at")
    inlines = [UnitInline]

    def save_model(self, request, obj, form, change):
        obj.stamp(request.user)
        super().save_model(request, obj, form, change)


@admin.register(Unit)
class UnitAdmin(admin.ModelAdmin):
    list_display = ("unit_number", "property", "status", "active_lease_status")
    list_filter = ("status", "property")
    search_fields = ("unit_number", "property__name")

    @admin.display(description="Current lease")
    def active_lease_status(self, obj):
        lease = obj.leases.order_by("-created_at").first()
        return lease.get_status_display() if lease else "-"
