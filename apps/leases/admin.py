from django.contrib import admin

from .models import Lease, LeaseSignature, LeaseTenant


class LeaseTenantInline(admin.TabularInline):
    model = LeaseTenant
    extra = 0
    fields = ["tenant", "is_primary_tenant", "signed_at"]
    readonly_fields = ["signed_at"]
    raw_id_fields = ["tenant"]


class LeaseSignatureInline(admin.TabularInline):
    model = LeaseSignature
    extra = 0
    fields = ["signer_type", "signer_user", "signed_at", "ip_address", "user_agent"]
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Lease)
class LeaseAdmin(admin.ModelAdmin):
    list_display = (
        "unit", "status", "start_date", "end_date", "monthly_rent",
        "landlord_signed_at", "all_tenants_signed_at",
    )
    list_filter = ("status",)
    search_fields = (
        "unit__unit_number", "unit__property__name",
        "lease_tenants__tenant__user__email",
    )
    readonly_fields = (
        "landlord_signed_at", "all_tenants_signed_at",
        "created_at", "updated_at",
    )
    inlines = [LeaseTenantInline, LeaseSignatureInline]

    fieldsets = (
        ("Core Information", {
            "fields": ("unit", "status", "start_date", "end_date", "notes"),
        }),
        ("Rent", {
            "fields": ("monthly_rent", "security_deposit", "rent_due_day"),
        }),
        ("Signatures", {
            "fields": ("landlord_signed_at", "all_tenants_signed_at"),
        }),
        ("Audit", {
            "fields": ("created_at", "updated_at"),
            "classes": ("collapse",),
        }),
    )

    def save_model(self, request, obj, form, change):
        obj.stamp(request.user)
        super().save_model(request, obj, form, change)
