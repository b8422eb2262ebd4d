import uuid

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ObjectDoesNotExist
from django.db import models

from apps.core.models import TimeStampedModel


class User(AbstractUser):
    ROLE_CHOICES = [
        ("tenant", "Tenant"),
        ("landlord", "Landlord"),
        ("vendor", "Vendor"),
        ("admin", "Admin"),
    ]

    # Roles that sign leases, and the profile each one signs through
    SIGNING_PROFILES = {
        "landlord": "landlord_profile",
        "tenant": "tenant_profile",
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default="tenant", db_index=True)
    phone_number = models.CharField(max_length=20, blank=True, default="")

    class Meta:
        ordering = ["last_name", "first_name"]

    def __str__(self):
        return self.display_name

    @property
    def display_name(self):
        return self.get_full_name() or self.username

    @property
    def is_tenant(self):
        return self.role == "tenant"

    @property
    def is_landlord(self):
        return self.role == "landlord"

    @property
    def is_admin_user(self):
        return self.role == "admin"

    @property
    def signing_profile(self):
        """The LandlordProfile or TenantProfile this user signs as, or None."""
        attr = self.SIGNING_PROFILES.get(self.role)
        if attr is None:
            return None
        try:
            return getattr(self, attr)
        except ObjectDoesNotExist:
            return None


class LandlordProfile(TimeStampedModel):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="landlord_profile"
    )
    company_name = models.CharField(max_length=200, blank=True, default="")
    business_phone = models.CharField(max_length=20, blank=True, default="")

    def __str__(self):
        return self.company_name or f"Landlord: {self.user}"


class TenantProfile(TimeStampedModel):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="tenant_profile"
    )
    date_of_birth = models.DateField(null=True, blank=True)
    emergency_contact_name = models.CharField(max_length=200, blank=True, default="")
    emergency_contact_phone = models.CharField(max_length=20, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    def __str__(self):
        return f"Tenant: {self.user}"
