from django.conf import settings
from django.db import models

from apps.core.models import AuditMixin, TimeStampedModel

from . import lifecycle


class Lease(TimeStampedModel, AuditMixin):
    STATUS_CHOICES = lifecycle.STATUS_CHOICES

    unit = models.ForeignKey(
        "properties.Unit", on_delete=models.PROTECT, related_name="leases"
    )
    status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default=lifecycle.DRAFT, db_index=True
    )
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")

    # Rent details
    monthly_rent = models.DecimalField(max_digits=10, decimal_places=2)
    security_deposit = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    rent_due_day = models.PositiveSmallIntegerField(
        default=1, help_text="Day of month rent is due (1-28)"
    )

    # Signature workflow
    landlord_signed_at = models.DateTimeField(null=True, blank=True)
    all_tenants_signed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Lease: {self.unit} ({self.status})"

    @property
    def is_active(self):
        return self.status == lifecycle.ACTIVE

    @property
    def is_signable(self):
        return self.status in lifecycle.SIGNABLE_STATUSES

    @property
    def landlord(self):
        return self.unit.property.landlord

    def transition_to(self, status):
        """Move to ``status`` if the lifecycle allows it. Does not save."""
        lifecycle.check_transition(self.status, status)
        self.status = status


class LeaseTenant(TimeStampedModel):
    """A tenant named on a lease, and that tenant's signature slot."""

    lease = models.ForeignKey(Lease, on_delete=models.CASCADE, related_name="lease_tenants")
    tenant = models.ForeignKey(
        "accounts.TenantProfile", on_delete=models.PROTECT, related_name="lease_tenancies"
    )
    is_primary_tenant = models.BooleanField(default=False)
    signed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-is_primary_tenant", "created_at"]
        unique_together = [("lease", "tenant")]

    def __str__(self):
        status = "Signed" if self.signed_at else "Pending"
        return f"{self.tenant.user} on {self.lease_id} - {status}"

    @property
    def is_signed(self):
        return self.signed_at is not None


class LeaseSignature(TimeStampedModel):
    """Signature of record, written once per party when they sign."""

    SIGNER_TYPE_CHOICES = [
        ("landlord", "Landlord"),
        ("tenant", "Tenant"),
    ]

    lease = models.ForeignKey(Lease, on_delete=models.CASCADE, related_name="signatures")
    signer_type = models.CharField(max_length=10, choices=SIGNER_TYPE_CHOICES)
    signer_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="lease_signatures",
    )
    lease_tenant = models.OneToOneField(
        LeaseTenant,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="signature",
    )

    # Signature data
    signature_data = models.TextField(help_text="Base64 encoded signature image or typed signature")
    signed_at = models.DateTimeField()

    # Audit trail
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["signed_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["lease", "signer_user"], name="unique_signature_per_signer"
            ),
        ]

    def __str__(self):
        return f"{self.signer_user} ({self.get_signer_type_display()}) signed {self.lease_id}"
