from django.db import models
from django.utils import timezone

from apps.core.models import AuditMixin, TimeStampedModel


class Property(TimeStampedModel, AuditMixin):
    """A building owned by a landlord; leases attach to its units."""

    PROPERTY_TYPE_CHOICES = [
        ("single_family", "Single Family"),
        ("multi_family", "Multi Family"),
        ("apartment", "Apartment Complex"),
        ("condo", "Condominium"),
        ("townhouse", "Townhouse"),
        ("commercial", "Commercial"),
    ]

    # Owner of record; only this landlord signs and manages its leases
    landlord = models.ForeignKey(
        "accounts.LandlordProfile", on_delete=models.PROTECT, related_name="properties"
    )
    name = models.CharField(max_length=200)
    property_type = models.CharField(max_length=20, choices=PROPERTY_TYPE_CHOICES)
    address_line1 = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=50)
    zip_code = models.CharField(max_length=10)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        verbose_name_plural = "Properties"
        ordering = ["name"]

    def __str__(self):
        return self.name

    @property
    def full_address(self):
        return f"{self.address_line1}, {self.city}, {self.state} {self.zip_code}"


class UnitQuerySet(models.QuerySet):
    def occupy(self):
        """Mark the units occupied in one UPDATE (no save signals)."""
        return self.update(status=Unit.OCCUPIED, updated_at=timezone.now())


class Unit(TimeStampedModel):
    VACANT = "vacant"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    STATUS_CHOICES = [
        (VACANT, "Vacant"),
        (OCCUPIED, "Occupied"),
        (MAINTENANCE, "Under Maintenance"),
    ]

    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="units")
    unit_number = models.CharField(max_length=20)
    bedrooms = models.PositiveSmallIntegerField(default=1)
    base_rent = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(max_length=15, choices=STATUS_CHOICES, default=VACANT, db_index=True)

    objects = UnitQuerySet.as_manager()

    class Meta:
        ordering = ["property", "unit_number"]
        unique_together = [("property", "unit_number")]

    def __str__(self):
        return f"{self.property.name} - Unit {self.unit_number}"
