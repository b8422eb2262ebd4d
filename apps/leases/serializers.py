"""Plain-dict representations of leases for the JSON views."""


def _iso(value):
    return value.isoformat() if value else None


def _user(user):
    return {
        "id": str(user.pk),
        "name": user.display_name,
        "email": user.email,
        "phone": user.phone_number,
    }


def serialize_lease_tenant(lease_tenant):
    return {
        "id": str(lease_tenant.pk),
        "tenant_id": str(lease_tenant.tenant_id),
        "is_primary_tenant": lease_tenant.is_primary_tenant,
        "signed_at": _iso(lease_tenant.signed_at),
        "user": _user(lease_tenant.tenant.user),
    }


def serialize_lease(lease, lease_tenants=None):
    """Lease with its unit, property and tenant roster."""
    if lease_tenants is None:
        lease_tenants = lease.lease_tenants.all()
    unit = lease.unit
    prop = unit.property
    return {
        "id": str(lease.pk),
        "status": lease.status,
        "status_display": lease.get_status_display(),
        "start_date": _iso(lease.start_date),
        "end_date": _iso(lease.end_date),
        "monthly_rent": float(lease.monthly_rent),
        "security_deposit": float(lease.security_deposit),
        "rent_due_day": lease.rent_due_day,
        "landlord_signed_at": _iso(lease.landlord_signed_at),
        "all_tenants_signed_at": _iso(lease.all_tenants_signed_at),
        "created_at": _iso(lease.created_at),
        "unit": {
            "id": str(unit.pk),
            "unit_number": unit.unit_number,
            "status": unit.status,
            "property": {
                "id": str(prop.pk),
                "name": prop.name,
                "address": prop.full_address,
            },
        },
        "tenants": [serialize_lease_tenant(lt) for lt in lease_tenants],
    }


def serialize_signing_context(context):
    data = serialize_lease(context.lease, context.lease_tenants)
    data["landlord"] = _user(context.lease.unit.property.landlord.user)
    progress = context.progress
    data["signing_progress"] = {
        "total_needed": progress.total_needed,
        "total_signed": progress.total_signed,
        "percentage": progress.percentage,
        "is_fully_signed": progress.is_fully_signed,
        "landlord_signed": progress.landlord_signed,
        "tenants_signed_count": progress.tenants_signed_count,
        "stage": progress.stage,
    }
    status = context.user_status
    data["user_signing_status"] = {
        "can_sign": status.can_sign,
        "has_signed": status.has_signed,
        "signed_at": _iso(status.signed_at),
        "role": status.role,
    }
    return data
