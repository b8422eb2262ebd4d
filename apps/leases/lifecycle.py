"""
Lease lifecycle.

Statuses and the transitions allowed between them. ``draft`` and
``pending_signature`` are the two signing stages (shown as "Drafting" and
"Awaiting Signatures"); a lease leaves them only through activation or
termination.
"""

DRAFT = "draft"
PENDING_SIGNATURE = "pending_signature"
ACTIVE = "active"
EXPIRING_SOON = "expiring_soon"
EXPIRED = "expired"
TERMINATED = "terminated"
RENEWED = "renewed"

STATUS_CHOICES = [
    (DRAFT, "Drafting"),
    (PENDING_SIGNATURE, "Awaiting Signatures"),
    (ACTIVE, "Active"),
    (EXPIRING_SOON, "Expiring Soon"),
    (EXPIRED, "Expired"),
    (TERMINATED, "Terminated"),
    (RENEWED, "Renewed"),
]

# Statuses in which signatures may still be collected
SIGNABLE_STATUSES = frozenset({DRAFT, PENDING_SIGNATURE})

# The signing screen also shows freshly activated leases (confirmation view)
SIGNING_VIEW_STATUSES = SIGNABLE_STATUSES | {ACTIVE}

TRANSITIONS = {
    DRAFT: frozenset({PENDING_SIGNATURE, ACTIVE, TERMINATED}),
    PENDING_SIGNATURE: frozenset({PENDING_SIGNATURE, ACTIVE, TERMINATED}),
    ACTIVE: frozenset({EXPIRING_SOON, EXPIRED, TERMINATED, RENEWED}),
    EXPIRING_SOON: frozenset({ACTIVE, EXPIRED, TERMINATED, RENEWED}),
    EXPIRED: frozenset(),
    TERMINATED: frozenset(),
    RENEWED: frozenset(),
}


class InvalidLeaseTransition(ValueError):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Lease cannot move from '{current}' to '{target}'.")


def can_transition(current, target):
    return target in TRANSITIONS.get(current, frozenset())


def check_transition(current, target):
    if not can_transition(current, target):
        raise InvalidLeaseTransition(current, target)


# Signature stages, derived from who has signed so far
STAGE_UNSIGNED = "unsigned"
STAGE_AWAITING_TENANTS = "awaiting_tenants"
STAGE_AWAITING_LANDLORD = "awaiting_landlord"
STAGE_PARTIALLY_SIGNED = "partially_signed"
STAGE_FULLY_SIGNED = "fully_signed"


def signature_stage(landlord_signed, tenants_signed, tenant_count):
    """Name the signing situation from the landlord flag and tenant counts."""
    all_tenants = tenants_signed == tenant_count
    if landlord_signed and all_tenants:
        return STAGE_FULLY_SIGNED
    if landlord_signed:
        return STAGE_AWAITING_TENANTS
    if all_tenants:
        return STAGE_AWAITING_LANDLORD
    if tenants_signed:
        return STAGE_PARTIALLY_SIGNED
    return STAGE_UNSIGNED
