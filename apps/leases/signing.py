"""
Lease Signing Service.

Collects signatures from the landlord and every tenant named on a lease and
activates the lease once all of them are in:
- Fetching a lease with the caller's signing status and overall progress
- Recording a signature (landlord or tenant) with its audit trail
- Activating the lease and occupying the unit on the completing signature
- Listing leases waiting on the caller's signature
- Re-sending signing reminders to parties who have not signed

Every function takes the authenticated user explicitly; the views supply
``request.user``. Notifications are best-effort: they are created after the
signing transaction commits, and a failure is logged without touching the
recorded signature.
"""

import logging
from dataclasses import dataclass
from functools import partial

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import validate_ipv46_address
from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.activity.services import log_activity
from apps.communications.tasks import create_notification
from apps.properties.models import Unit

from . import lifecycle
from .exceptions import (
    AlreadySigned,
    LeaseNotAvailable,
    LeaseNotFound,
    LeaseSigningError,
    SignatureRequired,
    SigningUnavailable,
    TermsNotAccepted,
    Unauthorized,
)
from .models import Lease, LeaseSignature, LeaseTenant

logger = logging.getLogger(__name__)

# Front-end routes used as notification action URLs
LEASE_SIGNING_PATH = "/dashboard/lease-signing/{lease_id}"
LEASE_DETAIL_PATH = "/dashboard/leases/{lease_id}"
MY_LEASE_PATH = "/dashboard/my-lease"


# =============================================================================
# Signing parties
# =============================================================================

@dataclass(frozen=True)
class LandlordParty:
    landlord_id: object

    role = "landlord"


@dataclass(frozen=True)
class TenantParty:
    lease_tenant_id: object
    tenant_id: object

    role = "tenant"


def resolve_signing_party(user, lease, lease_tenants):
    """
    Return the party ``user`` signs as on ``lease``, or None.

    Landlords must own the lease's property; tenants must be named on it.
    """
    profile = user.signing_profile
    if profile is None:
        return None
    if user.role == "landlord":
        if lease.unit.property.landlord_id == profile.pk:
            return LandlordParty(landlord_id=profile.pk)
        return None
    for lease_tenant in lease_tenants:
        if lease_tenant.tenant_id == profile.pk:
            return TenantParty(lease_tenant_id=lease_tenant.pk, tenant_id=profile.pk)
    return None


def _party_signed_at(lease, lease_tenants, party):
    if isinstance(party, LandlordParty):
        return lease.landlord_signed_at
    if isinstance(party, TenantParty):
        for lease_tenant in lease_tenants:
            if lease_tenant.pk == party.lease_tenant_id:
                return lease_tenant.signed_at
        return None
    raise TypeError(f"Unknown signing party: {party!r}")


# =============================================================================
# Results
# =============================================================================

@dataclass(frozen=True)
class SignaturePayload:
    signature: str
    agreed_to_terms: bool
    ip_address: str | None = None
    user_agent: str = ""


@dataclass(frozen=True)
class SigningProgress:
    total_needed: int
    total_signed: int
    percentage: int
    is_fully_signed: bool
    landlord_signed: bool
    tenants_signed_count: int
    stage: str


@dataclass(frozen=True)
class UserSigningStatus:
    can_sign: bool
    has_signed: bool
    signed_at: object
    role: str


@dataclass(frozen=True)
class LeaseSigningContext:
    lease: Lease
    lease_tenants: list
    user_status: UserSigningStatus
    progress: SigningProgress


@dataclass(frozen=True)
class SigningOutcome:
    lease: Lease
    party: object
    activated: bool

    @property
    def message(self):
        if self.activated:
            return "Lease signed successfully! The lease is now active."
        return "Lease signed successfully. Waiting for other signatures."


@dataclass(frozen=True)
class PendingNotification:
    recipient_id: object
    notification_type: str
    title: str
    body: str
    action_url: str
    metadata: dict


def compute_signing_progress(lease, lease_tenants):
    """Landlord slot plus one slot per tenant; percentage rounds half up."""
    tenant_count = len(lease_tenants)
    tenants_signed = sum(1 for lt in lease_tenants if lt.signed_at is not None)
    landlord_signed = lease.landlord_signed_at is not None
    total_needed = tenant_count + 1
    total_signed = tenants_signed + (1 if landlord_signed else 0)
    return SigningProgress(
        total_needed=total_needed,
        total_signed=total_signed,
        percentage=int(total_signed * 100 / total_needed + 0.5),
        is_fully_signed=total_signed == total_needed,
        landlord_signed=landlord_signed,
        tenants_signed_count=tenants_signed,
        stage=lifecycle.signature_stage(landlord_signed, tenants_signed, tenant_count),
    )


# =============================================================================
# Loading
# =============================================================================

def _require_caller(user):
    if user is None or not user.is_authenticated:
        raise Unauthorized()


def _load_lease(lease_id):
    try:
        return Lease.objects.select_related(
            "unit", "unit__property", "unit__property__landlord", "unit__property__landlord__user"
        ).get(pk=lease_id)
    except (Lease.DoesNotExist, ValidationError, ValueError):
        raise LeaseNotFound()


def _load_lease_tenants(lease_id):
    return list(
        LeaseTenant.objects.filter(lease_id=lease_id).select_related("tenant", "tenant__user")
    )


def _clean_ip(value):
    if not value:
        return None
    try:
        validate_ipv46_address(value)
    except ValidationError:
        logger.warning("Discarding invalid client IP address %r", value)
        return None
    return value


# =============================================================================
# Operations
# =============================================================================

def get_lease_for_signing(user, lease_id):
    """
    Fetch a lease for the signing screen.

    Landlord-owner, named tenants and admins may view. Active leases stay
    viewable so the confirmation screen can render after the last signature.
    """
    _require_caller(user)
    lease = _load_lease(lease_id)
    lease_tenants = _load_lease_tenants(lease.pk)

    party = resolve_signing_party(user, lease, lease_tenants)
    if party is None and user.role != "admin":
        raise Unauthorized("Unauthorized to view this lease")

    if lease.status not in lifecycle.SIGNING_VIEW_STATUSES:
        raise LeaseNotAvailable("This lease is not available for viewing")

    if party is None:
        user_status = UserSigningStatus(can_sign=False, has_signed=False, signed_at=None, role=user.role)
    else:
        signed_at = _party_signed_at(lease, lease_tenants, party)
        user_status = UserSigningStatus(
            can_sign=signed_at is None and not lease.is_active,
            has_signed=signed_at is not None,
            signed_at=signed_at,
            role=party.role,
        )

    return LeaseSigningContext(
        lease=lease,
        lease_tenants=lease_tenants,
        user_status=user_status,
        progress=compute_signing_progress(lease, lease_tenants),
    )


def _check_can_sign(lease, lease_tenants, party):
    if party is None:
        raise Unauthorized("Unauthorized to sign this lease")
    if not lease.is_signable:
        raise LeaseNotAvailable()
    if _party_signed_at(lease, lease_tenants, party) is not None:
        raise AlreadySigned()


def sign_lease(user, lease_id, payload):
    """
    Record ``user``'s signature on a lease and activate it if it completes the set.

    Raises a LeaseSigningError subclass for every rejected request; nothing
    is written in that case. Returns a SigningOutcome.
    """
    _require_caller(user)
    if not payload.agreed_to_terms:
        raise TermsNotAccepted()
    if not (payload.signature or "").strip():
        raise SignatureRequired()

    lease = _load_lease(lease_id)
    lease_tenants = _load_lease_tenants(lease.pk)
    party = resolve_signing_party(user, lease, lease_tenants)
    _check_can_sign(lease, lease_tenants, party)

    try:
        with transaction.atomic():
            outcome, notices = _record_signature(user, lease, party, payload)
            transaction.on_commit(partial(dispatch_notifications, notices))
    except LeaseSigningError:
        raise
    except DatabaseError:
        logger.exception("Database failure while signing lease %s", lease_id)
        raise SigningUnavailable()

    logger.info(
        "User %s signed lease %s as %s%s",
        user.pk, lease.pk, party.role, " (lease activated)" if outcome.activated else "",
    )
    return outcome


def _record_signature(user, lease, party, payload):
    """
    The signing critical section. Must run inside ``transaction.atomic()``.

    The lease row is locked first so signers of the same lease serialize, and
    status / already-signed are checked again against the locked state.
    """
    locked = Lease.objects.select_for_update().get(pk=lease.pk)
    lease_tenants = _load_lease_tenants(locked.pk)
    _check_can_sign(locked, lease_tenants, party)

    unit = lease.unit
    landlord_user = lease.unit.property.landlord.user
    ip_address = _clean_ip(payload.ip_address)
    user_agent = (payload.user_agent or "")[:500]
    now = timezone.now()

    lease_tenant = None
    if isinstance(party, LandlordParty):
        locked.landlord_signed_at = now
        locked.transition_to(lifecycle.PENDING_SIGNATURE)
        locked.stamp(user)
        locked.save(update_fields=["landlord_signed_at", "status", "updated_by", "updated_at"])
    elif isinstance(party, TenantParty):
        lease_tenant = next((lt for lt in lease_tenants if lt.pk == party.lease_tenant_id), None)
        if lease_tenant is None:
            raise Unauthorized("Unauthorized to sign this lease")
        lease_tenant.signed_at = now
        lease_tenant.save(update_fields=["signed_at", "updated_at"])
    else:
        raise TypeError(f"Unknown signing party: {party!r}")

    LeaseSignature.objects.create(
        lease=locked,
        signer_type=party.role,
        signer_user=user,
        lease_tenant=lease_tenant,
        signature_data=payload.signature,
        signed_at=now,
        ip_address=ip_address,
        user_agent=user_agent,
    )

    log_activity(
        user,
        "lease_signed",
        f"Signed lease agreement for Unit {unit.unit_number}",
        metadata={"lease_id": str(locked.pk), "role": party.role, "ip_address": ip_address},
        ip_address=ip_address,
        user_agent=user_agent,
    )

    notices = _signature_notices(user, locked, unit, landlord_user, lease_tenants, party)

    activated = _is_fully_signed(locked.pk)
    if activated:
        locked.transition_to(lifecycle.ACTIVE)
        locked.all_tenants_signed_at = now
        locked.stamp(user)
        locked.save(update_fields=["status", "all_tenants_signed_at", "updated_by", "updated_at"])

        Unit.objects.filter(pk=locked.unit_id).occupy()

        log_activity(
            user,
            "lease_activated",
            f"Lease activated for Unit {unit.unit_number} - all signatures collected",
            metadata={"lease_id": str(locked.pk), "activated_by": str(user.pk)},
            ip_address=ip_address,
            user_agent=user_agent,
        )
        notices.extend(_activation_notices(locked, unit, landlord_user, lease_tenants))

    locked.refresh_from_db()
    return SigningOutcome(lease=locked, party=party, activated=activated), notices


def _is_fully_signed(lease_id):
    """Re-read the signature slots inside the current transaction."""
    landlord_signed_at = Lease.objects.filter(pk=lease_id).values_list(
        "landlord_signed_at", flat=True
    ).get()
    tenant_slots = list(
        LeaseTenant.objects.filter(lease_id=lease_id).values_list("signed_at", flat=True)
    )
    # An empty roster leaves only the landlord slot
    return landlord_signed_at is not None and all(signed_at is not None for signed_at in tenant_slots)


def get_pending_signatures(user):
    """Leases still waiting on ``user``'s own signature, newest first."""
    _require_caller(user)

    leases = Lease.objects.select_related("unit", "unit__property").prefetch_related(
        "lease_tenants__tenant__user"
    )

    profile = user.signing_profile
    if profile is None:
        return []

    if user.role == "landlord":
        leases = leases.filter(
            unit__property__landlord=profile,
            status__in=lifecycle.SIGNABLE_STATUSES,
            landlord_signed_at__isnull=True,
        )
    else:
        leases = leases.filter(
            lease_tenants__tenant=profile,
            lease_tenants__signed_at__isnull=True,
            status__in=lifecycle.SIGNABLE_STATUSES,
        )

    return list(leases.distinct().order_by("-created_at"))


def resend_signing_invitation(user, lease_id):
    """
    Send a reminder to every party that has not signed yet.

    Only the landlord owning the property may do this. Each call creates new
    reminders; nothing records that a reminder was already sent. The batch is
    all-or-nothing, so a failed call can be retried without duplicates.
    Returns the number of parties reminded.
    """
    _require_caller(user)
    lease = _load_lease(lease_id)

    profile = user.signing_profile if user.role == "landlord" else None
    if profile is None or lease.unit.property.landlord_id != profile.pk:
        raise Unauthorized()

    if not lease.is_signable:
        raise LeaseNotAvailable()

    lease_tenants = _load_lease_tenants(lease.pk)
    notices = _reminder_notices(user, lease, lease_tenants)

    try:
        with transaction.atomic():
            for notice in notices:
                _deliver(notice)
    except DatabaseError:
        logger.exception("Database failure while sending signing reminders for lease %s", lease_id)
        raise SigningUnavailable("Failed to send reminders. Please try again.")

    logger.info("Sent %d signing reminder(s) for lease %s", len(notices), lease.pk)
    return len(notices)


# =============================================================================
# Notifications
# =============================================================================

def _notice(recipient_id, notification_type, title, body, action_url, lease):
    return PendingNotification(
        recipient_id=recipient_id,
        notification_type=notification_type,
        title=title,
        body=body,
        action_url=action_url,
        metadata={"lease_id": str(lease.pk)},
    )


def _signature_notices(signer, lease, unit, landlord_user, lease_tenants, party):
    """Tell the other side that a signature came in."""
    if isinstance(party, LandlordParty):
        return [
            _notice(
                lt.tenant.user_id,
                "lease_signature_requested",
                "Landlord Signed Lease",
                f"{signer.display_name} has signed the lease agreement. Your signature is now required.",
                LEASE_SIGNING_PATH.format(lease_id=lease.pk),
                lease,
            )
            for lt in lease_tenants
        ]
    return [
        _notice(
            landlord_user.pk,
            "lease_signed",
            "Tenant Signed Lease",
            f"{signer.display_name} has signed the lease agreement for Unit {unit.unit_number}.",
            LEASE_DETAIL_PATH.format(lease_id=lease.pk),
            lease,
        )
    ]


def _activation_notices(lease, unit, landlord_user, lease_tenants):
    notices = [
        _notice(
            landlord_user.pk,
            "lease_activated",
            "Lease Agreement Active",
            f"All parties have signed. The lease for Unit {unit.unit_number} is now active.",
            LEASE_DETAIL_PATH.format(lease_id=lease.pk),
            lease,
        )
    ]
    for lt in lease_tenants:
        notices.append(
            _notice(
                lt.tenant.user_id,
                "lease_activated",
                "Lease Agreement Active",
                "All parties have signed. Your lease is now active!",
                MY_LEASE_PATH,
                lease,
            )
        )
    return notices


def _reminder_notices(landlord_user, lease, lease_tenants):
    unit = lease.unit
    signing_url = LEASE_SIGNING_PATH.format(lease_id=lease.pk)
    notices = []
    if lease.landlord_signed_at is None:
        notices.append(
            _notice(
                landlord_user.pk,
                "lease_signature_reminder",
                "Lease Signature Reminder",
                f"Reminder: Please sign the lease agreement for Unit {unit.unit_number}",
                signing_url,
                lease,
            )
        )
    for lt in lease_tenants:
        if lt.signed_at is None:
            notices.append(
                _notice(
                    lt.tenant.user_id,
                    "lease_signature_reminder",
                    "Lease Signature Reminder",
                    f"Reminder: Please sign your lease agreement for "
                    f"{unit.property.name} - Unit {unit.unit_number}",
                    signing_url,
                    lease,
                )
            )
    return notices


def _notification_channels():
    channels = ["in_app"]
    if getattr(settings, "LEASE_SIGNING_EMAIL_NOTIFICATIONS", False):
        channels.append("email")
    return channels


def _deliver(notice):
    for channel in _notification_channels():
        create_notification(
            recipient_id=notice.recipient_id,
            title=notice.title,
            body=notice.body,
            category="lease",
            channel=channel,
            action_url=notice.action_url,
            notification_type=notice.notification_type,
            metadata=notice.metadata,
        )


def dispatch_notifications(notices):
    """Create each notification independently; log failures and carry on."""
    for notice in notices:
        try:
            _deliver(notice)
        except Exception:
            logger.exception(
                "Failed to deliver %s notification to user %s",
                notice.notification_type,
                notice.recipient_id,
            )
