import json
import logging

from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from apps.core.decorators import api_login_required, get_client_ip

from . import signing
from .exceptions import InvalidSigningRequest, LeaseSigningError, SigningUnavailable
from .forms import SignLeaseForm
from .serializers import serialize_lease, serialize_signing_context

logger = logging.getLogger(__name__)


def _error_response(error):
    return JsonResponse(
        {"success": False, "error": error.message, "code": error.code},
        status=error.status_code,
    )


def _unexpected_error(message, exc_context):
    logger.exception("Unexpected error: %s", exc_context)
    return _error_response(SigningUnavailable(message))


def _request_data(request):
    """Form-encoded POST data, or the parsed body of a JSON request."""
    if request.content_type == "application/json":
        try:
            body = json.loads(request.body or b"{}")
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}
    return request.POST


# =============================================================================
# Lease Signing API
# =============================================================================

@api_login_required
@require_GET
def lease_for_signing(request, pk):
    """Lease details plus the caller's signing status and overall progress."""
    try:
        context = signing.get_lease_for_signing(request.user, pk)
    except LeaseSigningError as e:
        return _error_response(e)
    except Exception:
        return _unexpected_error("Failed to fetch lease details", f"get lease {pk} for signing")

    return JsonResponse({"success": True, "data": serialize_signing_context(context)})


@api_login_required
@require_POST
def sign_lease(request, pk):
    """Record the caller's signature (landlord or tenant)."""
    form = SignLeaseForm(_request_data(request))
    if not form.is_valid():
        fields = ", ".join(sorted(form.errors))
        return _error_response(InvalidSigningRequest(f"Invalid value for: {fields}"))
    data = form.cleaned_data

    payload = signing.SignaturePayload(
        signature=data.get("signature") or "",
        agreed_to_terms=bool(data.get("agreed_to_terms")),
        ip_address=data.get("ip_address") or get_client_ip(request),
        user_agent=data.get("user_agent") or request.META.get("HTTP_USER_AGENT", "")[:500],
    )

    try:
        outcome = signing.sign_lease(request.user, pk, payload)
    except LeaseSigningError as e:
        return _error_response(e)
    except Exception:
        return _unexpected_error("Failed to sign lease. Please try again.", f"sign lease {pk}")

    return JsonResponse({
        "success": True,
        "message": outcome.message,
        "data": {
            **serialize_lease(outcome.lease),
            "activated": outcome.activated,
        },
    })


@api_login_required
@require_GET
def pending_signatures(request):
    """Leases waiting on the caller's signature, for the dashboard widget."""
    try:
        leases = signing.get_pending_signatures(request.user)
    except LeaseSigningError as e:
        return _error_response(e)
    except Exception:
        return _unexpected_error("Failed to fetch pending signatures", "pending signatures")

    return JsonResponse({"success": True, "data": [serialize_lease(lease) for lease in leases]})


@api_login_required
@require_POST
def resend_signing_invitation(request, pk):
    try:
        count = signing.resend_signing_invitation(request.user, pk)
    except LeaseSigningError as e:
        return _error_response(e)
    except Exception:
        return _unexpected_error("Failed to send reminders", f"resend invitation for lease {pk}")

    return JsonResponse({
        "success": True,
        "message": f"Signing reminders sent successfully ({count} recipient(s))",
        "data": {"reminders_sent": count},
    })
