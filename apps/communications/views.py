import json
import uuid

from django.http import JsonResponse
from django.views.decorators.http import require_POST

from apps.core.decorators import api_login_required

from .services import mark_notifications_read


def _notification_ids(request):
    """Requested ids, or None to mean every unread notification."""
    if request.content_type == "application/json":
        try:
            body = json.loads(request.body or b"{}")
        except ValueError:
            body = {}
        raw = body.get("notification_ids") if isinstance(body, dict) else None
    else:
        raw = request.POST.getlist("notification_ids") or None
    if raw is None:
        return None
    if not isinstance(raw, list):
        raw = [raw]

    ids = []
    for value in raw:
        try:
            ids.append(uuid.UUID(str(value)))
        except ValueError:
            continue
    return ids


@api_login_required
@require_POST
def mark_read(request):
    """Mark some or all of the caller's notifications as read."""
    count = mark_notifications_read(request.user, _notification_ids(request))
    return JsonResponse({"success": True, "data": {"marked_read": count}})
