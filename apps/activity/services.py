"""Activity log helper – call from service code to record events."""
from .models import ActivityLog


def log_activity(user, activity_type, action, metadata=None, ip_address=None, user_agent=""):
    """Append an activity entry. Joins the caller's transaction if one is open."""
    return ActivityLog.objects.create(
        user=user if user is not None and getattr(user, "pk", None) else None,
        activity_type=activity_type,
        action=action[:500],
        metadata=metadata or {},
        ip_address=ip_address or None,
        user_agent=(user_agent or "")[:500],
    )
