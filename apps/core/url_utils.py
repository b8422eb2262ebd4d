"""URL utilities for generating absolute URLs."""

from django.conf import settings


def get_absolute_url(path):
    """
    Build an absolute front-end URL from a path.

    Notification ``action_url`` values are stored as site-relative paths
    (e.g. "/dashboard/lease-signing/<id>"); emails need the full link.

    Usage:
        get_absolute_url("/dashboard/my-lease")
        # -> "https://app.example.com/dashboard/my-lease"
    """
    if not path:
        return ""
    if path.startswith(("http://", "https://")):
        return path
    site_url = settings.SITE_URL.rstrip("/")
    if not path.startswith("/"):
        path = f"/{path}"
    return f"{site_url}{path}"
