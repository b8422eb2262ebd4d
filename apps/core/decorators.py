from functools import wraps

from django.http import JsonResponse


def api_login_required(view_func):
    """
    Reject anonymous requests with a JSON 401 before the view runs.

    The JSON endpoints are called from the front end, so a redirect to a
    login page would be useless; return the uniform error shape instead.
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse(
                {"success": False, "error": "Unauthorized", "code": "unauthorized"},
                status=401,
            )
        return view_func(request, *args, **kwargs)
    return wrapper


def get_client_ip(request):
    """Extract client IP address from request, honouring X-Forwarded-For."""
    x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")
