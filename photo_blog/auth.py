"""
Shared-password admin access.

There are no user accounts: whoever knows ADMIN_PASSWORD is the admin for
the lifetime of their session.
"""
from django.http import JsonResponse
from django.utils.crypto import constant_time_compare

from .conf import blog_settings

ADMIN_USER = {
    "id": "admin",
    "email": None,
    "firstName": "Admin",
}


def is_admin(request):
    return bool(request.session.get(blog_settings.SESSION_ADMIN_KEY))


def check_password(password):
    """Return True if ``password`` matches the configured admin password."""
    expected = blog_settings.ADMIN_PASSWORD
    if not expected or not isinstance(password, str):
        return False
    return constant_time_compare(password, expected)


def log_in(request):
    request.session.cycle_key()
    request.session[blog_settings.SESSION_ADMIN_KEY] = True


def log_out(request):
    request.session.flush()


class AdminRequiredMixin:
    """
    Reject requests from sessions that have not logged in.

    Methods listed in ``public_methods`` are let through for everyone.
    """

    public_methods = ()

    def dispatch(self, request, *args, **kwargs):
        if request.method.lower() not in self.public_methods and not is_admin(request):
            return JsonResponse({"message": "Unauthorized"}, status=401)
        return super().dispatch(request, *args, **kwargs)
