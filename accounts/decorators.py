from functools import wraps

from django.contrib.auth.decorators import login_required
from django.shortcuts import redirect


def role_required(role: str):
    """
    Decorator to gate portal sections by role.
    Anonymous users go to login; a signed-in user with the other role is sent
    back to their own home rather than shown an error page.
    """
    def decorator(view_func):
        @wraps(view_func)
        @login_required
        def _wrapped(request, *args, **kwargs):
            if getattr(request.user, "role", None) != role:
                return redirect("home")
            return view_func(request, *args, **kwargs)
        return _wrapped
    return decorator


applicant_required = role_required("applicant")
staff_required = role_required("staff")
