from __future__ import annotations

from functools import wraps

from django.shortcuts import render


def unauthorized(request):
    return render(request, "401.html", status=401)


def forbidden(request, message: str = "You do not have permission to do that."):
    return render(request, "403.html", {"message": message}, status=403)


def login_required(view_func):
    """Like django's login_required, but answers 401 instead of redirecting."""

    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return unauthorized(request)
        return view_func(request, *args, **kwargs)

    return _wrapped


def moderator_required(view_func):
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return unauthorized(request)
        if not request.user.is_moderator():
            return forbidden(request, "Moderator permissions required.")
        return view_func(request, *args, **kwargs)

    return _wrapped
