from __future__ import annotations

import logging

from django.conf import settings
from django.contrib import messages
from django.contrib.auth import logout
from django.contrib.auth.views import redirect_to_login

from board.services import bans as ban_service

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


class BanEnforcementMiddleware:
    """Sign out users whose account picked up an active ban mid-session."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated:
            ban = ban_service.active_ban_for(user)
            if ban is not None:
                logger.warning("Signing out banned user %s", user.username)
                logout(request)
                messages.error(
                    request,
                    f"Your account is banned until {ban_service.format_expiry(ban)}: {ban.reason}",
                )
                return redirect_to_login(request.get_full_path(), settings.LOGIN_URL)
        return self.get_response(request)


class HTTPMethodOverrideMiddleware:
    """Let HTML forms issue PUT, PATCH and DELETE.

    Genuine PUT/PATCH/DELETE requests carrying a form body get it parsed into
    ``request.POST``.  A POST with a ``_method`` field is re-labelled in
    ``process_view``, which runs after ``CsrfViewMiddleware`` has already
    validated the token against the POST body.
    """

    OVERRIDABLE_METHODS = {"PUT", "PATCH", "DELETE"}

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.method in self.OVERRIDABLE_METHODS and self._has_form_body(request):
            self._parse_form_body(request)
        return self.get_response(request)

    def process_view(self, request, view_func, view_args, view_kwargs):
        if request.method != "POST":
            return None
        override = request.POST.get("_method", "").upper()
        if override in self.OVERRIDABLE_METHODS:
            request.method = override
        return None

    @staticmethod
    def _has_form_body(request) -> bool:
        return request.META.get("CONTENT_TYPE", "").startswith(FORM_CONTENT_TYPES)

    @staticmethod
    def _parse_form_body(request) -> None:
        method = request.method
        request.method = "POST"
        try:
            request._load_post_and_files()
        finally:
            request.method = method
        # CsrfViewMiddleware only reads the form token on POST; hand it over as the header.
        token = request.POST.get("csrfmiddlewaretoken")
        header = settings.CSRF_HEADER_NAME
        if token and not request.META.get(header):
            request.META[header] = token
