from __future__ import annotations

from django.conf import settings
from django.http import HttpRequest

from board.models import Complaint


def viewer(request: HttpRequest) -> dict[str, object]:
    user = getattr(request, "user", None)
    is_moderator = bool(user is not None and user.is_authenticated and user.is_moderator())
    return {
        "site_name": getattr(settings, "BOARD_SITE_NAME", "Message Board"),
        "viewer_is_moderator": is_moderator,
        "open_complaint_count": Complaint.objects.count() if is_moderator else 0,
    }
