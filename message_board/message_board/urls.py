"""URL configuration for message_board.

Everything lives in the `board` app; uploaded avatars are served from
MEDIA_URL while DEBUG is on.
"""
from __future__ import annotations

from django.conf import settings
from django.conf.urls.static import static
from django.urls import include, path

urlpatterns = [
    path('', include('board.urls')),
]

urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
