from __future__ import annotations

from django.apps import AppConfig


class BoardConfig(AppConfig):
    """Configuration for the board app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'board'
    verbose_name = 'Message board'
