from __future__ import annotations

from typing import Any, Optional

from django.conf import settings
from django.db import connections, OperationalError, ProgrammingError

from board.models import SiteSetting

TOPICS_PER_PAGE = "BOARD_TOPICS_PER_PAGE"
POSTS_PER_PAGE = "BOARD_POSTS_PER_PAGE"


def get_value(key: str, default: Optional[str] = None, *, using: str = "default") -> Optional[str]:
    table = SiteSetting._meta.db_table
    if not _table_exists(using, table):
        return default
    try:
        return SiteSetting.objects.using(using).get(key=key).value
    except SiteSetting.DoesNotExist:
        return default
    except (OperationalError, ProgrammingError):
        return default


def set_value(key: str, value: Any) -> None:
    SiteSetting.objects.update_or_create(key=key, defaults={'value': str(value)})


def get_int(key: str, default: int = 0, *, using: str = "default") -> int:
    raw = get_value(key, None, using=using)
    try:
        return int(raw) if raw is not None else default
    except (TypeError, ValueError):
        return default


def page_size(key: str) -> int:
    """Page size for a listing: SiteSetting override, then settings, never below 1."""
    fallback = int(getattr(settings, key, 20))
    return max(get_int(key, fallback), 1)


def _table_exists(connection_alias: str, table_name: str) -> bool:
    try:
        return table_name in connections[connection_alias].introspection.table_names()
    except (OperationalError, ProgrammingError):
        return False
