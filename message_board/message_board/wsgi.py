"""WSGI config for the message_board project."""
from __future__ import annotations

import os
from pathlib import Path

from django.core.wsgi import get_wsgi_application
from dotenv import load_dotenv


def _load_env() -> None:
    repo_root = Path(__file__).resolve().parent.parent.parent
    env_path = repo_root / ".env"
    if env_path.exists():
        load_dotenv(env_path)


_load_env()

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'message_board.settings')

application = get_wsgi_application()
