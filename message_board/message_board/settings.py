"""Django settings for the message_board project.

Every value that differs between a laptop and a deployment is read from the
environment (a `.env` file at the repository root is loaded by `manage.py`
and `wsgi.py`).  Defaults are tuned for local development on SQLite.
"""
from __future__ import annotations

import os
from pathlib import Path

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).lower() not in {"0", "false", "off", "no", ""}


def _env_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "change-me-to-a-unique-string")

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = _env_flag("DJANGO_DEBUG", "1")

ALLOWED_HOSTS = _env_list("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver")
CSRF_TRUSTED_ORIGINS = _env_list("CSRF_TRUSTED_ORIGINS", "http://localhost:8000")


# Application definition
INSTALLED_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'board',
]

# HTTPMethodOverrideMiddleware must come after CsrfViewMiddleware: the
# override happens in process_view, once the token has been read from the
# POST body.
MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'board.middleware.BanEnforcementMiddleware',
    'board.middleware.HTTPMethodOverrideMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'message_board.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
                'board.context_processors.viewer',
            ],
        },
    },
]

WSGI_APPLICATION = 'message_board.wsgi.application'


# Database
# https://docs.djangoproject.com/en/4.2/ref/settings/#databases
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.getenv("DATABASE_PATH", str(BASE_DIR / 'db.sqlite3')),
    }
}


# Authentication
AUTH_USER_MODEL = 'board.User'
LOGIN_URL = 'board:login'
LOGIN_REDIRECT_URL = 'board:index'
LOGOUT_REDIRECT_URL = 'board:index'

AUTH_PASSWORD_VALIDATORS: list[dict[str, str]] = []

CSRF_FAILURE_VIEW = 'board.views.csrf_failure'


# Internationalization
# https://docs.djangoproject.com/en/4.2/topics/i18n/

LANGUAGE_CODE = 'en-us'

TIME_ZONE = 'UTC'

USE_I18N = True

USE_TZ = True


# Static files (CSS, JavaScript, Images)
# https://docs.djangoproject.com/en/4.2/howto/static-files/

STATIC_URL = 'static/'

# Uploaded avatars land in MEDIA_ROOT/images/.
MEDIA_URL = '/storage/'
MEDIA_ROOT = Path(os.getenv("MEDIA_ROOT", str(BASE_DIR / 'storage')))
FILE_UPLOAD_MAX_MEMORY_SIZE = 2 * 1024 * 1024


# Default primary key field type
# https://docs.djangoproject.com/en/4.2/ref/settings/#default-auto-field

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "loggers": {
        "board": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "django": {"handlers": ["console"], "level": os.getenv("DJANGO_LOG_LEVEL", "WARNING").upper()},
    },
}


# Board tunables (runtime overrides live in the SiteSetting table)
BOARD_SITE_NAME = os.getenv("BOARD_SITE_NAME", "Message Board")
BOARD_TOPICS_PER_PAGE = int(os.getenv("BOARD_TOPICS_PER_PAGE", "20"))
BOARD_POSTS_PER_PAGE = int(os.getenv("BOARD_POSTS_PER_PAGE", "15"))
AVATAR_EXTENSIONS = ["jpg", "jpeg", "png"]


# Background maintenance
BAN_PURGE_INTERVAL_SECONDS = int(os.getenv("BAN_PURGE_INTERVAL_SECONDS", "3600"))

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "memory://")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND") or None
CELERY_TASK_ROUTES = {
    "board.tasks.purge_expired_bans": {"queue": "maintenance"},
}
CELERY_BEAT_SCHEDULE = {
    "bans.purge-expired": {
        "task": "board.tasks.purge_expired_bans",
        "schedule": float(max(BAN_PURGE_INTERVAL_SECONDS, 60)),
        "options": {"queue": "maintenance"},
    },
}
