import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "objgit-dev-only-secret-key")
DEBUG = os.environ.get("DJANGO_DEBUG", "0") == "1"
ALLOWED_HOSTS = os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")

INSTALLED_APPS = [
    "server_app",
]

MIDDLEWARE = [
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "django_core.urls"
WSGI_APPLICATION = "django_core.wsgi.application"

# Objects live on disk in one ObjectStore per repository, not in a database.
DATABASES = {}

OBJGIT_SERVER_ROOT = os.environ.get("OBJGIT_SERVER_ROOT", str(BASE_DIR / "server_repos"))

USE_TZ = True

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "console": {"class": "logging.StreamHandler"},
    },
    "loggers": {
        "server_app": {"handlers": ["console"], "level": os.environ.get("OBJGIT_LOG_LEVEL", "INFO")},
    },
}
