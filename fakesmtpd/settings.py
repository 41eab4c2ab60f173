"""
Django settings for fakesmtpd.

There is no database: the start_fakesmtpd management command runs the SMTP
server and serves the query API URLconf with Django's WSGI server.
Environment variables are loaded in layers through common.utils.env_util.
"""
from pathlib import Path

from app_fakesmtpd.consts.fakesmtpd_const import LOG_FORMAT
from common.utils.env_util import load_env

BASE_DIR = Path(__file__).resolve().parent.parent

env = load_env(BASE_DIR)

SECRET_KEY = env("DJANGO_SECRET_KEY", default="fakesmtpd-insecure-test-fixture-key")

DEBUG = env.bool("DJANGO_DEBUG", default=False)

ALLOWED_HOSTS = env.list("DJANGO_ALLOWED_HOSTS", default=["localhost", "127.0.0.1"])

INSTALLED_APPS = [
    "rest_framework",
    "app_fakesmtpd",
]

MIDDLEWARE = []

ROOT_URLCONF = "fakesmtpd.urls"

WSGI_APPLICATION = "fakesmtpd.wsgi.application"

DATABASES = {}

USE_TZ = True

# No django.contrib.auth: the query API is unauthenticated
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [],
    "UNAUTHENTICATED_USER": None,
    "DEFAULT_RENDERER_CLASSES": ["common.utils.http_util.PrettyJSONRenderer"],
    "DEFAULT_CONTENT_NEGOTIATION_CLASS": "common.utils.http_util.IgnoreClientContentNegotiation",
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "fakesmtpd": {
            "format": LOG_FORMAT,
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "fakesmtpd",
        },
    },
    "loggers": {
        "app_fakesmtpd": {
            "handlers": ["console"],
            "level": env("FAKESMTPD_LOG_LEVEL", default="INFO"),
            "propagate": False,
        },
        "django.server": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        "common": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
    },
}
