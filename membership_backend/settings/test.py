"""
Test settings for the membership purchase backend.

Uses an in-memory SQLite database, runs Celery tasks eagerly and keeps
outgoing email in ``django.core.mail.outbox``.
"""
from .base import *  # noqa

DEBUG = False
ALLOWED_HOSTS = ["*"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}
CACHES = {"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"}}

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

STRIPE_SECRET_APIKEY = "sk_test_dummy"
STRIPE_ACCOUNT_KEYS = {"hugo": "sk_test_hugo"}
STRIPE_WEBHOOK_SECRET = ""
LOGIN_URI_ROOT = "https://members.example.com/login"

REST_FRAMEWORK = {
    **REST_FRAMEWORK,  # noqa: F405
    "DEFAULT_THROTTLE_CLASSES": [],
}
