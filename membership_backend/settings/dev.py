"""
Development settings for the membership purchase backend.

Extends the base settings by enabling debugging and allowing all hosts.
Outgoing email is printed to the console instead of being sent.  Do not
use these settings in production.
"""
from .base import *  # noqa

# Development toggles
DEBUG = True
ALLOWED_HOSTS = ["*", "127.0.0.1", "localhost"]
CSRF_TRUSTED_ORIGINS = ["http://127.0.0.1:8000", "http://localhost:8000"]
EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"
LOGGING["loggers"]["payments"]["level"] = "DEBUG"  # noqa: F405
