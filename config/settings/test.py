from .base import *  # noqa: F401, F403

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

# Run django-q2 tasks inline
Q_CLUSTER = {
    "name": "leasesign-test",
    "orm": "default",
    "sync": True,
}

LEASE_SIGNING_EMAIL_NOTIFICATIONS = False
SITE_URL = "https://app.example.com"
