from .base import *  # noqa: F401, F403

DEBUG = True

# Print mail to the console instead of sending it
EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

# Show every signing step while developing
LOGGING["loggers"]["apps"]["level"] = env("APPS_LOG_LEVEL", default="DEBUG")  # noqa: F405
