"""
Settings shared by every environment of the Reward Ledger project.
Environment specific modules (local, production, test) import everything from here.
"""

from pathlib import Path

import environ

BASE_DIR = Path(__file__).resolve().parent.parent.parent

env = environ.Env()

INSTALLED_APPS = [
    "core",
    "tokens",
    "rewards",
]

MIDDLEWARE = []

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

# --- REWARD LEDGER SETTINGS ---
# Dotted path of the class that receives ledger notifications (see rewards.notifications).
REWARD_LEDGER_NOTIFICATION_SINK = env(
    "REWARD_LEDGER_NOTIFICATION_SINK", default="rewards.notifications.LoggingNotificationSink"
)
# How long a catalogue entry may be served from cache (seconds).
REWARD_LEDGER_CACHE_TIMEOUT = env.int("REWARD_LEDGER_CACHE_TIMEOUT", default=300)

# --- CELERY SETTINGS ---
CELERY_ACCEPT_CONTENT = ["application/json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = TIME_ZONE

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {module} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "INFO",
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        "rewards": {
            "handlers": ["console"],
            "level": env("REWARD_LEDGER_LOG_LEVEL", default="INFO"),
            "propagate": True,
        },
        "tokens": {
            "handlers": ["console"],
            "level": env("REWARD_LEDGER_LOG_LEVEL", default="INFO"),
            "propagate": True,
        },
    },
}
