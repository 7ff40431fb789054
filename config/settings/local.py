import environ

from .base import *  # Import defaults from base.py

# Initialize environment variables
env = environ.Env()

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = env("SECRET_KEY", default="django-insecure-dev-key")

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = True

ALLOWED_HOSTS = ["*"]

# Database
# 'env.db()' automatically parses the 'DATABASE_URL' from docker-compose.yml
# e.g., postgres://postgres:postgres@db:5432/reward_ledger
DATABASES = {
    "default": env.db(default="sqlite:///" + str(BASE_DIR / "db.sqlite3")),
}

# Redis Cache (catalogue lookups)
CACHES = {
    "default": {
        "BACKEND": "django_redis.cache.RedisCache",
        "LOCATION": env("REDIS_URL", default="redis://redis:6379/0"),
        "OPTIONS": {
            "CLIENT_CLASS": "django_redis.client.DefaultClient",
        },
    }
}

# --- CELERY SETTINGS ---
CELERY_BROKER_URL = env("REDIS_URL", default="redis://redis:6379/0")
CELERY_RESULT_BACKEND = env("REDIS_URL", default="redis://redis:6379/0")

LOGGING["loggers"]["rewards"]["level"] = "DEBUG"
LOGGING["loggers"]["tokens"]["level"] = "DEBUG"
