from .base import *  # noqa
import sentry_sdk
from .base import BASE_DIR, LOGGING
from .utils.get_env import env

# -----------------------------------------------------------------------------
# Production Settings
# -----------------------------------------------------------------------------
DEBUG = False
SECRET_KEY = env.get("DJANGO_SECRET_KEY")
ALLOWED_HOSTS = env.list("ALLOWED_HOSTS")

# -----------------------------------------------------------------------------
# Databases for Production
# -----------------------------------------------------------------------------
DATABASES = {"default": env.db("DATABASE_URL")}

# -----------------------------------------------------------------------------
# CORS Settings - Production
# -----------------------------------------------------------------------------
CORS_ALLOW_ALL_ORIGINS = False
CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS")

# -----------------------------------------------------------------------------
# Cache - Production
# -----------------------------------------------------------------------------
CACHES = {
    "default": {
        "BACKEND": "django_redis.cache.RedisCache",
        "LOCATION": env.get("REDIS_URL"),
        "OPTIONS": {
            "CLIENT_CLASS": "django_redis.client.DefaultClient",
        },
    }
}

# -----------------------------------------------------------------------------
# Static Files - Production
# -----------------------------------------------------------------------------
STATIC_ROOT = BASE_DIR / "static_root"
STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
    },
    "staticfiles": {
        "BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage",
    },
}

# -----------------------------------------------------------------------------
# Sentry Integration - Production
# -----------------------------------------------------------------------------
sentry_sdk.init(
    dsn=env.get("SENTRY_DSN"),
    traces_sample_rate=env.get("SENTRY_TRACES_SAMPLE_RATE", default=0.2, cast_to=float),
    send_default_pii=False,
)

# -----------------------------------------------------------------------------
# Logging - Production
# -----------------------------------------------------------------------------
LOGGING["loggers"][""]["level"] = env.get("LOG_LEVEL", default="INFO")

# -----------------------------------------------------------------------------
# Security Settings - Production
# -----------------------------------------------------------------------------
X_FRAME_OPTIONS = "DENY"
SECURE_SSL_REDIRECT = True
SECURE_HSTS_SECONDS = 3600
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True
SECURE_CONTENT_TYPE_NOSNIFF = True
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
JWT_AUTH_SECURE = True
JWT_AUTH_SAMESITE = "Lax"
