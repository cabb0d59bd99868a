import environ
from datetime import timedelta
from pathlib import Path

from corsheaders.defaults import default_headers
import os

from .utils.get_env import env

# # Initialize environment variables with django-environ
BASE_DIR = Path(__file__).resolve().parent.parent.parent
environ.Env.read_env(os.path.join(BASE_DIR, ".env"))


# -----------------------------------------------------------------------------
# Basic Config
# -----------------------------------------------------------------------------
ROOT_URLCONF = "marketboard.urls"
ASGI_APPLICATION = "marketboard.asgi.application"
WSGI_APPLICATION = "marketboard.wsgi.application"
SECRET_KEY = env.get("DJANGO_SECRET_KEY", default="django-insecure$@")
# -----------------------------------------------------------------------------
# Time & Language
# -----------------------------------------------------------------------------
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# -----------------------------------------------------------------------------
# Security and Users
# -----------------------------------------------------------------------------
AUTH_USER_MODEL = "users.CustomUser"
AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"
    },
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

# -----------------------------------------------------------------------------
# Applications configuration
# -----------------------------------------------------------------------------
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "whitenoise.runserver_nostatic",
    "django.contrib.staticfiles",
    # 3rd party apps
    "corsheaders",
    "rest_framework",
    "rest_framework_simplejwt",
    "rest_framework_simplejwt.token_blacklist",
    "django_filters",
    "drf_spectacular",
    # local apps
    "apps.users.apps.UsersConfig",
    "apps.core.apps.CoreConfig",
    "apps.monitoring.apps.MonitoringConfig",
    "apps.items.apps.ItemsConfig",
    "apps.requests.request_base.apps.RequestBaseConfig",
    "apps.requests.request_offer.apps.RequestOfferConfig",
    "apps.requests.request_negotiation.apps.RequestNegotiationConfig",
]

MIDDLEWARE = [
    "corsheaders.middleware.CorsMiddleware",
    "apps.monitoring.middleware.PerformanceMonitoringMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [str(BASE_DIR / "templates")],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]


# -----------------------------------------------------------------------------
# Rest Framework
# -----------------------------------------------------------------------------

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "apps.core.authentication.CookieJWTAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": ("rest_framework.permissions.IsAuthenticated",),
    "DEFAULT_FILTER_BACKENDS": ("django_filters.rest_framework.DjangoFilterBackend",),
    "DEFAULT_RENDERER_CLASSES": ("rest_framework.renderers.JSONRenderer",),
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "EXCEPTION_HANDLER": "apps.core.exceptions.custom_exception_handler",
    "DEFAULT_THROTTLE_RATES": {
        "anon": "100/day",
        "request_list": "1000/min",
        "request_create": "20/min",
        "request_update": "60/min",
        "offer_create": "20/min",
        "offer_transition": "30/min",
        "negotiation": "60/min",
        "negotiation_message": "30/min",
    },
}

# -----------------------------------------------------------------------------
# Simple JWT
# -----------------------------------------------------------------------------


SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=15),  # Short-lived access tokens
    "REFRESH_TOKEN_LIFETIME": timedelta(days=1),
    "ROTATE_REFRESH_TOKENS": True,
    "BLACKLIST_AFTER_ROTATION": True,
    "ALGORITHM": "HS256",
    "SIGNING_KEY": env.get("DJANGO_SECRET_KEY", default="django-insecure$@"),
    "VERIFYING_KEY": None,
    "AUTH_HEADER_TYPES": ("Bearer",),
    "USER_ID_FIELD": "id",
    "USER_ID_CLAIM": "user_id",
    "AUTH_TOKEN_CLASSES": ("rest_framework_simplejwt.tokens.AccessToken",),
    "TOKEN_TYPE_CLAIM": "token_type",
}

# - -----------------------------------------------------------------------------
# JWT Authentication
# ------------------------------------------------------------------------------
JWT_AUTH_COOKIE = "access_token"
JWT_AUTH_REFRESH_COOKIE = "refresh_token"
JWT_AUTH_SECURE = env.get("JWT_AUTH_SECURE", default=False, cast_to=bool)
JWT_AUTH_SAMESITE = env.get("JWT_AUTH_SAMESITE", default="Lax")
JWT_AUTH_HTTPONLY = True
JWT_AUTH_PATH = "/"

# -----------------------------------------------------------------------------
# CORS Settings
# -----------------------------------------------------------------------------
CORS_ALLOW_CREDENTIALS = True

CORS_ALLOW_HEADERS = list(default_headers) + [
    "cache-control",
]

SITE_NAME = "Emerald Request Board"

# -----------------------------------------------------------------------------
# DRF Spectacular Settings
# -----------------------------------------------------------------------------


SPECTACULAR_SETTINGS = {
    "TITLE": "Emerald Request Board API",
    "DESCRIPTION": "Player requests, offers and price negotiation",
    "VERSION": "1.0.0",
    "EXTENSIONS": [
        "apps.core.openapi.spectacular.CookieJWTAuthenticationExtension",
    ],
    "ENUM_NAME_OVERRIDES": {
        "RequestStatusEnum": "apps.requests.request_base.models.RequestStatus",
        "OfferStatusEnum": "apps.requests.request_offer.models.OfferStatus",
        "NegotiationStatusEnum": "apps.requests.request_negotiation.models.NegotiationStatus",
        "CurrencyEnum": "apps.core.utils.currency.Currency",
    },
}

# -----------------------------------------------------------------------------
# Static & Media Base Configuration
# -----------------------------------------------------------------------------
STATIC_URL = "/static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# -----------------------------------------------------------------------------
# Import modular settings
# -----------------------------------------------------------------------------
from .utils.performance import *  # noqa: F403 F401 E402
from .utils.logging import *  # noqa: F403 F401 E402
from .utils.negotiation import *  # noqa: F403 F401 E402
