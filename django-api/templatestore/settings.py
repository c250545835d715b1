"""Django settings for the template storefront API.

All secrets and deployment-specific values come from the environment
(or a .env file) via python-decouple. Defaults are for local development.
"""

from pathlib import Path

from decouple import Csv, config

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = config("DJANGO_SECRET_KEY", default="dev-only-insecure-secret-key")
DEBUG = config("DEBUG", default=False, cast=bool)
ALLOWED_HOSTS = config("ALLOWED_HOSTS", default="localhost,127.0.0.1,testserver", cast=Csv())

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "shop.apps.ShopConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "templatestore.urls"
WSGI_APPLICATION = "templatestore.wsgi.application"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

DATABASES = {
    "default": {
        "ENGINE": config("DB_ENGINE", default="django.db.backends.sqlite3"),
        "NAME": config("DB_NAME", default=str(BASE_DIR / "db.sqlite3")),
        "USER": config("DB_USER", default=""),
        "PASSWORD": config("DB_PASSWORD", default=""),
        "HOST": config("DB_HOST", default=""),
        "PORT": config("DB_PORT", default=""),
        "ATOMIC_REQUESTS": False,
    }
}

REDIS_URL = config("REDIS_URL", default="")

if REDIS_URL:
    CACHES = {
        "default": {
            "BACKEND": "django_redis.cache.RedisCache",
            "LOCATION": REDIS_URL,
            "OPTIONS": {
                "CLIENT_CLASS": "django_redis.client.DefaultClient",
                "SOCKET_CONNECT_TIMEOUT": 5,
                "SOCKET_TIMEOUT": 5,
            },
        }
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "templatestore",
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

# ── REST framework ─────────────────────────────────────────────────────────────
COUPON_VERIFY_RATE = config("COUPON_VERIFY_RATE", default="60/min")
CREATE_ORDER_RATE = config("CREATE_ORDER_RATE", default="20/min")
CONTACT_RATE = config("CONTACT_RATE", default="5/hour")

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PARSER_CLASSES": ["rest_framework.parsers.JSONParser"],
    "EXCEPTION_HANDLER": "shop.handlers.exceptions.api_exception_handler",
    "UNAUTHENTICATED_USER": None,
    "DEFAULT_THROTTLE_RATES": {
        "coupon_verify": COUPON_VERIFY_RATE,
        "create_order": CREATE_ORDER_RATE,
        "contact": CONTACT_RATE,
    },
}

# ── External collaborators ─────────────────────────────────────────────────────
FIREBASE_CREDENTIALS_PATH = config("FIREBASE_CREDENTIALS_PATH", default="")

RZP_ID = config("RZP_ID", default="")
RZP_SECRET = config("RZP_SECRET", default="")

CASHFREE_APP_ID = config("CASHFREE_APP_ID", default="")
CASHFREE_SECRET_KEY = config("CASHFREE_SECRET_KEY", default="")
CASHFREE_MODE = config("CASHFREE_MODE", default="SANDBOX")

RESEND_API_KEY = config("RESEND_API_KEY", default="")
EMAIL_FROM_ADDRESS = config("EMAIL_FROM_ADDRESS", default="noreply@example.com")

SITE_URL = config("SITE_URL", default="http://localhost:8000").rstrip("/")
OUTBOUND_HTTP_TIMEOUT = config("OUTBOUND_HTTP_TIMEOUT", default=15, cast=int)

# ── Storefront behaviour ───────────────────────────────────────────────────────
# Seeds the whitelist of a freshly initialised settings document only.
ADMIN_WHITELIST_EMAILS = config("ADMIN_WHITELIST_EMAILS", default="", cast=Csv())
DOWNLOAD_TOKEN_TTL_DAYS = config("DOWNLOAD_TOKEN_TTL_DAYS", default=7, cast=int)
ORDER_VELOCITY_LIMIT = config("ORDER_VELOCITY_LIMIT", default=5, cast=int)
ORDER_VELOCITY_WINDOW_MINUTES = config("ORDER_VELOCITY_WINDOW_MINUTES", default=60, cast=int)
# Unpaid coupon orders hold their usage slot this long.
COUPON_RESERVATION_MINUTES = config("COUPON_RESERVATION_MINUTES", default=30, cast=int)
SETTINGS_CACHE_TIMEOUT = config("SETTINGS_CACHE_TIMEOUT", default=300, cast=int)

# ── Logging ────────────────────────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
        },
    },
    "loggers": {
        "shop": {
            "handlers": ["console"],
            "level": config("LOG_LEVEL", default="INFO"),
            "propagate": False,
        },
        "django.db.backends": {
            "handlers": ["console"],
            "level": "WARNING",
        },
    },
}
