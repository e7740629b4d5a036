import os
from decimal import Decimal
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-only-secret-key-change-me")
DEBUG = os.getenv("DJANGO_DEBUG", "false").lower() in ("1", "true", "yes")
ALLOWED_HOSTS = [h for h in os.getenv("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h]

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "laundry.apps.LaundryConfig",
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

ROOT_URLCONF = "laundry_site.urls"
WSGI_APPLICATION = "laundry_site.wsgi.application"

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

# Users and sessions only; orders and expenses live in DynamoDB
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.getenv("DJANGO_DB_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}

LOGIN_URL = "login"
LOGIN_REDIRECT_URL = "dashboard"
LOGOUT_REDIRECT_URL = "login"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "Africa/Johannesburg"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# -----------------------------
# Laundry settings
# -----------------------------
LAUNDRY_PRICE_PER_LOAD = Decimal(os.getenv("LAUNDRY_PRICE_PER_LOAD", "75.00"))
LAUNDRY_CURRENCY = os.getenv("LAUNDRY_CURRENCY", "R")
LAUNDRY_ADMIN_GROUP = os.getenv("LAUNDRY_ADMIN_GROUP", "Laundry Admins")

# Forward change events to SNS for other processes
LAUNDRY_PUBLISH_CHANGES = os.getenv("LAUNDRY_PUBLISH_CHANGES", "false").lower() in ("1", "true", "yes")

# -----------------------------
# Logging
# -----------------------------
LAUNDRY_LOG_LEVEL = os.getenv("LAUNDRY_LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s [%(name)s] %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "loggers": {
        "laundry": {"handlers": ["console"], "level": LAUNDRY_LOG_LEVEL, "propagate": False},
        "aws_lib": {"handlers": ["console"], "level": LAUNDRY_LOG_LEVEL, "propagate": False},
        "infra_setup": {"handlers": ["console"], "level": LAUNDRY_LOG_LEVEL, "propagate": False},
    },
}
