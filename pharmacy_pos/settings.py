"""
Django settings for pharmacy_pos project.

Every tunable is read through python-decouple so a `.env` file or the
process environment can override it.
"""
from pathlib import Path

from decouple import Csv, config


BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = config("SECRET_KEY", default="django-insecure-pharmacy-pos-dev-key")

DEBUG = config("DEBUG", default=True, cast=bool)

ALLOWED_HOSTS = config("ALLOWED_HOSTS", default="localhost,127.0.0.1,testserver", cast=Csv())


INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "apps.terminal",
    "apps.storage",
    "apps.medicines",
    "apps.inventory",
    "apps.sales",
    "apps.dashboard",
    "apps.assistant",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "apps.terminal.middleware.TerminalSessionMiddleware",
]

ROOT_URLCONF = "pharmacy_pos.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
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

WSGI_APPLICATION = "pharmacy_pos.wsgi.application"


DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": config("SQLITE_PATH", default=str(BASE_DIR / "db.sqlite3")),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = config("TIME_ZONE", default="UTC")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"


REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "UNAUTHENTICATED_USER": None,
    "EXCEPTION_HANDLER": "apps.terminal.exceptions.api_exception_handler",
}


LOG_LEVEL = config("LOG_LEVEL", default="INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name} {message}",
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
        "level": "WARNING",
    },
    "loggers": {
        "apps": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}


# Terminal
PHARMACY_NAME = config("PHARMACY_NAME", default="Abdullah Pharmacy")
PHARMACY_REGISTRATION = config("PHARMACY_REGISTRATION", default="REG # 40125-PK")
PHARMACY_ADDRESS = config("PHARMACY_ADDRESS", default="3 Marla Scheme Near Cricket Stadium Chakwal")
PHARMACY_PHONE = config("PHARMACY_PHONE", default="+923005471567")
PHARMACY_RECEIPT_FOOTER = config(
    "PHARMACY_RECEIPT_FOOTER",
    default="STAY HEALTHY, STAY SAFE,NO RETURNS ON SOLD MEDICINES",
    cast=Csv(),
)
CURRENCY_LABEL = config("CURRENCY_LABEL", default="PKR")
WALK_IN_CUSTOMER = config("WALK_IN_CUSTOMER", default="Walk-in Customer")
RECEIPT_WIDTH = config("RECEIPT_WIDTH", default=42, cast=int)
DEFAULT_LOW_STOCK_THRESHOLD = config("DEFAULT_LOW_STOCK_THRESHOLD", default=10, cast=int)

POS_AUTOSAVE = config("POS_AUTOSAVE", default=True, cast=bool)
POS_ALLOW_OVERSELL = config("POS_ALLOW_OVERSELL", default=False, cast=bool)
PERSISTENCE_RETRIES = config("PERSISTENCE_RETRIES", default=2, cast=int)


# Assistant
GEMINI_API_KEY = config("GEMINI_API_KEY", default="")
ASSISTANT_MODEL = config("ASSISTANT_MODEL", default="gemini-2.5-flash")
ASSISTANT_TIMEOUT_SECONDS = config("ASSISTANT_TIMEOUT_SECONDS", default=15, cast=int)
ASSISTANT_TEMPERATURE = config("ASSISTANT_TEMPERATURE", default=0.7, cast=float)
