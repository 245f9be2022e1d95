"""
Production settings for a deployed pharmacy terminal.

`POS_DATABASE=postgres` moves the terminal store to a PostgreSQL server;
the default keeps the local SQLite file next to the counter machine.
"""
from pathlib import Path

from decouple import Csv, config

from .settings import *  # noqa: F401,F403


DEBUG = False

SECRET_KEY = config("SECRET_KEY")

ALLOWED_HOSTS = config("ALLOWED_HOSTS", default="pos.local", cast=Csv())
CSRF_TRUSTED_ORIGINS = config("CSRF_TRUSTED_ORIGINS", default="", cast=Csv())

if config("POS_DATABASE", default="sqlite") == "postgres":
    DATABASES["default"] = {  # noqa: F405
        "ENGINE": "django.db.backends.postgresql",
        "NAME": config("POSTGRES_DB", default="pharmacy_pos"),
        "USER": config("POSTGRES_USER", default="pharmacy_pos"),
        "PASSWORD": config("POSTGRES_PASSWORD"),
        "HOST": config("POSTGRES_HOST", default="localhost"),
        "PORT": config("POSTGRES_PORT", default=5432, cast=int),
        "CONN_MAX_AGE": config("POSTGRES_CONN_MAX_AGE", default=60, cast=int),
    }
else:
    DATABASES["default"]["OPTIONS"] = {"timeout": config("SQLITE_TIMEOUT", default=20, cast=int)}  # noqa: F405

# Static assets for the admin, served by WhiteNoise.
MIDDLEWARE = [MIDDLEWARE[0], "whitenoise.middleware.WhiteNoiseMiddleware", *MIDDLEWARE[1:]]  # noqa: F405
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}

# A terminal behind a TLS-terminating proxy on the shop network.
USE_HTTPS = config("USE_HTTPS", default=True, cast=bool)
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_SSL_REDIRECT = USE_HTTPS
SESSION_COOKIE_SECURE = USE_HTTPS
CSRF_COOKIE_SECURE = USE_HTTPS
SECURE_HSTS_SECONDS = config("SECURE_HSTS_SECONDS", default=3600 if USE_HTTPS else 0, cast=int)

# Keep an audit trail of oversells and persistence failures on disk.
AUDIT_LOG_PATH = config("AUDIT_LOG_PATH", default=str(BASE_DIR / "logs" / "terminal.log"))  # noqa: F405
Path(AUDIT_LOG_PATH).parent.mkdir(parents=True, exist_ok=True)

LOGGING["handlers"]["audit"] = {  # noqa: F405
    "class": "logging.handlers.RotatingFileHandler",
    "filename": AUDIT_LOG_PATH,
    "maxBytes": 5 * 1024 * 1024,
    "backupCount": 5,
    "formatter": "verbose",
    "level": "WARNING",
}
LOGGING["loggers"]["apps"]["handlers"] = ["console", "audit"]  # noqa: F405
LOGGING["root"]["level"] = config("ROOT_LOG_LEVEL", default="INFO")  # noqa: F405
