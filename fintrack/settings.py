# fintrack/settings.py
# ─────────────────────────────────────────────────────────────────────────────
# ⚙️ Project settings for FinTrack.
#    Everything that changes between machines comes from the environment
#    (optionally a .env file at the project root, loaded with python-dotenv).
# ─────────────────────────────────────────────────────────────────────────────

import os                                                   # 🌍 read environment variables
from pathlib import Path                                    # 📁 build filesystem paths

from dotenv import load_dotenv                              # 📄 .env support for local dev

BASE_DIR = Path(__file__).resolve().parent.parent           # 🏠 repo root (where manage.py lives)

load_dotenv(BASE_DIR / ".env")                              # ✅ no-op when the file is missing


def _env_bool(name, default=False):
    """Read a yes/no style environment flag."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


# ===== Core ==================================================================
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-insecure-fintrack-key")  # 🔑 override in production!
DEBUG = _env_bool("DJANGO_DEBUG", default=True)
ALLOWED_HOSTS = [h.strip() for h in os.getenv("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]

INSTALLED_APPS = [
    "django.contrib.admin",                                 # 🛠️ the only place records can be deleted
    "django.contrib.auth",                                  # 👤 login/session lifecycle
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",                              # 🔔 short user-facing notices
    "django.contrib.staticfiles",
    "accounts",                                             # 🙋 signup / account page
    "finance",                                              # 💰 records, dashboards, exports, AI
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

ROOT_URLCONF = "fintrack.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "fintrack" / "templates"],      # 🖼️ base.html + 404.html
        "APP_DIRS": True,                                   # 🖼️ app templates (finance/, accounts/)
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

WSGI_APPLICATION = "fintrack.wsgi.application"

# ===== Database ==============================================================
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.getenv("FINTRACK_DB_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ===== Auth ==================================================================
AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

LOGIN_URL = "accounts:login"                                # 🔒 where @login_required sends people
LOGIN_REDIRECT_URL = "finance:dashboard"                    # ✅ after a successful login
LOGOUT_REDIRECT_URL = "accounts:login"

# ===== i18n / time ===========================================================
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"                                           # 🗓️ month attribution happens in UTC
USE_I18N = True
USE_TZ = True

# ===== Static files ==========================================================
STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# ===== Uploads ===============================================================
_MAX_UPLOAD_MB = int(os.getenv("FINTRACK_MAX_UPLOAD_MB", "10"))
DATA_UPLOAD_MAX_MEMORY_SIZE = _MAX_UPLOAD_MB * 1024 * 1024 * 2   # 📦 base64 bodies are ~1.33x the file
FILE_UPLOAD_MAX_MEMORY_SIZE = _MAX_UPLOAD_MB * 1024 * 1024

# ===== App configuration =====================================================
# 💡 Read by finance.ai / finance.insights / finance.forms via settings.FINTRACK[...]
FINTRACK = {
    "OPENAI_API_KEY": os.getenv("OPENAI_API_KEY", ""),
    "OPENAI_MODEL": os.getenv("FINTRACK_OPENAI_MODEL", "gpt-4o-mini"),
    "CURRENCY_SYMBOL": os.getenv("FINTRACK_CURRENCY_SYMBOL", "₹"),
    "MAX_UPLOAD_BYTES": _MAX_UPLOAD_MB * 1024 * 1024,
    "STATEMENT_DISPLAY_LIMIT": 50,
}

# ===== Logging ===============================================================
# 📝 One console handler; library modules only call logging.getLogger(__name__).
_LOG_LEVEL = os.getenv("FINTRACK_LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(name)s %(levelname)s %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "finance": {"handlers": ["console"], "level": _LOG_LEVEL, "propagate": False},
        "accounts": {"handlers": ["console"], "level": _LOG_LEVEL, "propagate": False},
        "django.request": {"handlers": ["console"], "level": "WARNING", "propagate": False},
    },
}
