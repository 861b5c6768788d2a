from django.conf import global_settings

BASE_DIR = "/sites/site"

# ------------------------------------------------------------------
# ------- Example Django settings for a site using access expiration -------
# ------------------------------------------------------------------
# Customize these to suit your needs. Documentation can be found at:
# https://docs.djangoproject.com/en/stable/ref/settings/

# Core settings
# DANGER: SETTING "DEBUG = True" ON A PRODUCTION SYSTEM IS EXTREMELY DANGEROUS.
# ONLY SET "DEBUG = True" FOR DEVELOPMENT AND TESTING!!!
DEBUG = False
DEFAULT_AUTO_FIELD = "django.db.models.AutoField"
ROOT_URLCONF = "urls"

# -------------------- Session --------------------
SESSION_COOKIE_AGE = 2419200  # 2419200 seconds == 4 weeks
SESSION_EXPIRE_AT_BROWSER_CLOSE = True
SESSION_COOKIE_SECURE = False  # Set to True if you have an HTTPS Certificate installed

# -------------------- CSRF --------------------
CSRF_COOKIE_SECURE = False  # Set to True if you have an HTTPS Certificate installed

# -------------------- Authentication URLs --------------------
LOGIN_URL = "login"
LOGIN_REDIRECT_URL = "/"

# -------------------- Authentication --------------------
# The access expiration check only runs with backends using AccessExpirationBackendMixin
AUTHENTICATION_BACKENDS = [
    "access_expiration.views.authentication.AccessExpirationModelBackend",
    # Uncomment when the web server authenticates users (REMOTE_USER)
    # "access_expiration.views.authentication.RemoteUserAuthenticationBackend",
]

# -------------------- Access expiration --------------------
# Days of the week the notifications are sent (see the install_systemd_timer command)
# The welcome email grace period has to be at least the longest gap between two of those days
ACCESS_EXPIRATION_SCAN_DAYS = ["Mon", "Thu"]
# User model field holding the registration date
ACCESS_EXPIRATION_REGISTRATION_FIELD = "date_joined"

DATETIME_FORMAT = "l, F jS, Y @ g:i A"
DATE_FORMAT = "l, F jS, Y"
TIME_FORMAT = "g:i A"
DATE_INPUT_FORMATS = ["%m/%d/%Y", *global_settings.DATE_INPUT_FORMATS]

USE_I18N = False
USE_TZ = True

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "django.contrib.admin",
    "access_expiration",
    "rest_framework",
    "django_filters",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    # Needed for remote user Authentication
    # "django.contrib.auth.middleware.RemoteUserMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.contrib.auth.context_processors.auth",
                "django.template.context_processors.debug",
                "django.template.context_processors.tz",
                "django.template.context_processors.request",
                "django.contrib.messages.context_processors.messages",
            ]
        },
    }
]

REST_FRAMEWORK = {
    "DEFAULT_FILTER_BACKENDS": ("django_filters.rest_framework.DjangoFilterBackend",),
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
    "PAGE_SIZE": 1000,
}

ALLOWED_HOSTS = ["site.mydomain.com", "localhost"]
CSRF_TRUSTED_ORIGINS = ["https://{}".format(ALLOWED_HOSTS[0])]

ADMINS = [("Captain", "captain@mydomain.com")]
MANAGERS = ADMINS

ACCESS_EXPIRATION_EMAIL_SUBJECT_PREFIX = "[Site] "
SERVER_EMAIL = "Site Administrator <admin@mydomain.com>"
DEFAULT_FROM_EMAIL = "Site Webmaster <webmaster@mydomain.com>"
EMAIL_USE_DEFAULT_AND_REPLY_TO = False

EMAIL_HOST = "mail.mydomain.com"
EMAIL_PORT = 25

TIME_ZONE = "America/New_York"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR + "/site.db",
    }
}

STATIC_ROOT = BASE_DIR + "/static/"
STATIC_URL = "/static/"

SECRET_KEY = "secret-key"  # Generate this for yourself

# Throttling of the error emails sent to ADMINS
LOGGING_ERROR_EMAIL_PERIOD_SECONDS = 60
LOGGING_ERROR_EMAIL_MAX_EMAILS = 1

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(levelname)s %(asctime)s %(module)s %(process)d %(thread)d %(message)s",
            "datefmt": "%d/%b/%Y %H:%M:%S",
        },
        "simple": {
            "format": "[%(asctime)s] %(name)s %(levelname)s %(message)s",
            "datefmt": "%d/%b/%Y %H:%M:%S",
        },
    },
    "handlers": {
        "email_admins": {
            "level": "ERROR",  # Only email admins for errors, notification run failures included
            "class": "access_expiration.log.ThrottledAdminEmailHandler",
        },
        "error_file": {
            "level": "WARNING",  # Log all warnings and errors to this file
            "class": "logging.FileHandler",
            "filename": BASE_DIR + "/logs/site_error.log",
            "formatter": "verbose",
        },
        "file": {
            "class": "logging.FileHandler",
            "filename": BASE_DIR + "/logs/site.log",
            "formatter": "simple",
        },
        "console": {
            "formatter": "simple",
            "class": "logging.StreamHandler",
        },
    },
    "loggers": {
        "": {
            "handlers": ["file", "console", "error_file", "email_admins"],
            "level": "WARNING",  # Change to DEBUG when debugging
            "propagate": True,
        },
        "access_expiration": {
            "level": "INFO",  # Change to DEBUG when debugging
            "propagate": True,
        },
        "django": {
            "level": "WARNING",
            "propagate": True,
        },
    },
}
