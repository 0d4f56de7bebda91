"""
Django base settings for the ticket analytics project.
Shared settings between development, production and test.

Analytics and scheduled reporting are configured at the bottom of this file.
"""

from pathlib import Path
from decouple import config, Csv

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = config('SECRET_KEY', default='django-insecure-change-me-in-production')

# Application definition
DJANGO_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
]

THIRD_PARTY_APPS = [
    'django_filters',
    'django_q',
]

LOCAL_APPS = [
    'apps.accounts',
    'apps.departments',
    'apps.tasks',
    'apps.activity_log',
    'apps.analytics',
    'apps.reports',
    'apps.notifications',
]

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'


# =============================================================================
# AUTHENTICATION - Custom User Model
# =============================================================================
AUTH_USER_MODEL = 'accounts.User'

LOGIN_URL = '/admin/login/'

# Password hashing - use Argon2 as primary
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.Argon2PasswordHasher',
    'django.contrib.auth.hashers.PBKDF2PasswordHasher',
    'django.contrib.auth.hashers.PBKDF2SHA1PasswordHasher',
]


# =============================================================================
# INTERNATIONALIZATION & TIMEZONE
# =============================================================================
LANGUAGE_CODE = 'en-us'

# Cron expressions of scheduled reports are evaluated in this zone
TIME_ZONE = config('TIME_ZONE', default='Asia/Kolkata')

USE_I18N = True

USE_TZ = True


# =============================================================================
# STATIC FILES
# =============================================================================
STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'


# =============================================================================
# EMAIL SETTINGS
# =============================================================================
EMAIL_BACKEND = config(
    'EMAIL_BACKEND',
    default='django.core.mail.backends.console.EmailBackend'
)
EMAIL_HOST = config('EMAIL_HOST', default='localhost')
EMAIL_PORT = config('EMAIL_PORT', default=587, cast=int)
EMAIL_USE_TLS = config('EMAIL_USE_TLS', default=True, cast=bool)
EMAIL_HOST_USER = config('EMAIL_HOST_USER', default='')
EMAIL_HOST_PASSWORD = config('EMAIL_HOST_PASSWORD', default='')
EMAIL_TIMEOUT = config('EMAIL_TIMEOUT', default=30, cast=int)

DEFAULT_FROM_EMAIL = config('DEFAULT_FROM_EMAIL', default='noreply@example.com')


# =============================================================================
# DJANGO-Q2 SETTINGS (Background Tasks)
# =============================================================================
Q_CLUSTER = {
    'name': 'ticket_analytics',
    'workers': 2,
    'recycle': 500,
    'timeout': config('Q_CLUSTER_TIMEOUT', default=1800, cast=int),
    'retry': config('Q_CLUSTER_RETRY', default=3600, cast=int),
    'compress': True,
    'save_limit': 250,
    'queue_limit': 500,
    'cpu_affinity': 1,
    'label': 'Django Q2',
    'orm': 'default',
}


# =============================================================================
# ANALYTICS & SCHEDULED REPORTS
# =============================================================================
# Departments aggregated in parallel by the daily job (1 = sequential)
ANALYTICS_AGGREGATION_WORKERS = config('ANALYTICS_AGGREGATION_WORKERS', default=1, cast=int)

# Date range used by metric queries when the caller omits one
ANALYTICS_DEFAULT_RANGE_DAYS = config('ANALYTICS_DEFAULT_RANGE_DAYS', default=30, cast=int)

# Extra custom report providers, as dotted paths to callables
ANALYTICS_CUSTOM_REPORT_PROVIDERS = config(
    'ANALYTICS_CUSTOM_REPORT_PROVIDERS', default='', cast=Csv()
)

# Seconds allowed for generating or mailing one scheduled report
REPORT_DISPATCH_TIMEOUT = config('REPORT_DISPATCH_TIMEOUT', default=120, cast=int)

# Seconds after which a stale report tick lock expires
REPORT_TICK_LOCK_TIMEOUT = config('REPORT_TICK_LOCK_TIMEOUT', default=3600, cast=int)

# Cron expressions used by `manage.py setup_schedules`
ANALYTICS_AGGREGATION_CRON = config('ANALYTICS_AGGREGATION_CRON', default='5 0 * * *')
REPORT_TICK_CRON = config('REPORT_TICK_CRON', default='0 * * * *')


# =============================================================================
# DEFAULT PRIMARY KEY FIELD TYPE
# =============================================================================
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
