import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'insecure-dev-key-change-me')
DEBUG = _env_bool('DJANGO_DEBUG', False)
ALLOWED_HOSTS = [h for h in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',') if h]

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'lms_core',
    'integrity_advocate',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.environ.get('DJANGO_SQLITE_PATH', str(BASE_DIR / 'db.sqlite3')),
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

USE_TZ = True
TIME_ZONE = 'UTC'
STATIC_URL = 'static/'

# Redis backs the cache when available; otherwise keep everything in-process.
REDIS_URL = os.environ.get('REDIS_URL')
if REDIS_URL:
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.redis.RedisCache',
            'LOCATION': REDIS_URL,
        }
    }
else:
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        }
    }

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework.authentication.SessionAuthentication',
        'rest_framework.authentication.BasicAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
}

EMAIL_BACKEND = os.environ.get('DJANGO_EMAIL_BACKEND', 'django.core.mail.backends.console.EmailBackend')
DEFAULT_FROM_EMAIL = os.environ.get('DJANGO_DEFAULT_FROM_EMAIL', 'noreply@localhost')

# Integrity Advocate
INTEGRITYADVOCATE_BASE_URL = os.environ.get('INTEGRITYADVOCATE_BASE_URL', 'https://ca.integrityadvocateserver.com')
INTEGRITYADVOCATE_API_PATH = os.environ.get('INTEGRITYADVOCATE_API_PATH', '/api')
INTEGRITYADVOCATE_API_TIMEZONE = os.environ.get('INTEGRITYADVOCATE_API_TIMEZONE', 'America/Edmonton')
INTEGRITYADVOCATE_STALE_COURSE_DAYS = int(os.environ.get('INTEGRITYADVOCATE_STALE_COURSE_DAYS', '7'))
INTEGRITYADVOCATE_REQUEST_TIMEOUT = float(os.environ.get('INTEGRITYADVOCATE_REQUEST_TIMEOUT', '30'))
INTEGRITYADVOCATE_MAX_PAGES = int(os.environ.get('INTEGRITYADVOCATE_MAX_PAGES', '250'))
INTEGRITYADVOCATE_CACHE_TTL = int(os.environ.get('INTEGRITYADVOCATE_CACHE_TTL', '60'))
INTEGRITYADVOCATE_MAIL_FROM = os.environ.get('INTEGRITYADVOCATE_MAIL_FROM', DEFAULT_FROM_EMAIL)
INTEGRITYADVOCATE_FEATURES = {
    'CACHE': _env_bool('INTEGRITYADVOCATE_FEATURE_CACHE', True),
    'SESSION_STATUS_OVERRIDE': _env_bool('INTEGRITYADVOCATE_FEATURE_SESSION_STATUS_OVERRIDE', True),
    'STATUS_EMAILS': _env_bool('INTEGRITYADVOCATE_FEATURE_STATUS_EMAILS', True),
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s %(levelname)s %(name)s %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'integrity_advocate': {
            'handlers': ['console'],
            'level': os.environ.get('INTEGRITYADVOCATE_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
        'lms_core': {
            'handlers': ['console'],
            'level': os.environ.get('INTEGRITYADVOCATE_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}
