"""
Test settings for mediadeck project.

Runs against an in-memory SQLite database with dummy provider credentials,
so the suite needs neither PostgreSQL, Redis nor a Cloudinary account.
"""

from .base import *

DEBUG = False

ALLOWED_HOSTS = ['testserver', 'localhost']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    }
}

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

USE_CLOUDINARY = True
CLOUDINARY_CLOUD_NAME = 'demo'
CLOUDINARY_API_KEY = '123456789012345'
CLOUDINARY_API_SECRET = 'test-secret'
CLOUDINARY_UPLOAD_PRESET = ''

GROQ_API_KEY = ''

# Generous limits so throttling never interferes with the suite
REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'] = {
    'burst': '10000/min',
    'uploads': '10000/min',
    'analysis': '10000/min',
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'null': {
            'class': 'logging.NullHandler',
        },
    },
    'root': {
        'handlers': ['null'],
        'level': 'WARNING',
    },
}
