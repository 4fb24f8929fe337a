"""
Base settings for the MediaDeck backend.

Shared by development, production and test. Anything that differs per
environment is read through django-environ, from the process environment
or a ``.env`` file at the repository root.
"""

import os
from pathlib import Path

import environ

env = environ.Env(
    DEBUG=(bool, False),
    USE_CLOUDINARY=(bool, True),
    UPLOAD_SIGNATURE_TTL=(int, 3600),
    GROQ_TIMEOUT=(int, 30),
)

BASE_DIR = Path(__file__).resolve().parent.parent.parent

environ.Env.read_env(os.path.join(BASE_DIR, '.env'))

SECRET_KEY = env('SECRET_KEY', default='django-insecure-mediadeck-local-only-do-not-deploy')

DEBUG = env('DEBUG')


# MEDIA PROVIDER (Cloudinary)

USE_CLOUDINARY = env('USE_CLOUDINARY')
CLOUDINARY_CLOUD_NAME = env('CLOUDINARY_CLOUD_NAME', default='')
CLOUDINARY_API_KEY = env('CLOUDINARY_API_KEY', default='')
CLOUDINARY_API_SECRET = env('CLOUDINARY_API_SECRET', default='')
# Optional; signed into the upload params when set
CLOUDINARY_UPLOAD_PRESET = env('CLOUDINARY_UPLOAD_PRESET', default='')
CLOUDINARY_UPLOAD_URL = 'https://api.cloudinary.com/v1_1'

# Folder per asset kind. Discards are only honoured inside these folders.
MEDIA_UPLOAD_FOLDERS = {
    'video': env('VIDEO_UPLOAD_FOLDER', default='video-uploads'),
    'image': env('IMAGE_UPLOAD_FOLDER', default='image-uploads'),
}

# Seconds a signed upload stays valid at the provider
UPLOAD_SIGNATURE_TTL = env('UPLOAD_SIGNATURE_TTL')


# AI ANALYSIS

# Vision Q&A goes to Groq's OpenAI-compatible endpoint; an empty key
# switches the vision tool to canned answers.
GROQ_API_KEY = env('GROQ_API_KEY', default='')
GROQ_API_URL = env('GROQ_API_URL', default='https://api.groq.com/openai/v1/chat/completions')
GROQ_VISION_MODEL = env('GROQ_VISION_MODEL', default='llama-3.2-90b-vision-preview')
GROQ_TIMEOUT = env('GROQ_TIMEOUT')


# BACKGROUND JOBS

from .rq_settings import (  # noqa: E402,F401
    RQ_QUEUES,
    RQ_RETRY_DELAYS,
    RQ_RETRY_MAX_TIMES,
    RQ_SHOW_ADMIN_LINK,
)


# DJANGO

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    'rest_framework',
    'django_filters',
    'django_rq',

    'apps.core',
    'apps.media',
    'apps.api',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'apps.core.middleware.RequestLoggingMiddleware',
]

ROOT_URLCONF = 'config.urls'
WSGI_APPLICATION = 'config.wsgi.application'

# Only the admin renders templates
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

# Overridden per environment
DATABASES = {
    'default': env.db('DATABASE_URL', default='postgres://postgres@localhost:5432/mediadeck'),
}

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': f'django.contrib.auth.password_validation.{name}'}
    for name in (
        'UserAttributeSimilarityValidator',
        'MinimumLengthValidator',
        'CommonPasswordValidator',
        'NumericPasswordValidator',
    )
]

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# The studio client authenticates with the session cookie and echoes
# the CSRF token in X-CSRFToken.
SESSION_ENGINE = 'django.contrib.sessions.backends.db'
SESSION_COOKIE_AGE = 60 * 60 * 24
CSRF_HEADER_NAME = 'HTTP_X_CSRFTOKEN'


# REST FRAMEWORK

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework.authentication.SessionAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_THROTTLE_RATES': {
        'burst': '120/min',
        'uploads': '60/hour',
        'analysis': '30/min',
    },
    'EXCEPTION_HANDLER': 'apps.api.exceptions.custom_exception_handler',
}


# LOGGING

LOGS_DIR = BASE_DIR / 'logs'
LOGS_DIR.mkdir(exist_ok=True)

LOG_HANDLERS = ['console', 'file']
APP_LOGGERS = ('apps.core', 'apps.media', 'apps.api', 'apps.studio')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '[{levelname}] {asctime} {name} {message}',
            'style': '{',
            'datefmt': '%Y-%m-%d %H:%M:%S',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
        'file': {
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': LOGS_DIR / 'mediadeck.log',
            'maxBytes': 10 * 1024 * 1024,
            'backupCount': 5,
            'formatter': 'verbose',
        },
    },
    'root': {'handlers': list(LOG_HANDLERS), 'level': 'INFO'},
    'loggers': {
        name: {'handlers': list(LOG_HANDLERS), 'level': 'INFO', 'propagate': False}
        for name in ('django', 'rq.worker', *APP_LOGGERS)
    },
}
