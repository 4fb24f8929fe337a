"""
Production settings (Railway-style container behind a TLS proxy).

The database comes from ``DATABASE_URL``. Logs go to stdout only and
static admin assets are served by whitenoise. The process refuses to
start without Cloudinary credentials because every upload, delete and
export goes through the provider.
"""

import os

import dj_database_url
from django.core.exceptions import ImproperlyConfigured

from .base import *  # noqa: F401,F403

DEBUG = False

_missing = [
    name for name in ('CLOUDINARY_CLOUD_NAME', 'CLOUDINARY_API_KEY', 'CLOUDINARY_API_SECRET')
    if not globals()[name]
]
if USE_CLOUDINARY and _missing:
    raise ImproperlyConfigured(f"Missing Cloudinary settings: {', '.join(_missing)}")


# HOSTS

RAILWAY_PUBLIC_DOMAIN = os.environ.get('RAILWAY_PUBLIC_DOMAIN')

ALLOWED_HOSTS = env.list('ALLOWED_HOSTS', default=[]) + ['.railway.app', '.up.railway.app']
CSRF_TRUSTED_ORIGINS = env.list('CSRF_TRUSTED_ORIGINS', default=[]) + ['https://*.railway.app']

if RAILWAY_PUBLIC_DOMAIN:
    ALLOWED_HOSTS.append(RAILWAY_PUBLIC_DOMAIN)
    CSRF_TRUSTED_ORIGINS.append(f'https://{RAILWAY_PUBLIC_DOMAIN}')


# DATABASE

DATABASES = {
    'default': dj_database_url.config(
        env='DATABASE_URL',
        conn_max_age=600,
        conn_health_checks=True,
        ssl_require=env.bool('DATABASE_SSL_REQUIRE', default=True),
    ),
}


# SECURITY

SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
SECURE_SSL_REDIRECT = env.bool('SECURE_SSL_REDIRECT', default=True)
SECURE_HSTS_SECONDS = 60 * 60 * 24 * 365
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = 'DENY'

# The studio client carries these cookies over HTTPS only
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SESSION_COOKIE_SAMESITE = 'Lax'


# STATIC FILES

MIDDLEWARE.insert(1, 'whitenoise.middleware.WhiteNoiseMiddleware')

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'whitenoise.storage.CompressedManifestStaticFilesStorage'},
}


# LOGGING

# The container filesystem is ephemeral; drop the rotating file handler
LOGGING['handlers'].pop('file')
LOGGING['root']['handlers'] = ['console']
for _logger in LOGGING['loggers'].values():
    _logger['handlers'] = ['console']
