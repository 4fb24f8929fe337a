"""
Local development settings: debug toolbar, browsable API, chatty logs.
"""

from .base import *  # noqa: F401,F403

DEBUG = True

ALLOWED_HOSTS = ['localhost', '127.0.0.1', '0.0.0.0']

DATABASES = {
    'default': env.db('DATABASE_URL', default='postgres://mediadeck_user@localhost:5432/mediadeck_dev'),
}

INSTALLED_APPS += ['debug_toolbar']

MIDDLEWARE += [
    'debug_toolbar.middleware.DebugToolbarMiddleware',
    # Lets a studio served from another local port call the API
    'apps.core.middleware.LocalCORSMiddleware',
]

INTERNAL_IPS = ['127.0.0.1']

REST_FRAMEWORK['DEFAULT_RENDERER_CLASSES'] = [
    'rest_framework.renderers.JSONRenderer',
    'rest_framework.renderers.BrowsableAPIRenderer',
]

LOGGING['root']['level'] = 'DEBUG'
for _name in APP_LOGGERS:
    LOGGING['loggers'][_name]['level'] = 'DEBUG'
