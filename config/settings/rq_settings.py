# config/settings/rq_settings.py

"""
django-rq configuration.

Only provider-side cleanup runs in the background: discarding an upload
whose metadata never reached the database. Start a worker with::

    python manage.py rqworker maintenance_queue
"""

import os

REDIS_URL = os.environ.get('REDIS_URL')

if REDIS_URL:
    REDIS_CONNECTION = {'URL': REDIS_URL}
else:
    REDIS_CONNECTION = {
        'HOST': os.environ.get('REDIS_HOST', 'localhost'),
        'PORT': int(os.environ.get('REDIS_PORT', 6379)),
        'DB': int(os.environ.get('REDIS_DB', 0)),
    }
    if os.environ.get('REDIS_PASSWORD'):
        REDIS_CONNECTION['PASSWORD'] = os.environ['REDIS_PASSWORD']


# A remote delete is one API call; anything slower is stuck
MAINTENANCE_JOB_TIMEOUT = 120

RQ_QUEUES = {
    'maintenance_queue': {
        **REDIS_CONNECTION,
        'DEFAULT_TIMEOUT': MAINTENANCE_JOB_TIMEOUT,
    },
}

RQ_SHOW_ADMIN_LINK = True

# Provider outages are usually short; back off 30s, 2m, then 10m
RQ_RETRY_MAX_TIMES = 3
RQ_RETRY_DELAYS = [30, 120, 600]
