# config/urls.py

"""
Root URL configuration for MediaDeck.

    /admin/       Django admin (assets, drafts, favorites)
    /api/v1/      REST API used by the studio client
    /django-rq/   maintenance queue dashboard, DEBUG only
    /__debug__/   debug toolbar, DEBUG only

No media is served here; Cloudinary's CDN delivers every file.
"""

from django.conf import settings
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('apps.api.urls', namespace='api')),
]

if settings.DEBUG:
    urlpatterns += [
        path('__debug__/', include('debug_toolbar.urls')),
        path('django-rq/', include('django_rq.urls')),
    ]
