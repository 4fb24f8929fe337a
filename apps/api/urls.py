"""
URL configuration for the API layer.

This module defines all API endpoints using Django REST Framework's
DefaultRouter for ViewSets and standard path() for APIViews.

API Versioning: All endpoints are mounted under /api/v1/

Endpoints:
    Assets:
        - GET    /api/v1/assets/                  - List caller's assets
        - POST   /api/v1/assets/                  - Record an uploaded asset
        - DELETE /api/v1/assets/?id=              - Delete by query parameter
        - GET    /api/v1/assets/{id}/             - Get asset details
        - DELETE /api/v1/assets/{id}/             - Delete asset
        - POST   /api/v1/assets/{id}/save-copy/   - Save an export

    Drafts:
        - GET    /api/v1/drafts/                  - List drafts
        - POST   /api/v1/drafts/                  - Upsert by optional id
        - DELETE /api/v1/drafts/{id}/, /api/v1/drafts/?id=

    Favorites:
        - GET    /api/v1/favorites/
        - POST   /api/v1/favorites/
        - DELETE /api/v1/favorites/{asset_id}/

    Uploads:
        - GET    /api/v1/upload-credentials/?kind=
        - POST   /api/v1/uploads/discard/

    Analysis:
        - POST   /api/v1/ai/{vision,tags,ocr,moderate,transcribe}/

    Misc:
        - GET    /api/v1/social-formats/
        - GET    /api/v1/health/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import (
    AssetViewSet,
    DraftViewSet,
    FavoriteViewSet,
    HealthCheckView,
    ModerationView,
    OcrView,
    SocialFormatsView,
    TagsView,
    TranscriptionView,
    UploadCredentialsView,
    UploadDiscardView,
    VisionView,
)


class MediaRouter(DefaultRouter):
    """
    DefaultRouter that also maps DELETE on a collection to
    ``destroy_by_query`` for viewsets that define it.
    """
    routes = [
        DefaultRouter.routes[0]._replace(mapping={
            'get': 'list',
            'post': 'create',
            'delete': 'destroy_by_query',
        }),
        *DefaultRouter.routes[1:],
    ]


router = MediaRouter()

router.register(r'assets', AssetViewSet, basename='asset')
router.register(r'drafts', DraftViewSet, basename='draft')
router.register(r'favorites', FavoriteViewSet, basename='favorite')


urlpatterns = [
    path('', include(router.urls)),

    path('upload-credentials/', UploadCredentialsView.as_view(), name='upload-credentials'),
    path('uploads/discard/', UploadDiscardView.as_view(), name='upload-discard'),

    path('ai/vision/', VisionView.as_view(), name='ai-vision'),
    path('ai/tags/', TagsView.as_view(), name='ai-tags'),
    path('ai/ocr/', OcrView.as_view(), name='ai-ocr'),
    path('ai/moderate/', ModerationView.as_view(), name='ai-moderate'),
    path('ai/transcribe/', TranscriptionView.as_view(), name='ai-transcribe'),

    path('social-formats/', SocialFormatsView.as_view(), name='social-formats'),
    path('health/', HealthCheckView.as_view(), name='health-check'),
]

# Allows using 'api:asset-list', 'api:health-check', etc.
app_name = 'api'
