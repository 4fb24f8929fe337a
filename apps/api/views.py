# apps/api/views.py

"""
REST views for MediaDeck, mounted under /api/v1/.

Every view answers with the success envelope from ``utils.success_response``
and lets ``exceptions.custom_exception_handler`` shape failures. Covered:
- Managing assets (create, list, retrieve, delete, save export copies)
- Social-share drafts and favorites
- Signing direct uploads and discarding orphaned ones
- Analysis add-ons (vision, tags, OCR, moderation, transcription)
- Health checks
"""

import logging
from typing import Any, Dict, Tuple

from django.db import connection
from django.utils import timezone
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.media.enums import SOCIAL_FORMATS
from apps.media.models import Asset
from apps.media.services.analysis import MediaAnalysisService
from apps.media.services.asset_manager import AssetManager
from apps.media.services.cloudinary_storage import CloudinaryStorageService
from apps.media.services.draft_manager import DraftManager, FavoriteManager
from apps.media.services.queue_manager import MAINTENANCE_QUEUE, QueueManager

from .exceptions import ValidationError
from .filters import AssetFilter
from .pagination import OptInLimitOffsetPagination
from .serializers import (
    AnalysisRequestSerializer,
    AssetCreateSerializer,
    AssetSerializer,
    DraftSerializer,
    DraftUpsertSerializer,
    FavoriteCreateSerializer,
    FavoriteSerializer,
    ModerationRequestSerializer,
    SaveCopySerializer,
    UploadCredentialsQuerySerializer,
    UploadDiscardSerializer,
    VisionRequestSerializer,
)
from .throttling import AnalysisRateThrottle, BurstRateThrottle, UploadRateThrottle
from .utils import require_uuid_param, success_response

logger = logging.getLogger(__name__)


class AssetViewSet(viewsets.ViewSet):
    """
    ViewSet for the caller's assets.

    Provides endpoints for:
    - GET /assets/ - List assets, newest first (?kind=, ?search=, ?limit=)
    - POST /assets/ - Record an asset after a direct upload
    - GET /assets/{id}/ - Get asset details
    - DELETE /assets/{id}/ - Delete an asset
    - DELETE /assets/?id= - Delete an asset by query parameter
    - POST /assets/{id}/save-copy/ - Save an export as a copy or over the source
    """

    pagination_class = OptInLimitOffsetPagination
    throttle_classes = [BurstRateThrottle]

    def list(self, request: Request) -> Response:
        """
        List all assets owned by the caller.

        Query Parameters:
            - kind: video or image
            - search: Case-insensitive title match
            - limit / offset: Optional paging

        Returns:
            Full list, or a page when ``limit`` is given
        """
        queryset = Asset.objects.filter(user=request.user).order_by('-created_at')

        filterset = AssetFilter(request.query_params, queryset=queryset, request=request)
        if not filterset.is_valid():
            raise ValidationError(
                detail="Invalid filter parameters.",
                errors=[
                    {"field": field, "message": str(messages[0])}
                    for field, messages in filterset.errors.items()
                ],
            )
        queryset = filterset.qs

        paginator = self.pagination_class()
        page = paginator.paginate_queryset(queryset, request, view=self)
        if page is not None:
            serializer = AssetSerializer(page, many=True, context={'request': request})
            return paginator.get_paginated_response(serializer.data)

        serializer = AssetSerializer(queryset, many=True, context={'request': request})
        return success_response(data=serializer.data)

    def create(self, request: Request) -> Response:
        """
        Record an asset for a file already uploaded to the provider.

        Request Body (JSON):
            - title: Display title (required, at most 200 characters)
            - public_id: Provider reference (required)
            - kind, description, original_size, compressed_size,
              duration, format, width, height: optional

        Returns:
            The created asset
        """
        serializer = AssetCreateSerializer(
            data=request.data,
            context={'request': request}
        )
        serializer.is_valid(raise_exception=True)

        asset = serializer.save()

        return success_response(
            data=AssetSerializer(asset, context={'request': request}).data,
            message="Asset saved",
            status_code=status.HTTP_201_CREATED,
        )

    def retrieve(self, request: Request, pk: str = None) -> Response:
        asset = AssetManager.get_asset(pk, request.user)
        return success_response(
            data=AssetSerializer(asset, context={'request': request}).data
        )

    def destroy(self, request: Request, pk: str = None) -> Response:
        """
        Delete an asset. The stored file is removed best-effort.
        """
        AssetManager.delete_asset(pk, request.user)

        return success_response(message="Asset deleted successfully")

    def destroy_by_query(self, request: Request) -> Response:
        """
        DELETE /assets/?id=<uuid>
        """
        asset_id = require_uuid_param(request.query_params.get('id'), 'id')
        return self.destroy(request, pk=asset_id)

    @action(detail=True, methods=['post'], url_path='save-copy')
    def save_copy(self, request: Request, pk: str = None) -> Response:
        """
        Save an export of an asset.

        Request Body (JSON):
            - mode: original, social or teaser
            - aspect_ratio: Required for social, e.g. '9:16'
            - quality: 1-100 (default 100)
            - is_compressed: Apply automatic quality
            - overwrite: Update the source instead of creating a copy
            - title: Title for the copy

        Returns:
            The saved asset plus ``compression_saved``
        """
        serializer = SaveCopySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AssetManager.save_copy(pk, request.user, **serializer.validated_data)

        data = AssetSerializer(result.asset, context={'request': request}).data
        data["compression_saved"] = result.compression_saved

        return success_response(
            data=data,
            message="Copy saved" if result.created else "Asset updated",
            status_code=status.HTTP_201_CREATED if result.created else status.HTTP_200_OK,
        )


class DraftViewSet(viewsets.ViewSet):
    """
    ViewSet for social-share drafts.

    - GET /drafts/ - List drafts, most recently updated first
    - POST /drafts/ - Create, or update in place when ``id`` is given
    - DELETE /drafts/{id}/ and DELETE /drafts/?id= - Delete a draft
    """

    pagination_class = OptInLimitOffsetPagination
    throttle_classes = [BurstRateThrottle]

    def list(self, request: Request) -> Response:
        drafts = DraftManager.list_drafts(request.user)

        paginator = self.pagination_class()
        page = paginator.paginate_queryset(drafts, request, view=self)
        if page is not None:
            serializer = DraftSerializer(page, many=True, context={'request': request})
            return paginator.get_paginated_response(serializer.data)

        serializer = DraftSerializer(drafts, many=True, context={'request': request})
        return success_response(data=serializer.data)

    def create(self, request: Request) -> Response:
        serializer = DraftUpsertSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        draft, created = DraftManager.upsert_draft(
            user=request.user,
            asset_id=data['asset_id'],
            output_format=data['output_format'],
            caption=data['caption'],
            thumbnail_public_id=data['thumbnail_public_id'],
            draft_id=data['id'],
        )

        return success_response(
            data=DraftSerializer(draft, context={'request': request}).data,
            message="Draft created" if created else "Draft updated",
            status_code=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    def destroy(self, request: Request, pk: str = None) -> Response:
        DraftManager.delete_draft(pk, request.user)
        return success_response(message="Draft deleted successfully")

    def destroy_by_query(self, request: Request) -> Response:
        draft_id = require_uuid_param(request.query_params.get('id'), 'id')
        return self.destroy(request, pk=draft_id)


class FavoriteViewSet(viewsets.ViewSet):
    """
    ViewSet for favorites, addressed by asset id.

    - GET /favorites/
    - POST /favorites/ with {asset_id}
    - DELETE /favorites/{asset_id}/
    """

    throttle_classes = [BurstRateThrottle]

    def list(self, request: Request) -> Response:
        favorites = FavoriteManager.list_favorites(request.user)
        serializer = FavoriteSerializer(favorites, many=True, context={'request': request})
        return success_response(data=serializer.data)

    def create(self, request: Request) -> Response:
        serializer = FavoriteCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        favorite, created = FavoriteManager.add_favorite(
            request.user, serializer.validated_data['asset_id']
        )

        return success_response(
            data=FavoriteSerializer(favorite, context={'request': request}).data,
            status_code=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    def destroy(self, request: Request, pk: str = None) -> Response:
        FavoriteManager.remove_favorite(request.user, pk)
        return success_response(message="Favorite removed")


class UploadCredentialsView(APIView):
    """
    GET /upload-credentials/?kind=video|image

    Returns short-lived signed parameters for one direct upload into the
    kind's upload folder. 500 when the provider is not configured.
    """

    throttle_classes = [UploadRateThrottle]

    def get(self, request: Request) -> Response:
        serializer = UploadCredentialsQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        signature = CloudinaryStorageService.sign_upload(
            serializer.validated_data['kind'],
            uploader_id=request.user.pk,
        )

        logger.info(
            f"Issued {signature.resource_type} upload credentials to user {request.user.pk}"
        )

        return success_response(data=signature.to_dict())


class UploadDiscardView(APIView):
    """
    POST /uploads/discard/ with {public_id, kind}

    Queues removal of an uploaded file whose asset was never recorded.
    """

    throttle_classes = [UploadRateThrottle]

    def post(self, request: Request) -> Response:
        serializer = UploadDiscardSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        job_id = AssetManager.discard_upload(user=request.user, **serializer.validated_data)

        return success_response(
            data={"job_id": job_id},
            message="Discard queued",
            status_code=status.HTTP_202_ACCEPTED,
        )


class AnalysisView(APIView):
    """
    Base view for the /ai/ endpoints.

    Subclasses set ``serializer_class`` and implement ``analyze``. Add-on
    failures come back as placeholder results, so only bad input or a
    missing caller fail the request.
    """

    throttle_classes = [AnalysisRateThrottle]
    serializer_class = AnalysisRequestSerializer

    def analyze(self, data: Dict[str, Any]):
        raise NotImplementedError

    def post(self, request: Request) -> Response:
        serializer = self.serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = self.analyze(serializer.validated_data)

        return success_response(data=result.to_dict())


class VisionView(AnalysisView):
    serializer_class = VisionRequestSerializer

    def analyze(self, data):
        return MediaAnalysisService.answer_question(data['public_id'], data['question'])


class TagsView(AnalysisView):
    def analyze(self, data):
        return MediaAnalysisService.suggest_tags(data['public_id'])


class OcrView(AnalysisView):
    def analyze(self, data):
        return MediaAnalysisService.extract_text(data['public_id'])


class ModerationView(AnalysisView):
    serializer_class = ModerationRequestSerializer

    def analyze(self, data):
        return MediaAnalysisService.moderate(data['public_id'], data['kind'])


class TranscriptionView(AnalysisView):
    def analyze(self, data):
        return MediaAnalysisService.transcribe(data['public_id'])


class SocialFormatsView(APIView):
    """
    GET /social-formats/ - Output presets a draft can target.
    """

    def get(self, request: Request) -> Response:
        return success_response(data=[fmt.to_dict() for fmt in SOCIAL_FORMATS])


class HealthCheckView(APIView):
    """
    GET /health/ - Liveness of the database, Redis and Cloudinary.

    Answers 200 when every probe passes and 503 ("degraded") otherwise.
    ``?detailed=true`` adds per-component messages and maintenance queue
    counts. Open to anonymous callers so load balancers can use it.
    """

    authentication_classes = []
    permission_classes = []
    throttle_classes = []

    def get(self, request: Request) -> Response:
        probes = {
            "database": self._probe_database,
            "redis": self._probe_redis,
            "storage": CloudinaryStorageService.check_connection,
        }

        components: Dict[str, Dict[str, Any]] = {}
        for name, probe in probes.items():
            ok, message = probe()
            if not ok:
                logger.error(f"Health probe '{name}' failed: {message}")
            components[name] = {"status": "healthy" if ok else "unhealthy", "message": message}

        healthy = all(component["status"] == "healthy" for component in components.values())
        body: Dict[str, Any] = {
            "status": "healthy" if healthy else "degraded",
            "timestamp": timezone.now().isoformat(),
        }
        if request.query_params.get('detailed', '').lower() == 'true':
            body["components"] = {**components, "queues": QueueManager.get_queue_stats()}

        return Response(body, status=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE)

    @staticmethod
    def _probe_database() -> Tuple[bool, str]:
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
        except Exception as e:
            return False, str(e)
        return True, "Database connection OK"

    @staticmethod
    def _probe_redis() -> Tuple[bool, str]:
        try:
            QueueManager.get_queue(MAINTENANCE_QUEUE).connection.ping()
        except Exception as e:
            return False, str(e)
        return True, "Redis connection OK"
