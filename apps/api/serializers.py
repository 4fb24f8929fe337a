# apps/api/serializers.py

"""
Serializers for the API layer.

This module provides serializers for converting between the media models
and JSON representations for API requests and responses.
"""

import logging
from typing import Any, Dict

from django.conf import settings
from rest_framework import serializers

from apps.core.utils import format_duration, format_file_size
from apps.media.enums import AssetKind, SOCIAL_FORMAT_CHOICES
from apps.media.models import TITLE_MAX_LENGTH
from apps.media.services.cloudinary_storage import CloudinaryStorageService
from apps.media.transformations import ExportMode, build_card_image_url, build_thumbnail_url

logger = logging.getLogger(__name__)


ASPECT_RATIO_PATTERN = r'^\d+(\.\d+)?:\d+(\.\d+)?$'


class AssetSerializer(serializers.Serializer):
    """
    Serializer for Asset model.

    Used for representing assets in list and detail responses.
    """
    id = serializers.UUIDField(read_only=True)
    kind = serializers.CharField(read_only=True)
    public_id = serializers.CharField(read_only=True)
    title = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True)
    original_size = serializers.IntegerField(read_only=True)
    compressed_size = serializers.IntegerField(read_only=True)
    duration = serializers.FloatField(read_only=True)
    format = serializers.CharField(read_only=True)
    width = serializers.IntegerField(read_only=True, allow_null=True)
    height = serializers.IntegerField(read_only=True, allow_null=True)
    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)

    # Computed fields
    compression_saved = serializers.IntegerField(read_only=True)
    original_size_formatted = serializers.SerializerMethodField()
    duration_formatted = serializers.SerializerMethodField()
    url = serializers.SerializerMethodField()
    thumbnail_url = serializers.SerializerMethodField()

    def get_original_size_formatted(self, obj) -> str:
        return format_file_size(obj.original_size)

    def get_duration_formatted(self, obj) -> str:
        return format_duration(obj.duration)

    def get_url(self, obj) -> str:
        """Untransformed delivery URL for the stored file."""
        return CloudinaryStorageService.get_delivery_url(obj.public_id, obj.kind)

    def get_thumbnail_url(self, obj) -> str:
        if obj.kind == AssetKind.VIDEO:
            return build_thumbnail_url(settings.CLOUDINARY_CLOUD_NAME, obj.public_id)
        return build_card_image_url(settings.CLOUDINARY_CLOUD_NAME, obj.public_id)


class AssetCreateSerializer(serializers.Serializer):
    """
    Serializer for recording an asset after a direct upload.

    The owner always comes from the request, never from the payload.
    """
    title = serializers.CharField(
        max_length=TITLE_MAX_LENGTH,
        help_text="Display title, trimmed, at most 200 characters"
    )
    public_id = serializers.CharField(
        max_length=255,
        help_text="Provider reference returned by the upload"
    )
    kind = serializers.ChoiceField(choices=AssetKind.choices, default=AssetKind.VIDEO)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    original_size = serializers.IntegerField(min_value=0, default=0)
    compressed_size = serializers.IntegerField(min_value=0, default=0)
    duration = serializers.FloatField(min_value=0, default=0)
    format = serializers.CharField(required=False, allow_blank=True, max_length=20, default="")
    width = serializers.IntegerField(required=False, min_value=0, allow_null=True, default=None)
    height = serializers.IntegerField(required=False, min_value=0, allow_null=True, default=None)

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        if attrs.get('kind') == AssetKind.IMAGE:
            attrs['duration'] = 0
        return attrs

    def create(self, validated_data: Dict[str, Any]) -> Any:
        from apps.media.services.asset_manager import AssetManager

        request = self.context['request']
        return AssetManager.create_asset(user=request.user, **validated_data)


class SaveCopySerializer(serializers.Serializer):
    """
    Serializer for saving an export of an asset.
    """
    title = serializers.CharField(
        required=False,
        allow_blank=True,
        max_length=TITLE_MAX_LENGTH,
    )
    mode = serializers.ChoiceField(
        choices=[(mode.value, mode.value) for mode in ExportMode],
        default=ExportMode.ORIGINAL.value,
    )
    aspect_ratio = serializers.RegexField(
        ASPECT_RATIO_PATTERN,
        required=False,
        allow_null=True,
        default=None,
    )
    quality = serializers.IntegerField(min_value=1, max_value=100, default=100)
    is_compressed = serializers.BooleanField(default=False)
    overwrite = serializers.BooleanField(default=False)

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        if attrs.get('mode') == ExportMode.SOCIAL.value and not attrs.get('aspect_ratio'):
            raise serializers.ValidationError({
                'aspect_ratio': "This field is required for social exports."
            })
        return attrs


class DraftSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    asset_id = serializers.UUIDField(read_only=True)
    caption = serializers.CharField(read_only=True)
    output_format = serializers.CharField(read_only=True)
    thumbnail_public_id = serializers.CharField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)

    asset = AssetSerializer(read_only=True)


class DraftUpsertSerializer(serializers.Serializer):
    """
    Serializer for creating or updating a draft.

    With ``id`` the existing draft is updated in place; without it a new
    draft is created.
    """
    id = serializers.UUIDField(required=False, allow_null=True, default=None)
    asset_id = serializers.UUIDField()
    caption = serializers.CharField(required=False, allow_blank=True, default="")
    output_format = serializers.ChoiceField(choices=SOCIAL_FORMAT_CHOICES)
    thumbnail_public_id = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        max_length=255,
        default="",
    )

    def validate_thumbnail_public_id(self, value):
        return value or ""


class FavoriteSerializer(serializers.Serializer):
    asset_id = serializers.UUIDField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)
    asset = AssetSerializer(read_only=True)


class FavoriteCreateSerializer(serializers.Serializer):
    asset_id = serializers.UUIDField()


class UploadCredentialsQuerySerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=AssetKind.choices, default=AssetKind.VIDEO)


class UploadDiscardSerializer(serializers.Serializer):
    """
    Serializer for discarding an upload whose metadata was never saved.
    """
    public_id = serializers.CharField(max_length=255)
    kind = serializers.ChoiceField(choices=AssetKind.choices, default=AssetKind.VIDEO)


class AnalysisRequestSerializer(serializers.Serializer):
    """Input for the tags, ocr and transcribe endpoints."""
    public_id = serializers.CharField(max_length=255)


class VisionRequestSerializer(AnalysisRequestSerializer):
    question = serializers.CharField(max_length=1000)


class ModerationRequestSerializer(AnalysisRequestSerializer):
    kind = serializers.ChoiceField(choices=AssetKind.choices, default=AssetKind.IMAGE)

