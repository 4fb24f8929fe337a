# apps/media/services/asset_manager.py

"""
Asset Manager Service for handling the asset lifecycle.

This module provides centralized asset management including:
- Recording assets after a direct upload completes
- Listing and retrieving a caller's assets
- Deleting assets (best-effort remote delete, unconditional local delete)
- Saving export copies or overwriting sizes after an edit
- Discarding orphaned uploads whose metadata was never saved
"""
import logging
from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID

from django.db import transaction

from ..enums import AssetKind
from ..exceptions import (
    InvalidExportError,
    ResourceNotFoundError,
    StorageError,
    UploadStillReferencedError,
)
from ..models import Asset
from ..transformations import ExportMode, TEASER_DURATION, build_social_transformation
from .cloudinary_storage import CloudinaryStorageService
from .ownership import owned_or_not_found
from .queue_manager import QueueManager

logger = logging.getLogger(__name__)


@dataclass
class SaveCopyResult:
    asset: Asset
    created: bool
    compression_saved: int


class AssetManager:
    """
    Service class for managing the asset lifecycle.

    All methods are static as this is a stateless service.
    """

    owned_or_not_found = staticmethod(owned_or_not_found)

    # ASSET CREATION

    @staticmethod
    @transaction.atomic
    def create_asset(
        user,
        public_id: str,
        title: str,
        kind: str = AssetKind.VIDEO,
        description: str = "",
        original_size: int = 0,
        compressed_size: int = 0,
        duration: float = 0,
        format: str = "",
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> Asset:
        """
        Record an asset for a file already stored at the provider.

        Args:
            user: The authenticated caller (owner of the new row)
            public_id: Provider reference returned by the upload
            title: Display title, already trimmed and validated
            kind: 'video' or 'image'
            description: Optional free text
            original_size: Size of the local file in bytes
            compressed_size: Size reported by the provider in bytes
            duration: Seconds; forced to 0 for images
            format, width, height: Optional provider metadata

        Returns:
            The created Asset instance
        """
        if kind == AssetKind.IMAGE:
            duration = 0

        asset = Asset.objects.create(
            user=user,
            kind=kind,
            public_id=public_id,
            title=title,
            description=description,
            original_size=original_size,
            compressed_size=compressed_size,
            duration=duration,
            format=format or "",
            width=width,
            height=height,
        )

        logger.info(
            f"Created {kind} asset {asset.id} for user {user.pk} "
            f"(public_id={public_id}, {original_size} bytes)"
        )

        return asset

    # ASSET RETRIEVAL

    @staticmethod
    def get_asset(asset_id: UUID, user) -> Asset:
        """
        Retrieve an asset owned by ``user``.

        Raises:
            ResourceNotFoundError: If absent or owned by someone else
        """
        return owned_or_not_found(Asset.objects.all(), asset_id, user, "Asset")

    @staticmethod
    def list_user_assets(user, kind: Optional[str] = None) -> List[Asset]:
        """
        List all assets for a user, newest first.
        """
        queryset = Asset.objects.filter(user=user)

        if kind:
            queryset = queryset.filter(kind=kind)

        return list(queryset.order_by('-created_at'))

    # ASSET DELETION

    @staticmethod
    def delete_asset(asset_id: UUID, user) -> bool:
        """
        Delete an asset and, best-effort, its stored file.

        The remote delete is skipped while another row still points at the
        same stored file (export copies share it). Remote failures are
        logged and never stop the local delete.

        Args:
            asset_id: UUID of the asset
            user: The authenticated caller

        Returns:
            True once the local row is gone

        Raises:
            ResourceNotFoundError: If absent or owned by someone else
        """
        asset = AssetManager.get_asset(asset_id, user)

        shared = Asset.objects.filter(public_id=asset.public_id).exclude(pk=asset.pk).exists()

        if shared:
            logger.info(
                f"Keeping remote file {asset.public_id}: still referenced by other assets"
            )
        else:
            AssetManager._delete_remote_best_effort(asset.public_id, asset.kind)

        with transaction.atomic():
            asset.delete()

        logger.info(f"Deleted asset {asset_id} for user {user.pk}")

        return True

    @staticmethod
    def _delete_remote_best_effort(public_id: str, kind: str) -> None:
        resource_type = CloudinaryStorageService._get_resource_type(kind)
        try:
            CloudinaryStorageService.delete_file(public_id, resource_type)
        except Exception as e:
            logger.warning(f"Remote delete failed for {public_id}, continuing with local delete: {e}")

    # EXPORT COPIES

    @staticmethod
    def save_copy(
        asset_id: UUID,
        user,
        mode: str = ExportMode.ORIGINAL,
        title: Optional[str] = None,
        aspect_ratio: Optional[str] = None,
        quality: int = 100,
        is_compressed: bool = False,
        overwrite: bool = False,
    ) -> SaveCopyResult:
        """
        Save the result of an export as a new asset or over the source.

        The provider renders an eager derivative so the stored sizes match
        what a download would produce. The new row reuses the source's
        public id; the export itself lives in the delivery URL.

        Args:
            asset_id: Source asset
            user: The authenticated caller
            mode: original, social or teaser
            title: Title for the copy (defaults to the source title)
            aspect_ratio: Ratio for social mode, e.g. '9:16'
            quality: 1-100
            is_compressed: Apply automatic quality when quality is 100
            overwrite: Update the source row instead of creating a copy

        Returns:
            SaveCopyResult

        Raises:
            ResourceNotFoundError: If absent or owned by someone else
            InvalidExportError: If the preset does not apply to the asset
        """
        source = AssetManager.get_asset(asset_id, user)
        mode = ExportMode(mode)

        if mode is ExportMode.TEASER and not source.is_video:
            raise InvalidExportError(mode.value, source.kind, "Teasers can only be made from videos.")
        if mode is ExportMode.SOCIAL and not aspect_ratio:
            raise InvalidExportError(mode.value, source.kind, "Social exports need an aspect ratio.")

        raw_transformation = build_social_transformation(
            mode,
            aspect_ratio=aspect_ratio,
            quality=quality,
            is_compressed=is_compressed,
        )

        new_size = source.compressed_size or source.original_size
        new_duration = source.duration

        try:
            derivative = CloudinaryStorageService.create_derivative(
                source.public_id,
                raw_transformation,
                resource_type=CloudinaryStorageService._get_resource_type(source.kind),
            )
            new_size = derivative.bytes or new_size
            if derivative.duration is not None:
                new_duration = derivative.duration
        except StorageError as e:
            logger.warning(f"Could not render derivative for asset {source.id}, keeping source sizes: {e}")

        if mode is ExportMode.TEASER:
            new_duration = min(TEASER_DURATION, source.duration)
        if not source.is_video:
            new_duration = 0

        compression_saved = max(source.original_size - new_size, 0)

        if overwrite:
            with transaction.atomic():
                source.compressed_size = new_size
                source.duration = new_duration
                source.save(update_fields=['compressed_size', 'duration', 'updated_at'])

            logger.info(f"Overwrote asset {source.id} with {mode.value} export ({new_size} bytes)")
            return SaveCopyResult(asset=source, created=False, compression_saved=compression_saved)

        copy_title = (title or source.title).strip() or source.title
        copy = AssetManager.create_asset(
            user=user,
            public_id=source.public_id,
            title=copy_title,
            kind=source.kind,
            description=f'{mode.value.capitalize()} version of "{copy_title}"',
            original_size=source.original_size,
            compressed_size=new_size,
            duration=new_duration,
            format=source.format,
            width=source.width,
            height=source.height,
        )

        return SaveCopyResult(asset=copy, created=True, compression_saved=compression_saved)

    # ORPHANED UPLOADS

    @staticmethod
    def discard_upload(public_id: str, user, kind: str = AssetKind.VIDEO) -> str:
        """
        Queue removal of an upload whose metadata never got saved.

        Only objects inside the signed upload folders that carry the
        caller's uploader tag can be discarded, and only while no asset
        references them.

        Args:
            public_id: Provider reference returned by the upload
            user: Caller; must be the one the upload was signed for
            kind: 'video' or 'image'

        Returns:
            RQ job ID of the queued delete

        Raises:
            ResourceNotFoundError: If the id is outside the upload folders
                or was uploaded by someone else
            UploadStillReferencedError: If an asset references the id
        """
        if not CloudinaryStorageService.is_in_upload_folder(public_id, kind):
            raise ResourceNotFoundError("Upload", public_id)

        if not CloudinaryStorageService.is_uploaded_by(public_id, kind, user.pk):
            raise ResourceNotFoundError("Upload", public_id)

        if Asset.objects.filter(public_id=public_id).exists():
            raise UploadStillReferencedError(public_id)

        resource_type = CloudinaryStorageService._get_resource_type(kind)
        job_id = QueueManager.enqueue_remote_delete(public_id, resource_type)

        logger.info(f"Queued discard of orphaned upload {public_id} (job={job_id})")

        return job_id

