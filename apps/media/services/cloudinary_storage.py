# apps/media/services/cloudinary_storage.py

"""
Cloudinary Storage Service for provider-side media operations.

Files never pass through this server: the studio uploads straight to
Cloudinary with short-lived signed parameters. This module provides:
- Signing direct-upload parameters
- Deleting stored files
- Fetching resource details (including analysis add-on payloads)
- Requesting eager derivatives for exports
- Delivery URL helpers and connection checks
"""

import logging
import time
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Tuple

import cloudinary
import cloudinary.api
import cloudinary.exceptions
import cloudinary.uploader
from cloudinary.utils import api_sign_request
from django.conf import settings

from ..enums import AssetKind
from ..exceptions import ProviderNotConfiguredError, StorageError
from ..transformations import TransformationRequest, build_delivery_url

logger = logging.getLogger(__name__)


def configure_cloudinary() -> None:
    """Push credentials from Django settings into the SDK's global config."""
    if not settings.USE_CLOUDINARY:
        return

    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )


# Substring of the SDK error (lowercased) -> message safe to show in the studio.
# First match wins, so the specific patterns come before the generic ones.
PROVIDER_ERROR_MESSAGES = (
    ('add-on', 'The required media add-on is not enabled for this account.'),
    ('addon', 'The required media add-on is not enabled for this account.'),
    ('timeout', 'The media service timed out. Please try again.'),
    ('timed out', 'The media service timed out. Please try again.'),
    ('max retries exceeded', 'The media service could not be reached. Please try again later.'),
    ('ssl', 'The media service could not be reached. Please try again later.'),
    ('connection', 'The media service could not be reached. Please try again later.'),
    ('invalid api', 'Media storage is misconfigured on the server.'),
    ('unauthorized', 'Media storage is misconfigured on the server.'),
    ('invalid signature', 'The upload signature was rejected. Request new upload credentials.'),
    ('forbidden', 'The media service refused this request.'),
    ('not found', 'The media file no longer exists at the provider.'),
    ('does not exist', 'The media file no longer exists at the provider.'),
    ('rate limit', 'The media service is rate limiting requests. Please wait a moment.'),
    ('too many', 'The media service is rate limiting requests. Please wait a moment.'),
)


# Signed into every upload so a discard can be matched to its uploader
UPLOADER_TAG_PREFIX = 'uploader-'


def uploader_tag(user_id: Any) -> str:
    return f"{UPLOADER_TAG_PREFIX}{user_id}"


def _get_user_friendly_error_message(error: Exception) -> str:
    """Map a Cloudinary SDK error onto a message fit for the studio UI."""
    error_str = str(error).lower()
    return next(
        (message for pattern, message in PROVIDER_ERROR_MESSAGES if pattern in error_str),
        'An error occurred while talking to the media service. Please try again.',
    )


@dataclass
class UploadSignature:
    """Signed, single-destination parameters for one direct upload."""
    signature: str
    timestamp: int
    expires_at: int
    cloud_name: str
    api_key: str
    folder: str
    resource_type: str
    upload_url: str
    upload_preset: Optional[str] = None
    tags: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for optional in ('upload_preset', 'tags'):
            if not data[optional]:
                data.pop(optional)
        return data


@dataclass
class DerivativeResult:
    """Outcome of an eager transformation request."""
    public_id: str
    bytes: int
    duration: Optional[float] = None
    secure_url: str = ""


class CloudinaryStorageService:
    """
    Service class for Cloudinary operations.

    All methods are static as this is a stateless service.
    """

    RESOURCE_TYPE_MAP = {
        AssetKind.VIDEO: 'video',
        AssetKind.IMAGE: 'image',
    }

    @staticmethod
    def _get_resource_type(kind: str) -> str:
        return CloudinaryStorageService.RESOURCE_TYPE_MAP.get(kind, 'image')

    @staticmethod
    def missing_credentials() -> List[str]:
        """Names of the credential settings that are empty."""
        required = ('CLOUDINARY_CLOUD_NAME', 'CLOUDINARY_API_KEY', 'CLOUDINARY_API_SECRET')
        return [name for name in required if not getattr(settings, name, '')]

    @staticmethod
    def is_configured() -> bool:
        return settings.USE_CLOUDINARY and not CloudinaryStorageService.missing_credentials()

    @staticmethod
    def _ensure_configured() -> None:
        missing = CloudinaryStorageService.missing_credentials()
        if not settings.USE_CLOUDINARY or missing:
            raise ProviderNotConfiguredError(missing or ['USE_CLOUDINARY'])

    # UPLOAD SIGNING

    @staticmethod
    def sign_upload(kind: str = AssetKind.VIDEO, uploader_id: Any = None) -> UploadSignature:
        """
        Sign parameters for a direct browser/studio upload.

        The signature covers the timestamp and destination folder (and the
        upload preset and uploader tag when given), so the credentials can
        only place files in that folder and the provider rejects them once
        the timestamp is older than an hour.

        Args:
            kind: 'video' or 'image'; selects folder and resource type
            uploader_id: Caller's user id, tagged onto the stored file

        Returns:
            UploadSignature

        Raises:
            ProviderNotConfiguredError: If any credential is missing
        """
        CloudinaryStorageService._ensure_configured()

        resource_type = CloudinaryStorageService._get_resource_type(kind)
        folder = settings.MEDIA_UPLOAD_FOLDERS.get(resource_type, 'uploads')
        timestamp = int(time.time())

        params_to_sign = {
            'timestamp': timestamp,
            'folder': folder,
        }
        upload_preset = settings.CLOUDINARY_UPLOAD_PRESET or None
        if upload_preset:
            params_to_sign['upload_preset'] = upload_preset
        tags = None
        if uploader_id is not None:
            tags = uploader_tag(uploader_id)
            params_to_sign['tags'] = tags

        signature = api_sign_request(params_to_sign, settings.CLOUDINARY_API_SECRET)

        logger.debug(f"Signed {resource_type} upload into '{folder}' (timestamp={timestamp})")

        return UploadSignature(
            signature=signature,
            timestamp=timestamp,
            expires_at=timestamp + settings.UPLOAD_SIGNATURE_TTL,
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            folder=folder,
            resource_type=resource_type,
            upload_url=f"{settings.CLOUDINARY_UPLOAD_URL}/{settings.CLOUDINARY_CLOUD_NAME}/{resource_type}/upload",
            upload_preset=upload_preset,
            tags=tags,
        )

    @staticmethod
    def is_in_upload_folder(public_id: str, kind: str) -> bool:
        """Check a public id sits in the folder uploads are signed for."""
        resource_type = CloudinaryStorageService._get_resource_type(kind)
        folder = settings.MEDIA_UPLOAD_FOLDERS.get(resource_type, 'uploads')
        return public_id.startswith(f"{folder}/")

    @staticmethod
    def is_uploaded_by(public_id: str, kind: str, uploader_id: Any) -> bool:
        """
        Check the stored file carries the uploader tag signed for ``uploader_id``.

        Raises:
            StorageError: If the provider cannot be asked
        """
        resource = CloudinaryStorageService.get_resource(
            public_id,
            resource_type=CloudinaryStorageService._get_resource_type(kind),
        )
        return uploader_tag(uploader_id) in (resource.get('tags') or [])

    # DELETION

    @staticmethod
    def delete_file(public_id: str, resource_type: str) -> bool:
        """
        Destroy a stored file and invalidate its CDN-cached derivatives.

        Returns True when Cloudinary answers ``ok`` and False for
        ``not found`` (already gone); SDK errors raise StorageError.
        """
        if not settings.USE_CLOUDINARY:
            raise StorageError(operation="delete", path=public_id, reason="Cloudinary is disabled.")

        try:
            outcome = cloudinary.uploader.destroy(public_id, resource_type=resource_type, invalidate=True)
        except cloudinary.exceptions.Error as e:
            logger.error(f"Cloudinary destroy of {resource_type} {public_id} failed: {e}")
            raise StorageError(
                operation="delete",
                path=public_id,
                reason=_get_user_friendly_error_message(e),
            )

        deleted = outcome.get('result') == 'ok'
        if deleted:
            logger.info(f"Destroyed {resource_type} {public_id} at Cloudinary")
        else:
            logger.warning(f"Cloudinary did not destroy {public_id}: {outcome.get('result')}")
        return deleted

    # RESOURCE DETAILS

    @staticmethod
    def get_resource(public_id: str, resource_type: str = 'image', **options) -> Dict[str, Any]:
        """
        Fetch resource details, optionally asking add-ons for extra payloads.

        Extra keyword options are passed straight to the Admin API, e.g.
        ``moderation=True``, ``ocr='adv_ocr'`` or ``colors=True``.

        Raises:
            StorageError: If the provider call fails or the resource is missing
        """
        try:
            return cloudinary.api.resource(
                public_id,
                resource_type=resource_type,
                **options,
            )
        except Exception as e:
            # Missing credentials surface as a bare Exception, not an SDK Error
            logger.warning(f"Error fetching Cloudinary resource {public_id}: {e}")
            raise StorageError(
                operation="resource",
                path=public_id,
                reason=_get_user_friendly_error_message(e)
            )

    # DERIVATIVES

    @staticmethod
    def create_derivative(
        public_id: str,
        raw_transformation: str,
        resource_type: str = 'video',
    ) -> DerivativeResult:
        """
        Ask the provider to render an eager derivative and report its size.

        Raises:
            StorageError: If the provider call fails
        """
        options = {
            'type': 'upload',
            'resource_type': resource_type,
        }
        if raw_transformation:
            options['eager'] = [{'raw_transformation': raw_transformation}]

        try:
            result = cloudinary.uploader.explicit(public_id, **options)
        except cloudinary.exceptions.Error as e:
            logger.error(f"Cloudinary explicit failed for {public_id}: {e}")
            raise StorageError(
                operation="explicit",
                path=public_id,
                reason=_get_user_friendly_error_message(e)
            )

        eager = (result.get('eager') or [{}])[0]

        return DerivativeResult(
            public_id=result.get('public_id', public_id),
            bytes=eager.get('bytes') or result.get('bytes', 0),
            duration=eager.get('duration') or result.get('duration'),
            secure_url=eager.get('secure_url') or result.get('secure_url', ''),
        )

    # URLS

    @staticmethod
    def get_delivery_url(
        public_id: str,
        kind: str = AssetKind.IMAGE,
        request: Optional[TransformationRequest] = None,
    ) -> str:
        """Delivery URL for an asset on the configured account."""
        return build_delivery_url(
            settings.CLOUDINARY_CLOUD_NAME,
            public_id,
            request=request,
            kind=CloudinaryStorageService._get_resource_type(kind),
        )

    # HEALTH

    @staticmethod
    def check_connection() -> Tuple[bool, str]:
        """Ping Cloudinary for the health endpoint; never raises."""
        if not settings.USE_CLOUDINARY:
            return True, "Cloudinary disabled"

        missing = CloudinaryStorageService.missing_credentials()
        if missing:
            return False, f"Cloudinary not configured: {', '.join(missing)}"

        try:
            status = cloudinary.api.ping().get('status')
        except Exception as e:
            return False, f"Cloudinary unreachable: {e}"

        if status != 'ok':
            return False, f"Cloudinary ping status: {status}"
        return True, "Cloudinary connection OK"
