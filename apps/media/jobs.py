# apps/media/jobs.py

"""
RQ job functions executed by the maintenance worker.
"""

import logging

from .models import Asset
from .services.cloudinary_storage import CloudinaryStorageService

logger = logging.getLogger(__name__)


def delete_remote_object(public_id: str, resource_type: str) -> bool:
    """
    Delete an orphaned upload at the provider.

    The reference check is repeated here because an asset may have been
    saved for the object between enqueueing and running. StorageError is
    left to propagate so RQ applies its retry policy.

    Returns:
        True if deleted, False if skipped or the provider reported no-op
    """
    if Asset.objects.filter(public_id=public_id).exists():
        logger.info(f"Skipping remote delete of {public_id}: an asset references it")
        return False

    return CloudinaryStorageService.delete_file(public_id, resource_type)
