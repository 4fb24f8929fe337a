# apps/media/services/draft_manager.py

"""
Drafts and favorites: the per-user records that hang off an asset.
"""
import logging
from typing import List, Optional
from uuid import UUID

from django.db import transaction

from ..exceptions import ResourceNotFoundError
from ..models import Asset, Draft, Favorite
from .ownership import owned_or_not_found

logger = logging.getLogger(__name__)


class DraftManager:
    """
    Service class for social-share drafts.
    """

    @staticmethod
    def list_drafts(user) -> List[Draft]:
        """List a user's drafts, most recently updated first."""
        return list(
            Draft.objects.filter(user=user)
            .select_related('asset')
            .order_by('-updated_at')
        )

    @staticmethod
    @transaction.atomic
    def upsert_draft(
        user,
        asset_id: UUID,
        output_format: str,
        caption: str = "",
        thumbnail_public_id: str = "",
        draft_id: Optional[UUID] = None,
    ) -> tuple:
        """
        Create a draft, or update one in place when ``draft_id`` is given.

        Both the draft (on update) and the referenced asset must belong to
        the caller.

        Args:
            user: The authenticated caller
            asset_id: Asset the draft is for
            output_format: Label from SOCIAL_FORMATS
            caption: Free text
            thumbnail_public_id: Optional custom thumbnail reference
            draft_id: Existing draft to update

        Returns:
            Tuple of (draft, created)

        Raises:
            ResourceNotFoundError: If the draft or asset is absent or foreign
        """
        asset = owned_or_not_found(Asset.objects.all(), asset_id, user, "Asset")

        if draft_id is not None:
            draft = owned_or_not_found(
                Draft.objects.select_for_update(), draft_id, user, "Draft"
            )
            draft.asset = asset
            draft.caption = caption
            draft.output_format = output_format
            draft.thumbnail_public_id = thumbnail_public_id
            draft.save()

            logger.info(f"Updated draft {draft.id} for user {user.pk}")
            return draft, False

        draft = Draft.objects.create(
            user=user,
            asset=asset,
            caption=caption,
            output_format=output_format,
            thumbnail_public_id=thumbnail_public_id,
        )

        logger.info(f"Created draft {draft.id} for asset {asset.id} (user {user.pk})")
        return draft, True

    @staticmethod
    @transaction.atomic
    def delete_draft(draft_id: UUID, user) -> bool:
        """
        Raises:
            ResourceNotFoundError: If absent or owned by someone else
        """
        draft = owned_or_not_found(Draft.objects.all(), draft_id, user, "Draft")
        draft.delete()

        logger.info(f"Deleted draft {draft_id} for user {user.pk}")
        return True


class FavoriteManager:
    """
    Service class for favorites.

    Favorites reference assets by foreign key, so deleting an asset
    removes them as well.
    """

    @staticmethod
    def list_favorites(user) -> List[Favorite]:
        return list(
            Favorite.objects.filter(user=user)
            .select_related('asset')
            .order_by('-created_at')
        )

    @staticmethod
    @transaction.atomic
    def add_favorite(user, asset_id: UUID) -> tuple:
        """
        Favorite one of the caller's assets. Adding twice is a no-op.

        Returns:
            Tuple of (favorite, created)

        Raises:
            ResourceNotFoundError: If the asset is absent or foreign
        """
        asset = owned_or_not_found(Asset.objects.all(), asset_id, user, "Asset")
        favorite, created = Favorite.objects.get_or_create(user=user, asset=asset)

        if created:
            logger.info(f"User {user.pk} favorited asset {asset.id}")

        return favorite, created

    @staticmethod
    @transaction.atomic
    def remove_favorite(user, asset_id: UUID) -> bool:
        """
        Raises:
            ResourceNotFoundError: If the caller has no favorite on the asset
        """
        asset = owned_or_not_found(Asset.objects.all(), asset_id, user, "Asset")
        favorite = Favorite.objects.filter(user=user, asset=asset).first()
        if favorite is None:
            raise ResourceNotFoundError("Favorite", asset_id)
        favorite.delete()

        logger.info(f"User {user.pk} unfavorited asset {asset_id}")
        return True

