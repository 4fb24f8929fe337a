# apps/media/models.py

"""
Models for the media library.

Every row is owned by one user. Ownership is enforced by the services
layer (``AssetManager.owned_or_not_found``), not by database constraints.
"""

import uuid

from django.conf import settings
from django.core.validators import MaxLengthValidator, MinValueValidator
from django.db import models

from .enums import AssetKind, SOCIAL_FORMAT_CHOICES
from .exceptions import ImmutableFieldError

TITLE_MAX_LENGTH = 200


class Asset(models.Model):
    """
    A video or image uploaded to the provider.

    ``public_id`` is the provider reference and is write-once: edits are
    delivery-time URL transformations, so a row never needs to point at
    a different stored object.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='assets',
    )
    kind = models.CharField(
        max_length=10,
        choices=AssetKind.choices,
        default=AssetKind.VIDEO,
    )
    public_id = models.CharField(max_length=255)
    title = models.CharField(
        max_length=TITLE_MAX_LENGTH,
        validators=[MaxLengthValidator(TITLE_MAX_LENGTH)],
    )
    description = models.TextField(blank=True, default='')

    original_size = models.PositiveBigIntegerField(default=0)
    compressed_size = models.PositiveBigIntegerField(default=0)
    duration = models.FloatField(default=0, validators=[MinValueValidator(0)])

    format = models.CharField(max_length=20, blank=True, default='')
    width = models.PositiveIntegerField(null=True, blank=True)
    height = models.PositiveIntegerField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', '-created_at'], name='media_asset_user_created_idx'),
            models.Index(fields=['public_id'], name='media_asset_public_id_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(duration__gte=0),
                name='media_asset_duration_non_negative',
            ),
        ]

    def __str__(self):
        return f"{self.title} ({self.kind})"

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        if 'public_id' in field_names:
            instance._loaded_public_id = values[field_names.index('public_id')]
        return instance

    def save(self, *args, **kwargs):
        loaded = getattr(self, '_loaded_public_id', None)
        if not self._state.adding and loaded is not None and loaded != self.public_id:
            raise ImmutableFieldError('Asset', 'public_id')
        super().save(*args, **kwargs)
        self._loaded_public_id = self.public_id

    @property
    def is_video(self) -> bool:
        return self.kind == AssetKind.VIDEO

    @property
    def compression_saved(self) -> int:
        if not self.compressed_size:
            return 0
        return max(self.original_size - self.compressed_size, 0)


class Draft(models.Model):
    """
    A social-share draft for one of the caller's assets.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='drafts',
    )
    asset = models.ForeignKey(
        Asset,
        on_delete=models.CASCADE,
        related_name='drafts',
    )
    caption = models.TextField(blank=True, default='')
    output_format = models.CharField(max_length=50, choices=SOCIAL_FORMAT_CHOICES)
    thumbnail_public_id = models.CharField(max_length=255, blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-updated_at']

    def __str__(self):
        return f"Draft {self.id} ({self.output_format})"


class Favorite(models.Model):
    """
    A bookmark on an asset.

    Cascades with the asset, so a favorite can never outlive what it points at.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='favorites',
    )
    asset = models.ForeignKey(
        Asset,
        on_delete=models.CASCADE,
        related_name='favorites',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'asset'],
                name='media_favorite_unique_per_user',
            ),
        ]

    def __str__(self):
        return f"Favorite {self.asset_id} by {self.user_id}"
