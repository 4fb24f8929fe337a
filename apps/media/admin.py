#  apps/media/admin.py
from django.contrib import admin
from .models import Asset, Draft, Favorite


@admin.register(Asset)
class AssetAdmin(admin.ModelAdmin):
    """Admin interface for Asset model."""

    list_display = [
        'id',
        'title',
        'kind',
        'user',
        'original_size',
        'compressed_size',
        'duration',
        'created_at'
    ]

    list_filter = ['kind', 'format', 'created_at']
    search_fields = ['id', 'title', 'public_id', 'user__username']

    readonly_fields = [
        'id',
        'public_id',
        'created_at',
        'updated_at',
        'compression_saved'
    ]

    fieldsets = (
        ('Basic Information', {
            'fields': ('id', 'kind', 'title', 'description')
        }),
        ('Owner', {
            'fields': ('user',)
        }),
        ('Storage', {
            'fields': ('public_id', 'format', 'width', 'height', 'duration')
        }),
        ('Sizes', {
            'fields': ('original_size', 'compressed_size', 'compression_saved')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at')
        }),
    )

    date_hierarchy = 'created_at'


@admin.register(Draft)
class DraftAdmin(admin.ModelAdmin):
    """Admin interface for Draft model."""

    list_display = [
        'id',
        'asset',
        'output_format',
        'user',
        'updated_at'
    ]

    list_filter = ['output_format', 'updated_at']
    search_fields = ['id', 'caption', 'asset__title', 'user__username']
    readonly_fields = ['id', 'created_at', 'updated_at']
    raw_id_fields = ['asset']


@admin.register(Favorite)
class FavoriteAdmin(admin.ModelAdmin):
    list_display = ['asset', 'user', 'created_at']
    search_fields = ['asset__title', 'user__username']
    raw_id_fields = ['asset']
