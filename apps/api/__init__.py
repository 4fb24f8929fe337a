# apps/api/__init__.py

"""
API layer for the media library.

This package provides REST API endpoints for:
- Recording, listing and deleting assets
- Saving export copies of assets
- Social-share drafts and favorites
- Signing direct uploads to Cloudinary
- Analysis add-ons (vision, tags, OCR, moderation, transcription)
"""
