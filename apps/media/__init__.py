# apps/media/__init__.py

"""
Media library domain for mediadeck.

This package provides:
- Asset, Draft and Favorite models
- Delivery-time transformation URL building
- Cloudinary integration (signing, deletion, analysis add-ons)
- Maintenance jobs for provider-side cleanup
"""
