# apps/media/apps.py
from django.apps import AppConfig


class MediaConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.media"
    verbose_name = "Media Library"

    def ready(self):
        """
        Configure the Cloudinary SDK once Django settings are available.
        """
        from .services.cloudinary_storage import configure_cloudinary

        configure_cloudinary()
