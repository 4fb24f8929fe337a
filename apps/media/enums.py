"""
Enumerations for the media app.
"""
from dataclasses import dataclass

from django.db import models


class AssetKind(models.TextChoices):
    """Kind of media stored at the provider."""
    VIDEO = 'video', 'Video'
    IMAGE = 'image', 'Image'


class ModerationStatus(models.TextChoices):
    APPROVED = 'approved', 'Approved'
    FLAGGED = 'flagged', 'Flagged'


class AnalysisTool(models.TextChoices):
    """Analysis add-ons exposed under /ai/."""
    VISION = 'vision', 'Vision Q&A'
    TAGS = 'tags', 'Auto-tagging'
    OCR = 'ocr', 'Text extraction'
    MODERATE = 'moderate', 'Moderation'
    TRANSCRIBE = 'transcribe', 'Transcription'


@dataclass(frozen=True)
class SocialFormat:
    """Output preset a draft can be prepared for."""
    label: str
    width: int
    height: int
    aspect_ratio: str

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "width": self.width,
            "height": self.height,
            "aspect_ratio": self.aspect_ratio,
        }


SOCIAL_FORMATS = (
    SocialFormat('Instagram Square', 1080, 1080, '1:1'),
    SocialFormat('Instagram Portrait', 1080, 1350, '4:5'),
    SocialFormat('X Post', 1200, 675, '16:9'),
    SocialFormat('X Header', 1500, 500, '3:1'),
    SocialFormat('Facebook Cover', 820, 312, '205:78'),
    SocialFormat('LinkedIn Post', 1200, 628, '1.91:1'),
    SocialFormat('Snapchat Story', 1080, 1920, '9:16'),
)

SOCIAL_FORMATS_BY_LABEL = {fmt.label: fmt for fmt in SOCIAL_FORMATS}

SOCIAL_FORMAT_CHOICES = [(fmt.label, fmt.label) for fmt in SOCIAL_FORMATS]
