# apps/media/services/analysis.py

"""
Media analysis backed by provider add-ons and a hosted vision model.

Every method degrades to a clearly labelled placeholder when the add-on is
unavailable, unconfigured or failing. Only bad input fails a request,
never a missing add-on.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

import requests
from django.conf import settings

from apps.core.utils import get_nested_value

from ..enums import AssetKind, ModerationStatus
from ..exceptions import StorageError
from .cloudinary_storage import UPLOADER_TAG_PREFIX, CloudinaryStorageService

logger = logging.getLogger(__name__)


SIMULATED_VISION_RESPONSES = {
    "describe": (
        "This image shows a vibrant scene with rich colors and interesting "
        "composition. The lighting creates a nice atmosphere."
    ),
    "caption": "Living my best life! #photography #moments #beautiful",
    "safe": "Yes, this image appears to be safe for work and appropriate for all audiences.",
    "default": (
        "I can see an interesting image here. It has good visual elements "
        "and appears to be well-composed."
    ),
}

DEMO_TAGS = ["Nature", "Outdoor", "Scenic", "Photography", "Beautiful"]

NO_TEXT_DETECTED = "No text detected in this image."
OCR_PLACEHOLDER = (
    "OCR add-on required. Enable 'Advanced OCR' in your Cloudinary account "
    "to extract text from images.\n\nDemo text: 'Hello World'"
)

NO_SPEECH_DETECTED = "No speech detected in this video."
TRANSCRIPT_PLACEHOLDER = (
    "Transcription add-on required. Enable 'Google AI Video Transcription' "
    "in your Cloudinary account.\n\nDemo transcript: 'Hello, this is a sample "
    "video transcription.'"
)

NO_ISSUES = "No issues detected"
ASSUMED_SAFE = "Content appears safe"

VISION_MAX_TOKENS = 500


@dataclass
class VisionAnswer:
    response: str
    is_placeholder: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TagSuggestions:
    tags: List[str] = field(default_factory=list)
    is_placeholder: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ExtractedText:
    text: str
    is_placeholder: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ModerationReport:
    safe: bool
    categories: List[str]
    status: str
    is_placeholder: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Transcript:
    transcript: str
    is_placeholder: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _simulated_answer(question: str) -> VisionAnswer:
    lowered = question.lower()
    key = next((key for key in ("describe", "caption", "safe") if key in lowered), "default")
    return VisionAnswer(response=SIMULATED_VISION_RESPONSES[key], is_placeholder=True)


def _fetch_resource(public_id: str, **options) -> Dict[str, Any]:
    """
    Resource details for an analysis tool.

    An unconfigured account is reported as a StorageError, like any other
    provider failure, so every tool falls back to its placeholder.
    """
    if not CloudinaryStorageService.is_configured():
        raise StorageError(operation="resource", path=public_id, reason="Cloudinary not configured")
    return CloudinaryStorageService.get_resource(public_id, **options)


class MediaAnalysisService:
    """
    Service class for the /ai/ endpoints.

    All methods are static as this is a stateless service.
    """

    # VISION Q&A

    @staticmethod
    def answer_question(public_id: str, question: str) -> VisionAnswer:
        """
        Ask the vision model a question about an image.

        Without GROQ_API_KEY, or when the upstream call fails, a canned
        answer keyed on the question is returned instead.

        Args:
            public_id: Provider reference of the image
            question: Free-text question

        Returns:
            VisionAnswer
        """
        if not settings.GROQ_API_KEY:
            logger.debug("GROQ_API_KEY not set, returning simulated vision answer")
            return _simulated_answer(question)

        image_url = CloudinaryStorageService.get_delivery_url(public_id, AssetKind.IMAGE)
        payload = {
            "model": settings.GROQ_VISION_MODEL,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": question},
                        {"type": "image_url", "image_url": {"url": image_url}},
                    ],
                }
            ],
            "max_tokens": VISION_MAX_TOKENS,
        }

        try:
            response = requests.post(
                settings.GROQ_API_URL,
                json=payload,
                headers={"Authorization": f"Bearer {settings.GROQ_API_KEY}"},
                timeout=settings.GROQ_TIMEOUT,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Vision request failed for {public_id}: {e}")
            return _simulated_answer(question)

        if not isinstance(data, dict):
            logger.warning(f"Vision response for {public_id} is not a JSON object")
            return _simulated_answer(question)

        choices = data.get("choices")
        first_choice = choices[0] if isinstance(choices, list) and choices else {}
        content = get_nested_value(first_choice, "message.content") or "I couldn't analyze this image."

        return VisionAnswer(response=content)

    # AUTO-TAGGING

    @staticmethod
    def suggest_tags(public_id: str) -> TagSuggestions:
        """
        Tags from the provider, or inferred from colors, format and shape.
        """
        try:
            result = _fetch_resource(
                public_id,
                image_metadata=True,
                colors=True,
                faces=True,
            )
        except StorageError as e:
            logger.warning(f"Tagging failed for {public_id}, returning demo tags: {e}")
            return TagSuggestions(tags=list(DEMO_TAGS), is_placeholder=True)

        tags = [
            tag for tag in (result.get("tags") or [])
            if not tag.startswith(UPLOADER_TAG_PREFIX)
        ]
        if tags:
            return TagSuggestions(tags=tags)

        colors = result.get("colors") or []
        if colors and colors[0]:
            tags.append(f"{str(colors[0][0]).lower()} tones")

        if result.get("format"):
            tags.append(result["format"].upper())

        width = result.get("width") or 0
        height = result.get("height") or 0
        if width > height:
            tags.append("Landscape")
        elif height > width:
            tags.append("Portrait")
        else:
            tags.append("Square")

        tags.extend(["Photo", "Digital"])

        return TagSuggestions(tags=tags)

    # TEXT EXTRACTION

    @staticmethod
    def extract_text(public_id: str) -> ExtractedText:
        try:
            result = _fetch_resource(public_id, ocr="adv_ocr")
        except StorageError as e:
            logger.warning(f"OCR failed for {public_id}: {e}")
            return ExtractedText(text=OCR_PLACEHOLDER, is_placeholder=True)

        blocks = get_nested_value(result, "info.ocr.adv_ocr.data", default=[]) or []
        words = [
            annotation["description"]
            for block in blocks
            for annotation in (block.get("textAnnotations") or [])
            if annotation.get("description")
        ]

        return ExtractedText(text=" ".join(words).strip() or NO_TEXT_DETECTED)

    # MODERATION

    @staticmethod
    def moderate(public_id: str, kind: str = AssetKind.IMAGE) -> ModerationReport:
        """
        Moderation verdict for a stored asset.

        Any rejected moderation entry flags the asset and contributes its
        kind to ``categories``. Unavailable moderation counts as approved.
        """
        resource_type = CloudinaryStorageService._get_resource_type(kind)
        try:
            result = _fetch_resource(
                public_id,
                resource_type=resource_type,
                moderation=True,
            )
        except StorageError as e:
            logger.warning(f"Moderation failed for {public_id}, assuming safe: {e}")
            return ModerationReport(
                safe=True,
                categories=[ASSUMED_SAFE],
                status=ModerationStatus.APPROVED.value,
                is_placeholder=True,
            )

        rejected = [
            entry for entry in (result.get("moderation") or [])
            if entry.get("status") == "rejected"
        ]
        categories = [entry["kind"] for entry in rejected if entry.get("kind")]
        safe = not rejected

        if not safe:
            logger.info(f"Asset {public_id} flagged by moderation: {categories}")

        return ModerationReport(
            safe=safe,
            categories=categories or [NO_ISSUES],
            status=(ModerationStatus.APPROVED if safe else ModerationStatus.FLAGGED).value,
        )

    # TRANSCRIPTION

    @staticmethod
    def transcribe(public_id: str) -> Transcript:
        try:
            result = _fetch_resource(
                public_id,
                resource_type="video",
                raw_convert="google_speech",
            )
        except StorageError as e:
            logger.warning(f"Transcription failed for {public_id}: {e}")
            return Transcript(transcript=TRANSCRIPT_PLACEHOLDER, is_placeholder=True)

        segments = get_nested_value(result, "info.raw_convert.google_speech.data", default=[]) or []
        text = " ".join(
            segment["transcript"] for segment in segments if segment.get("transcript")
        ).strip()

        return Transcript(transcript=text or NO_SPEECH_DETECTED)
