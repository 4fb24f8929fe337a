# apps/media/transformations.py

"""
Delivery-time transformation URLs for Cloudinary-hosted assets.

Edits in the studio (generative fill, object removal, smart crop, ...) are
never rendered by this application. They are encoded as transformation
tokens in the delivery URL and rendered by the provider when the URL is
fetched. Everything here is pure: the same inputs always produce the same
string, and nothing is validated against the provider, so a bad public id
simply yields a URL the provider will reject.

Token order is fixed:

    crop/aspect -> gravity -> generative op -> quality/format

Crop, aspect ratio and gravity share one comma-joined component, the
generative op and the quality flags each get their own component.

No Django imports here; the studio client builds previews from it
without configured settings.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from cloudinary.utils import cloudinary_url


class TransformMode(str, Enum):
    """Studio tools that change the delivered pixels."""
    EXTEND_CANVAS = "extend-canvas"
    REMOVE_OBJECT = "remove-object"
    REPLACE_OBJECT = "replace-object"
    RECOLOR_OBJECT = "recolor-object"
    REPLACE_BACKGROUND = "replace-background"
    RESTORE = "restore"
    SMART_CROP = "smart-crop"
    QUALITY_OPTIMIZE = "quality-optimize"
    HIGHLIGHT_PREVIEW = "highlight-preview"


class AspectRatio(str, Enum):
    SQUARE = "1:1"
    CLASSIC = "4:3"
    WIDESCREEN = "16:9"
    VERTICAL = "9:16"
    ULTRAWIDE = "21:9"
    PORTRAIT = "4:5"


class Gravity(str, Enum):
    AUTO = "auto"
    AUTO_FACES = "auto:faces"
    AUTO_CLASSIC = "auto:classic"
    CENTER = "center"
    NORTH = "north"
    SOUTH = "south"


DEFAULT_GRAVITY = Gravity.AUTO

# Studio highlight previews are short; social teasers use TEASER_DURATION
DEFAULT_PREVIEW_DURATION = 5
TEASER_DURATION = 10

PREVIEW_WIDTH = 720
THUMBNAIL_SIZE = (400, 225)
CARD_SIZE = (400, 400)

CROP_MODES = {
    TransformMode.SMART_CROP: "fill",
    TransformMode.EXTEND_CANVAS: "pad",
}

VIDEO_ONLY_MODES = {TransformMode.HIGHLIGHT_PREVIEW}


@dataclass(frozen=True)
class TransformationRequest:
    """
    One delivery-time edit, as selected in the studio.

    Only ever lives in UI state and is serialized into URL tokens; it is
    never persisted. Plain strings are accepted for the enumerated fields
    and coerced, so an unknown mode/ratio/gravity raises ValueError here
    rather than producing a half-built URL later.
    """
    mode: TransformMode
    prompt: str = ""
    replacement: str = ""
    aspect_ratio: Optional[AspectRatio] = None
    gravity: Optional[Gravity] = None
    quality: Optional[int] = None
    preview_duration: int = DEFAULT_PREVIEW_DURATION

    def __post_init__(self):
        object.__setattr__(self, "mode", TransformMode(self.mode))
        if self.aspect_ratio is not None:
            object.__setattr__(self, "aspect_ratio", AspectRatio(self.aspect_ratio))
        if self.gravity is not None:
            object.__setattr__(self, "gravity", Gravity(self.gravity))


def _crop_component(request: TransformationRequest) -> Optional[str]:
    crop = CROP_MODES.get(request.mode)
    if crop is None:
        return None

    tokens = [f"c_{crop}"]
    if request.aspect_ratio is not None:
        tokens.append(f"ar_{request.aspect_ratio.value}")
    tokens.append(f"g_{(request.gravity or DEFAULT_GRAVITY).value}")

    # Generative fill belongs to the pad crop, so it stays in this component
    if request.mode is TransformMode.EXTEND_CANVAS:
        tokens.append("b_gen_fill")

    return ",".join(tokens)


def _generative_component(request: TransformationRequest) -> Optional[str]:
    mode = request.mode
    prompt = request.prompt or ""
    replacement = request.replacement or ""

    if mode is TransformMode.REMOVE_OBJECT:
        return f"e_gen_remove:prompt_{prompt}" if prompt else None

    if mode is TransformMode.REPLACE_OBJECT:
        if prompt and replacement:
            return f"e_gen_replace:from_{prompt};to_{replacement}"
        return None

    if mode is TransformMode.RECOLOR_OBJECT:
        if prompt and replacement:
            return f"e_gen_recolor:prompt_{prompt};to-color_{replacement}"
        return None

    if mode is TransformMode.REPLACE_BACKGROUND:
        if prompt:
            return f"e_gen_background_replace:prompt_{prompt}"
        return "e_gen_background_replace"

    if mode is TransformMode.RESTORE:
        return "e_gen_restore"

    if mode is TransformMode.HIGHLIGHT_PREVIEW:
        return f"e_preview:duration_{request.preview_duration}"

    return None


def _quality_component(request: TransformationRequest) -> Optional[str]:
    if request.mode is TransformMode.QUALITY_OPTIMIZE:
        return "f_auto,q_auto"

    if request.quality is not None and request.quality < 100:
        return f"q_{request.quality},f_auto"

    return None


def build_transformation(request: Optional[TransformationRequest]) -> str:
    """
    Serialize a request into a Cloudinary raw transformation string.

    Returns an empty string when there is nothing to apply.
    """
    if request is None:
        return ""

    components = (
        _crop_component(request),
        _generative_component(request),
        _quality_component(request),
    )
    return "/".join(component for component in components if component)


def _delivery_url(
    cloud_name: str,
    public_id: str,
    resource_type: str,
    raw_transformation: str = "",
    extension: Optional[str] = None,
) -> str:
    options = {
        "cloud_name": cloud_name,
        "resource_type": resource_type,
        "type": "upload",
        "secure": True,
        "force_version": False,
        "urlAnalytics": False,
    }
    if raw_transformation:
        options["raw_transformation"] = raw_transformation
    if extension:
        options["format"] = extension

    url, _ = cloudinary_url(public_id, **options)
    return url


def build_delivery_url(
    cloud_name: str,
    public_id: str,
    request: Optional[TransformationRequest] = None,
    kind: str = "image",
) -> str:
    """
    Build the fetchable URL for an asset with an optional edit applied.

    Args:
        cloud_name: Cloudinary account name
        public_id: Provider reference of the asset
        request: Edit to apply, or None for the untouched original
        kind: 'image' or 'video'; video-only modes force 'video'

    Returns:
        Absolute https URL
    """
    resource_type = "video" if kind == "video" else "image"
    if request is not None and request.mode in VIDEO_ONLY_MODES:
        resource_type = "video"

    return _delivery_url(
        cloud_name,
        public_id,
        resource_type,
        raw_transformation=build_transformation(request),
    )


def build_thumbnail_url(cloud_name: str, public_id: str) -> str:
    """Poster frame for a video card."""
    width, height = THUMBNAIL_SIZE
    return _delivery_url(
        cloud_name,
        public_id,
        "video",
        raw_transformation=f"c_fill,w_{width},h_{height},so_0",
        extension="jpg",
    )


def build_card_image_url(cloud_name: str, public_id: str) -> str:
    width, height = CARD_SIZE
    return _delivery_url(
        cloud_name,
        public_id,
        "image",
        raw_transformation=f"c_fill,w_{width},h_{height}",
    )


# SOCIAL EXPORT

class ExportMode(str, Enum):
    """Video export presets used by save-copy and the video editor."""
    ORIGINAL = "original"
    SOCIAL = "social"
    TEASER = "teaser"


def build_social_transformation(
    mode: Union[ExportMode, str],
    aspect_ratio: Optional[str] = None,
    quality: int = 100,
    is_compressed: bool = False,
    force_quality: bool = False,
) -> str:
    """
    Build the transformation for a social export of a video.

    Args:
        mode: original, social (crop to ``aspect_ratio``) or teaser
        aspect_ratio: Ratio such as '9:16' or '1.91:1', used by social mode
        quality: 1-100; below 100 emits an explicit quality flag
        is_compressed: Emit automatic quality when no explicit quality applies
        force_quality: Always emit the explicit quality flag (live preview)

    Returns:
        Raw transformation string, possibly empty
    """
    mode = ExportMode(mode)
    components = []

    if mode is ExportMode.SOCIAL and aspect_ratio:
        components.append(f"ar_{aspect_ratio},c_fill,g_auto")
    elif mode is ExportMode.TEASER:
        components.append(f"e_preview:duration_{TEASER_DURATION}")

    if force_quality or quality < 100:
        components.append(f"q_{quality},f_auto")
    elif is_compressed:
        components.append("q_auto,f_auto")

    return "/".join(components)


def build_video_preview_url(
    cloud_name: str,
    public_id: str,
    mode: Union[ExportMode, str] = ExportMode.ORIGINAL,
    aspect_ratio: Optional[str] = None,
    quality: int = 100,
) -> str:
    """Scaled-down live preview shown while configuring an export."""
    export = build_social_transformation(mode, aspect_ratio, quality, force_quality=True)
    raw = "/".join(part for part in (f"w_{PREVIEW_WIDTH}", export) if part)
    return _delivery_url(cloud_name, public_id, "video", raw_transformation=raw, extension="mp4")


def build_video_download_url(
    cloud_name: str,
    public_id: str,
    mode: Union[ExportMode, str] = ExportMode.ORIGINAL,
    aspect_ratio: Optional[str] = None,
    quality: int = 100,
) -> str:
    """Full-size export; quality flags only appear when quality < 100."""
    raw = build_social_transformation(mode, aspect_ratio, quality)
    return _delivery_url(cloud_name, public_id, "video", raw_transformation=raw, extension="mp4")
